"""
Backend package for the Pickle Glass dashboard API.

This package provides a FastAPI application over per-user Firestore stores and
Firebase Authentication, with in-memory stand-ins for local development.
"""
