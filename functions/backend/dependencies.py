"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

import firebase_admin

from backend.ai_profiles import AiProfileStore
from backend.auth import AuthService
from backend.config import Settings, get_settings
from backend.db import DocumentStore, FirestoreDocumentStore, InMemoryDocumentStore
from backend.identity import FirebaseIdentityClient, IdentityClient, InMemoryIdentityClient
from backend.presets import PromptPresetStore
from backend.sessions import SessionStore
from backend.users import UserStore

logger = logging.getLogger(__name__)

_document_store: DocumentStore | None = None
_identity_client: IdentityClient | None = None


def _use_in_memory(settings: Settings) -> bool:
    return settings.use_in_memory_backends or not settings.firebase_project_id


def _ensure_firebase_app(settings: Settings) -> firebase_admin.App:
    try:
        return firebase_admin.get_app()
    except ValueError:
        return firebase_admin.initialize_app(
            options={"projectId": settings.firebase_project_id}
        )


def get_document_store() -> DocumentStore:
    """
    Return a singleton document store so in-memory data persists across requests.
    """
    global _document_store
    if _document_store:
        return _document_store

    settings = get_settings()
    if _use_in_memory(settings):
        logger.info("Using in-memory document store")
        _document_store = InMemoryDocumentStore()
    else:
        _ensure_firebase_app(settings)
        _document_store = FirestoreDocumentStore()
    return _document_store


def get_identity_client() -> IdentityClient:
    global _identity_client
    if _identity_client:
        return _identity_client

    settings = get_settings()
    if _use_in_memory(settings) or not settings.firebase_web_api_key:
        logger.info("Using in-memory identity client")
        _identity_client = InMemoryIdentityClient()
    else:
        _ensure_firebase_app(settings)
        _identity_client = FirebaseIdentityClient(
            api_key=settings.firebase_web_api_key,
            identity_toolkit_url=settings.identity_toolkit_url,
            secure_token_url=settings.secure_token_url,
            timeout=settings.request_timeout,
        )
    return _identity_client


def get_user_store() -> UserStore:
    return UserStore(get_document_store())


def get_ai_profile_store() -> AiProfileStore:
    return AiProfileStore(get_document_store())


def get_session_store() -> SessionStore:
    return SessionStore(get_document_store())


def get_preset_store() -> PromptPresetStore:
    return PromptPresetStore(get_document_store())


def get_auth_service() -> AuthService:
    """Stateless account service; the API keeps no signed-in session."""
    db = get_document_store()
    return AuthService(
        identity=get_identity_client(),
        users=UserStore(db),
        sessions=SessionStore(db),
        profiles=AiProfileStore(db),
        presets=PromptPresetStore(db),
    )
