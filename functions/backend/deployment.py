"""
Pre-deploy checks for the Firebase project layout.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentCheck:
    description: str
    test: Callable[[str], bool]


@dataclass
class ValidationReport:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    passed: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _contains(needle: str) -> Callable[[str], bool]:
    return lambda content: needle in content


REQUIRED_FILES = (
    ("firebase.json", "Firebase configuration"),
    ("firestore.rules", "Firestore security rules"),
    (".firebaserc", "Firebase project configuration"),
    ("functions/main.py", "Functions entry point"),
    ("functions/requirements.txt", "Functions requirements"),
)

OPTIONAL_FILES = (("firestore.indexes.json", "Firestore indexes"),)

CONTENT_CHECKS = {
    "firebase.json": (
        ContentCheck("Contains hosting configuration", _contains('"hosting"')),
        ContentCheck("Contains functions configuration", _contains('"functions"')),
        ContentCheck(
            "Contains firestore rules reference",
            _contains('"rules": "firestore.rules"'),
        ),
    ),
    "firestore.rules": (
        ContentCheck("Uses rules version 2", _contains("rules_version = '2'")),
        ContentCheck("Contains user access rules", _contains("match /users/{userId}")),
    ),
    "functions/requirements.txt": (
        ContentCheck("Has firebase-functions dependency", _contains("firebase-functions")),
        ContentCheck("Has firebase-admin dependency", _contains("firebase-admin")),
    ),
}


def check_file_exists(
    root: Path,
    relative_path: str,
    description: str,
    report: ValidationReport,
    required: bool = True,
) -> bool:
    if (root / relative_path).is_file():
        report.passed.append(f"{description}: {relative_path}")
        return True
    if required:
        report.errors.append(f"{description}: {relative_path} is missing")
    else:
        report.warnings.append(f"{description}: {relative_path} is missing (optional)")
    return False


def check_file_content(
    root: Path,
    relative_path: str,
    checks: Sequence[ContentCheck],
    report: ValidationReport,
) -> bool:
    path = root / relative_path
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        report.errors.append(f"Cannot validate {relative_path}: {e}")
        return False

    all_passed = True
    for check in checks:
        if check.test(content):
            report.passed.append(f"{relative_path}: {check.description}")
        else:
            report.errors.append(f"{relative_path}: {check.description} (failed)")
            all_passed = False
    return all_passed


def validate_deployment(root: Path) -> ValidationReport:
    """Checks that the files a `firebase deploy` needs are present and sane."""
    report = ValidationReport()
    for relative_path, description in REQUIRED_FILES:
        check_file_exists(root, relative_path, description, report)
    for relative_path, description in OPTIONAL_FILES:
        check_file_exists(root, relative_path, description, report, required=False)
    for relative_path, checks in CONTENT_CHECKS.items():
        check_file_content(root, relative_path, checks, report)

    for message in report.passed:
        logger.info("OK %s", message)
    for message in report.warnings:
        logger.warning(message)
    for message in report.errors:
        logger.error(message)
    return report
