"""
Fetches several dashboard datasets for one user in a single call.
"""

from __future__ import annotations

import concurrent.futures
from typing import Iterable, Optional

from backend.presets import PromptPresetStore
from backend.sessions import SessionStore
from backend.users import UserStore
from shared.api import BatchData

BATCH_SECTIONS = ("profile", "presets", "sessions")


def get_batch_data(
    uid: str,
    include: Iterable[str],
    users: UserStore,
    presets: PromptPresetStore,
    sessions: SessionStore,
    display_name: Optional[str] = None,
    email: Optional[str] = None,
) -> BatchData:
    """Unknown section names are ignored."""
    loaders = {
        "profile": lambda: users.get_user_profile(uid, display_name, email),
        "presets": lambda: presets.list_presets(uid),
        "sessions": lambda: sessions.list_sessions(uid),
    }
    wanted = [name for name in BATCH_SECTIONS if name in set(include)]

    result = BatchData()
    if not wanted:
        return result

    with concurrent.futures.ThreadPoolExecutor(max_workers=len(wanted)) as executor:
        futures = {name: executor.submit(loaders[name]) for name in wanted}
        for name, future in futures.items():
            setattr(result, name, future.result())
    return result
