"""
Conversation sessions with their transcripts, AI messages and summary.
"""

from __future__ import annotations

import concurrent.futures
import json
import logging
from typing import Callable, Optional

from backend.db import DocumentStore
from shared.constants import DEFAULT_SESSION_TITLE, DEFAULT_SESSION_TYPE
from shared.firebase_constants import (
    ai_messages_path,
    session_path,
    sessions_path,
    summary_path,
    transcripts_path,
)
from shared.types import (
    AiMessage,
    MessageRole,
    Session,
    SessionDetails,
    Summary,
    SyncState,
    Transcript,
)
from shared.utils import optional_timestamp_to_unix, timestamp_to_unix, utc_now

logger = logging.getLogger(__name__)

SESSION_DETAIL_WORKERS = 4


class SessionNotFoundError(Exception):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__("Session not found")


def _to_session(session_id: str, uid: str, data: dict) -> Session:
    started_at = timestamp_to_unix(data["startedAt"])
    return Session(
        id=session_id,
        uid=uid,
        title=data.get("title", ""),
        session_type=data.get("session_type", DEFAULT_SESSION_TYPE),
        started_at=started_at,
        ended_at=optional_timestamp_to_unix(data.get("endedAt")),
        sync_state=SyncState.CLEAN,
        updated_at=started_at,
    )


def _to_transcript(transcript_id: str, session_id: str, data: dict) -> Transcript:
    return Transcript(
        id=transcript_id,
        session_id=session_id,
        start_at=timestamp_to_unix(data["startAt"]),
        end_at=optional_timestamp_to_unix(data.get("endAt")),
        speaker=data.get("speaker"),
        text=data.get("text", ""),
        lang=data.get("lang"),
        created_at=timestamp_to_unix(data["createdAt"]),
    )


def _to_ai_message(message_id: str, session_id: str, data: dict) -> AiMessage:
    return AiMessage(
        id=message_id,
        session_id=session_id,
        sent_at=timestamp_to_unix(data["sentAt"]),
        role=MessageRole(data["role"]),
        content=data.get("content", ""),
        tokens=data.get("tokens"),
        model=data.get("model"),
        created_at=timestamp_to_unix(data["createdAt"]),
    )


def _to_summary(session_id: str, data: dict) -> Summary:
    generated_at = timestamp_to_unix(data["generatedAt"])
    return Summary(
        session_id=session_id,
        generated_at=generated_at,
        model=data.get("model"),
        text=data.get("text", ""),
        tldr=data.get("tldr", ""),
        bullet_json=json.dumps(data.get("bulletPoints", [])),
        action_json=json.dumps(data.get("actionItems", [])),
        tokens_used=data.get("tokensUsed"),
        updated_at=generated_at,
    )


class SessionStore:
    def __init__(self, db: DocumentStore, clock: Callable = utc_now):
        self.db = db
        self.clock = clock

    def create_session(
        self,
        uid: str,
        title: Optional[str] = None,
        session_type: str = DEFAULT_SESSION_TYPE,
    ) -> str:
        session_id = self.db.add(
            sessions_path(uid),
            {
                "uid": uid,
                "title": title or DEFAULT_SESSION_TITLE,
                "session_type": session_type,
                "startedAt": self.clock(),
                "endedAt": None,
            },
        )
        logger.info("Created session %s for %s", session_id, uid)
        return session_id

    def end_session(self, uid: str, session_id: str) -> None:
        self.db.update(session_path(uid, session_id), {"endedAt": self.clock()})

    def list_sessions(self, uid: str) -> list[Session]:
        docs = self.db.query(sessions_path(uid), order_by="startedAt", descending=True)
        return [_to_session(doc_id, uid, data) for doc_id, data in docs]

    def get_session(self, uid: str, session_id: str) -> Optional[Session]:
        data = self.db.get(session_path(uid, session_id))
        if data is None:
            return None
        return _to_session(session_id, uid, data)

    def list_transcripts(self, uid: str, session_id: str) -> list[Transcript]:
        docs = self.db.query(transcripts_path(uid, session_id), order_by="startAt")
        return [_to_transcript(doc_id, session_id, data) for doc_id, data in docs]

    def list_ai_messages(self, uid: str, session_id: str) -> list[AiMessage]:
        docs = self.db.query(ai_messages_path(uid, session_id), order_by="sentAt")
        return [_to_ai_message(doc_id, session_id, data) for doc_id, data in docs]

    def get_summary(self, uid: str, session_id: str) -> Optional[Summary]:
        data = self.db.get(summary_path(uid, session_id))
        if data is None:
            return None
        return _to_summary(session_id, data)

    def get_session_details(self, uid: str, session_id: str) -> SessionDetails:
        """
        Fetches a session together with its transcripts, messages and summary.

        The four reads run concurrently. Raises SessionNotFoundError if the
        session document itself does not exist.
        """
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=SESSION_DETAIL_WORKERS
        ) as executor:
            session_future = executor.submit(self.get_session, uid, session_id)
            transcripts_future = executor.submit(self.list_transcripts, uid, session_id)
            messages_future = executor.submit(self.list_ai_messages, uid, session_id)
            summary_future = executor.submit(self.get_summary, uid, session_id)

            session = session_future.result()
            transcripts = transcripts_future.result()
            ai_messages = messages_future.result()
            summary = summary_future.result()

        if session is None:
            raise SessionNotFoundError(session_id)

        return SessionDetails(
            session=session,
            transcripts=transcripts,
            ai_messages=ai_messages,
            summary=summary,
        )

    def delete_session(self, uid: str, session_id: str) -> None:
        # Firestore does not cascade deletes to subcollections.
        for collection_path in (
            transcripts_path(uid, session_id),
            ai_messages_path(uid, session_id),
        ):
            for doc_id, _ in self.db.query(collection_path):
                self.db.delete(f"{collection_path}/{doc_id}")
        self.db.delete(summary_path(uid, session_id))
        self.db.delete(session_path(uid, session_id))
        logger.info("Deleted session %s for %s", session_id, uid)

    def search_conversations(self, uid: str, query: str) -> list[Session]:
        """Case-insensitive substring match over session titles."""
        if not query.strip():
            return []
        needle = query.lower()
        return [
            session
            for session in self.list_sessions(uid)
            if needle in session.title.lower()
        ]

    def add_transcript(
        self,
        uid: str,
        session_id: str,
        text: str,
        start_at=None,
        end_at=None,
        speaker: Optional[str] = None,
        lang: Optional[str] = None,
    ) -> str:
        now = self.clock()
        return self.db.add(
            transcripts_path(uid, session_id),
            {
                "startAt": start_at or now,
                "endAt": end_at,
                "speaker": speaker,
                "text": text,
                "lang": lang,
                "createdAt": now,
            },
        )

    def add_ai_message(
        self,
        uid: str,
        session_id: str,
        role: MessageRole,
        content: str,
        tokens: Optional[int] = None,
        model: Optional[str] = None,
    ) -> str:
        now = self.clock()
        return self.db.add(
            ai_messages_path(uid, session_id),
            {
                "sentAt": now,
                "role": str(MessageRole(role)),
                "content": content,
                "tokens": tokens,
                "model": model,
                "createdAt": now,
            },
        )

    def save_summary(
        self,
        uid: str,
        session_id: str,
        text: str,
        tldr: str,
        bullet_points: list[str],
        action_items: list[str],
        model: Optional[str] = None,
        tokens_used: Optional[int] = None,
    ) -> None:
        """Writes the session's single summary, replacing any previous one."""
        self.db.set(
            summary_path(uid, session_id),
            {
                "generatedAt": self.clock(),
                "model": model,
                "text": text,
                "tldr": tldr,
                "bulletPoints": bullet_points,
                "actionItems": action_items,
                "tokensUsed": tokens_used,
            },
        )
