import json
import os
import tempfile
import unittest
from unittest.mock import MagicMock

from backend.auth_state import (
    PROFILE_INIT_ERROR,
    AuthSession,
    AuthStateObserver,
    FileLocalStorage,
    InMemoryLocalStorage,
    UserInfoEmitter,
    get_user_info,
    set_user_info,
)
from backend.db import InMemoryDocumentStore
from backend.identity import Identity
from backend.users import ProfileBootstrapError, UserStore
from shared.constants import USER_INFO_CHANGED_EVENT, USER_INFO_STORAGE_KEY
from shared.types import UserProfile

ADA = Identity(uid="u1", email="ada@example.com", display_name="Ada")


class UserInfoMirrorTests(unittest.TestCase):
    def setUp(self):
        self.storage = InMemoryLocalStorage()
        self.emitter = UserInfoEmitter()

    def test_round_trip(self):
        profile = UserProfile(uid="u1", display_name="Ada", email="ada@example.com")
        set_user_info(self.storage, profile)

        self.assertEqual(
            json.loads(self.storage.get_item(USER_INFO_STORAGE_KEY)),
            {"uid": "u1", "display_name": "Ada", "email": "ada@example.com"},
        )
        self.assertEqual(get_user_info(self.storage), profile)

    def test_corrupt_value_is_removed(self):
        self.storage.set_item(USER_INFO_STORAGE_KEY, "{not json")

        with self.assertLogs("backend.auth_state", level="ERROR"):
            self.assertIsNone(get_user_info(self.storage))
        self.assertIsNone(self.storage.get_item(USER_INFO_STORAGE_KEY))

    def test_set_notifies_listeners_and_event(self):
        received = []
        events = []
        self.emitter.subscribe(received.append)
        self.emitter.add_event_listener(USER_INFO_CHANGED_EVENT, lambda: events.append(1))

        profile = UserProfile(uid="u1", display_name="Ada", email="ada@example.com")
        set_user_info(self.storage, profile, self.emitter)
        set_user_info(self.storage, None, self.emitter)

        self.assertEqual(received, [profile, None])
        self.assertEqual(len(events), 2)

    def test_skip_events(self):
        listener = MagicMock()
        self.emitter.subscribe(listener)

        set_user_info(
            self.storage,
            UserProfile(uid="u1", display_name="Ada", email="ada@example.com"),
            self.emitter,
            skip_events=True,
        )

        listener.assert_not_called()
        self.assertIsNotNone(get_user_info(self.storage))

    def test_unsubscribe_and_close(self):
        first = MagicMock()
        second = MagicMock()
        unsubscribe = self.emitter.subscribe(first)
        self.emitter.subscribe(second)

        unsubscribe()
        self.emitter.emit(None)
        first.assert_not_called()
        second.assert_called_once_with(None)

        self.emitter.close()
        self.emitter.emit(None)
        second.assert_called_once()


class FileLocalStorageTests(unittest.TestCase):
    def test_persists_between_instances(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "nested", "storage.json")
            FileLocalStorage(path).set_item("key", "value")

            storage = FileLocalStorage(path)
            self.assertEqual(storage.get_item("key"), "value")
            storage.remove_item("key")
            self.assertIsNone(FileLocalStorage(path).get_item("key"))

    def test_missing_file_reads_empty(self):
        with tempfile.TemporaryDirectory() as tmp:
            storage = FileLocalStorage(os.path.join(tmp, "none.json"))
            self.assertIsNone(storage.get_item("key"))

    def test_corrupt_file_reads_empty(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "storage.json")
            with open(path, "w", encoding="utf-8") as f:
                f.write("{not json")
            storage = FileLocalStorage(path)

            self.assertIsNone(get_user_info(storage))

            storage.set_item("key", "value")
            self.assertEqual(FileLocalStorage(path).get_item("key"), "value")


class AuthSessionTests(unittest.TestCase):
    def test_listener_gets_current_identity_immediately(self):
        session = AuthSession()
        session.set_identity(ADA)
        listener = MagicMock()

        session.on_auth_state_changed(listener)
        listener.assert_called_once_with(ADA)

    def test_unsubscribe(self):
        session = AuthSession()
        listener = MagicMock()
        unsubscribe = session.on_auth_state_changed(listener)
        unsubscribe()

        session.set_identity(ADA)
        listener.assert_called_once_with(None)


class AuthStateObserverTests(unittest.TestCase):
    def setUp(self):
        self.session = AuthSession()
        self.users = UserStore(InMemoryDocumentStore())
        self.storage = InMemoryLocalStorage()
        self.emitter = UserInfoEmitter()

    def _observer(self, users=None):
        return AuthStateObserver(
            self.session, users or self.users, self.storage, self.emitter
        )

    def test_initial_state_without_identity(self):
        observer = self._observer()

        self.assertFalse(observer.state.is_loading)
        self.assertFalse(observer.state.is_authenticated)
        self.assertFalse(observer.state.show_sidebar)
        self.assertIsNone(observer.state.user)

    def test_sign_in_bootstraps_and_mirrors(self):
        observer = self._observer()
        events = []
        self.emitter.add_event_listener(USER_INFO_CHANGED_EVENT, lambda: events.append(1))

        self.session.set_identity(ADA)

        expected = UserProfile(uid="u1", display_name="Ada", email="ada@example.com")
        self.assertEqual(observer.state.user, expected)
        self.assertTrue(observer.state.is_authenticated)
        self.assertTrue(observer.state.show_sidebar)
        self.assertEqual(self.users.get_user("u1")["displayName"], "Ada")
        self.assertEqual(get_user_info(self.storage), expected)
        self.assertEqual(events, [1])

    def test_placeholders_for_missing_identity_fields(self):
        observer = self._observer()
        self.session.set_identity(Identity(uid="u2"))

        self.assertEqual(observer.state.user.display_name, "User")
        self.assertEqual(observer.state.user.email, "no-email@example.com")

    def test_sign_out_clears_user_and_mirror(self):
        observer = self._observer()
        self.session.set_identity(ADA)
        self.session.sign_out()

        self.assertIsNone(observer.state.user)
        self.assertFalse(observer.state.show_sidebar)
        self.assertIsNone(get_user_info(self.storage))

    def test_bootstrap_failure_sets_error(self):
        users = MagicMock()
        users.find_or_create_user.side_effect = ProfileBootstrapError("down")
        observer = self._observer(users)

        self.session.set_identity(ADA)

        self.assertEqual(observer.state.error, PROFILE_INIT_ERROR)
        self.assertIsNone(observer.state.user)
        self.assertFalse(observer.state.is_loading)
        self.assertFalse(observer.state.show_sidebar)
        self.assertIsNone(get_user_info(self.storage))

    def test_close_stops_following_session(self):
        observer = self._observer()
        observer.close()

        self.session.set_identity(ADA)
        self.assertIsNone(observer.state.user)


if __name__ == "__main__":
    unittest.main()
