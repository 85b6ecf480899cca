import unittest

from backend.ai_profiles import AiProfileStore
from backend.auth import AuthService, auth_error_status
from backend.auth_state import (
    AuthSession,
    AuthStateObserver,
    InMemoryLocalStorage,
    UserInfoEmitter,
    get_user_info,
)
from backend.db import InMemoryDocumentStore
from backend.identity import InMemoryIdentityClient
from backend.presets import PromptPresetStore
from backend.sessions import SessionStore
from backend.users import UserStore
from shared.api import CreateAiProfileData
from shared.auth_errors import AuthError
from shared.types import MessageRole, Provider


class AuthServiceTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDocumentStore()
        self.identity = InMemoryIdentityClient()
        self.users = UserStore(self.db)
        self.sessions = SessionStore(self.db)
        self.profiles = AiProfileStore(self.db)
        self.presets = PromptPresetStore(self.db)
        self.session = AuthSession()
        self.storage = InMemoryLocalStorage()
        self.emitter = UserInfoEmitter()
        self.service = AuthService(
            identity=self.identity,
            users=self.users,
            sessions=self.sessions,
            profiles=self.profiles,
            presets=self.presets,
            auth_session=self.session,
            storage=self.storage,
            emitter=self.emitter,
        )

    def test_sign_up_uses_given_display_name(self):
        observer = AuthStateObserver(self.session, self.users, self.storage, self.emitter)

        result = self.service.sign_up(" new@example.com ", "Secret123", " New User ")

        self.assertEqual(result.profile.display_name, "New User")
        self.assertEqual(result.profile.email, "new@example.com")
        self.assertEqual(self.users.get_user(result.identity.uid)["displayName"], "New User")
        self.assertEqual(observer.state.user.display_name, "New User")
        self.assertEqual(get_user_info(self.storage).display_name, "New User")

    def test_sign_in_returns_identity_profile(self):
        uid = self.service.sign_up("ada@example.com", "Secret123", "Ada").identity.uid
        self.users.update_user(uid, "Stored Name")

        result = self.service.sign_in("ada@example.com", "Secret123")

        self.assertEqual(result.profile.display_name, "Ada")
        self.assertEqual(self.users.get_user(uid)["displayName"], "Stored Name")

    def test_sign_up_existing_email(self):
        self.service.sign_up("ada@example.com", "Secret123", "Ada")

        with self.assertRaises(AuthError) as ctx:
            self.service.sign_up("ada@example.com", "Secret123", "Ada")
        self.assertEqual(ctx.exception.code, "auth/email-already-in-use")
        self.assertEqual(
            ctx.exception.message, "An account with this email already exists."
        )

    def test_sign_in(self):
        created = self.service.sign_up("ada@example.com", "Secret123", "Ada")
        self.service.sign_out()

        result = self.service.sign_in("ada@example.com", "Secret123")

        self.assertEqual(result.identity.uid, created.identity.uid)
        self.assertEqual(self.session.current_identity.uid, created.identity.uid)

    def test_sign_in_errors(self):
        self.service.sign_up("ada@example.com", "Secret123", "Ada")

        with self.assertRaises(AuthError) as ctx:
            self.service.sign_in("ada@example.com", "wrong")
        self.assertEqual(ctx.exception.message, "Incorrect password.")

        with self.assertRaises(AuthError) as ctx:
            self.service.sign_in("nobody@example.com", "Secret123")
        self.assertEqual(
            ctx.exception.message, "No account found with this email address."
        )

    def test_google_sign_in_bootstraps_profile(self):
        self.identity.register_google_account("google-token", "g@example.com", "Gee")

        result = self.service.sign_in_with_google("google-token")

        self.assertEqual(result.profile.display_name, "Gee")
        self.assertIsNotNone(self.users.get_user(result.identity.uid))

    def test_sign_out_clears_session_and_storage(self):
        self.service.sign_up("ada@example.com", "Secret123", "Ada")
        AuthStateObserver(self.session, self.users, self.storage, self.emitter)
        self.storage.set_item("openai_api_key", "legacy")

        self.service.sign_out()

        self.assertIsNone(self.session.current_identity)
        self.assertIsNone(get_user_info(self.storage))
        self.assertIsNone(self.storage.get_item("openai_api_key"))

    def test_reset_password(self):
        self.service.sign_up("ada@example.com", "Secret123", "Ada")
        self.service.reset_password(" ada@example.com ")
        self.assertEqual(self.identity.password_resets, ["ada@example.com"])

    def test_delete_account_removes_everything(self):
        result = self.service.sign_up("ada@example.com", "Secret123", "Ada")
        uid = result.identity.uid
        session_id = self.sessions.create_session(uid, "Standup")
        self.sessions.add_ai_message(uid, session_id, MessageRole.USER, "hi")
        self.profiles.create_profile(
            uid,
            CreateAiProfileData(
                name="Work",
                description="",
                model="gpt-4",
                provider=Provider.OPENAI,
                temperature=0.7,
                max_tokens=2048,
                system_prompt="",
            ),
        )
        self.presets.create_preset(uid, "Sales", "prompt")

        self.service.delete_account(uid)

        self.assertIsNone(self.users.get_user(uid))
        self.assertEqual(self.sessions.list_sessions(uid), [])
        self.assertEqual(self.sessions.list_ai_messages(uid, session_id), [])
        self.assertEqual(self.profiles.list_profiles(uid), [])
        self.assertEqual(self.presets.list_presets(uid), [])
        self.assertIsNone(self.session.current_identity)
        with self.assertRaises(AuthError):
            self.service.sign_in("ada@example.com", "Secret123")

    def test_error_status_mapping(self):
        self.assertEqual(auth_error_status("auth/wrong-password"), 401)
        self.assertEqual(auth_error_status("auth/email-already-in-use"), 409)
        self.assertEqual(auth_error_status("auth/too-many-requests"), 429)
        self.assertEqual(auth_error_status("auth/internal-error"), 500)


if __name__ == "__main__":
    unittest.main()
