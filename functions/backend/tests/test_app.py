import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from backend import dependencies
from backend.app import create_app
from backend.config import Settings, get_settings
from backend.db import InMemoryDocumentStore
from backend.identity import InMemoryIdentityClient

PASSWORD = "Secret123"


class BackendApiTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDocumentStore()
        self.identity = InMemoryIdentityClient()
        for name, value in (
            ("_document_store", self.db),
            ("_identity_client", self.identity),
        ):
            patcher = patch.object(dependencies, name, value)
            patcher.start()
            self.addCleanup(patcher.stop)

        self.settings = Settings(environment="production", api_url=None)
        self.app = create_app()
        self.app.dependency_overrides[get_settings] = lambda: self.settings
        self.client = TestClient(self.app)

    def _signup(self, email="ada@example.com", display_name="Ada"):
        response = self.client.post(
            "/api/auth/signup",
            json={
                "email": email,
                "display_name": display_name,
                "password": PASSWORD,
                "confirm_password": PASSWORD,
            },
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def _headers(self, email="ada@example.com"):
        token = self._signup(email)["id_token"]
        return {"Authorization": f"Bearer {token}"}

    # Auth

    def test_signup_creates_profile(self):
        payload = self._signup()

        self.assertEqual(payload["user"]["display_name"], "Ada")
        self.assertEqual(payload["user"]["email"], "ada@example.com")
        self.assertTrue(payload["id_token"])
        self.assertIsNotNone(self.db.get(f"users/{payload['user']['uid']}"))

    def test_signup_validation_errors(self):
        response = self.client.post(
            "/api/auth/signup",
            json={
                "email": "not-an-email",
                "display_name": "",
                "password": PASSWORD,
                "confirm_password": "Different1",
            },
        )

        self.assertEqual(response.status_code, 400)
        detail = response.json()["detail"]
        self.assertEqual(detail["message"], "Validation failed")
        self.assertIn("email", detail["errors"])
        self.assertIn("confirmPassword", detail["errors"])

    def test_signup_duplicate_email(self):
        self._signup()
        response = self.client.post(
            "/api/auth/signup",
            json={
                "email": "ada@example.com",
                "display_name": "Ada",
                "password": PASSWORD,
                "confirm_password": PASSWORD,
            },
        )

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["detail"]["code"], "auth/email-already-in-use")

    def test_login(self):
        self._signup()

        response = self.client.post(
            "/api/auth/login", json={"email": " ada@example.com ", "password": PASSWORD}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["display_name"], "Ada")

        response = self.client.post(
            "/api/auth/login", json={"email": "ada@example.com", "password": "wrong-pass1"}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"]["code"], "auth/wrong-password")

    def test_google_sign_in(self):
        self.identity.register_google_account("google-token", "grace@example.com", "Grace")

        response = self.client.post("/api/auth/google", json={"id_token": "google-token"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["display_name"], "Grace")

        response = self.client.post("/api/auth/google", json={"id_token": "unknown"})
        self.assertEqual(response.status_code, 401)

    def test_password_reset(self):
        self._signup()

        response = self.client.post(
            "/api/auth/password-reset", json={"email": "ada@example.com"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})
        self.assertEqual(self.identity.password_resets, ["ada@example.com"])

        response = self.client.post("/api/auth/password-reset", json={"email": ""})
        self.assertEqual(response.status_code, 400)

    def test_desktop_handoff_deep_link(self):
        payload = self._signup()
        headers = {"Authorization": f"Bearer {payload['id_token']}"}

        response = self.client.post(
            "/api/auth/desktop-handoff", params={"mode": "electron"}, headers=headers
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["kind"], "deep_link")
        self.assertTrue(body["target"].startswith("pickleglass://auth-success?"))
        self.assertIn(f"uid={payload['user']['uid']}", body["target"])
        self.assertIn(f"token={payload['id_token']}", body["target"])

    def test_desktop_handoff_outside_electron_navigates_home(self):
        response = self.client.post("/api/auth/desktop-handoff", headers=self._headers())

        self.assertEqual(response.json(), {"kind": "navigate", "target": "/"})

    def test_desktop_handoff_without_token_in_development(self):
        self.settings = Settings(environment="development")

        response = self.client.post(
            "/api/auth/desktop-handoff",
            params={"mode": "electron"},
            headers={"X-User-ID": "dev-user"},
        )

        self.assertEqual(response.status_code, 401)

    # Current user

    def test_requires_authentication(self):
        self.assertEqual(self.client.get("/api/me").status_code, 401)
        response = self.client.get("/api/me", headers={"Authorization": "Bearer bogus"})
        self.assertEqual(response.status_code, 401)

    def test_user_id_header_only_in_development(self):
        self.assertEqual(
            self.client.get("/api/me", headers={"X-User-ID": "dev-user"}).status_code,
            401,
        )

        self.settings = Settings(environment="development")
        response = self.client.get("/api/me", headers={"X-User-ID": "dev-user"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {"uid": "dev-user", "display_name": "User", "email": "no-email@example.com"},
        )

    def test_me_update_and_delete(self):
        headers = self._headers()

        response = self.client.patch(
            "/api/me", json={"display_name": "  Countess  "}, headers=headers
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["display_name"], "Countess")

        response = self.client.patch("/api/me", json={"display_name": ""}, headers=headers)
        self.assertEqual(response.status_code, 400)

        self.assertEqual(self.client.delete("/api/me", headers=headers).status_code, 204)
        self.assertEqual(self.client.get("/api/me", headers=headers).status_code, 401)

    # AI profiles

    def test_ai_profile_default_is_exclusive(self):
        headers = self._headers()
        body = {"name": "Fast", "model": "gpt-4o-mini", "provider": "openai"}

        first = self.client.post(
            "/api/ai-profiles", json={**body, "is_default": True}, headers=headers
        ).json()["id"]
        second = self.client.post(
            "/api/ai-profiles",
            json={**body, "name": "Smart", "api_key": "sk-test"},
            headers=headers,
        ).json()["id"]

        default = self.client.get("/api/ai-profiles/default", headers=headers).json()
        self.assertEqual(default["id"], first)

        response = self.client.post(f"/api/ai-profiles/{second}/default", headers=headers)
        self.assertEqual(response.status_code, 204)

        profiles = self.client.get("/api/ai-profiles", headers=headers).json()
        defaults = [p["id"] for p in profiles if p["is_default"]]
        self.assertEqual(defaults, [second])

        smart = self.client.get(f"/api/ai-profiles/{second}", headers=headers).json()
        self.assertEqual(smart["api_key"], "sk-test")

    def test_ai_profile_update_delete_and_missing(self):
        headers = self._headers()
        profile_id = self.client.post(
            "/api/ai-profiles",
            json={"name": "Fast", "model": "gpt-4o-mini", "provider": "openai"},
            headers=headers,
        ).json()["id"]

        response = self.client.patch(
            f"/api/ai-profiles/{profile_id}", json={"temperature": 0.2}, headers=headers
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["temperature"], 0.2)

        self.assertEqual(
            self.client.get("/api/ai-profiles/default", headers=headers).status_code, 404
        )
        self.assertEqual(
            self.client.post("/api/ai-profiles/missing/default", headers=headers).status_code,
            404,
        )
        self.assertEqual(
            self.client.delete(f"/api/ai-profiles/{profile_id}", headers=headers).status_code,
            204,
        )
        self.assertEqual(
            self.client.get(f"/api/ai-profiles/{profile_id}", headers=headers).status_code,
            404,
        )

    def test_ai_model_presets(self):
        response = self.client.get("/api/ai-model-presets", headers=self._headers())

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json())

    # Sessions

    def test_sessions_create_search_and_delete(self):
        headers = self._headers()
        standup = self.client.post(
            "/api/sessions", json={"title": "Daily Standup"}, headers=headers
        ).json()["id"]
        self.client.post("/api/sessions", json={"title": "Design review"}, headers=headers)

        self.assertEqual(len(self.client.get("/api/sessions", headers=headers).json()), 2)

        results = self.client.get(
            "/api/sessions/search", params={"q": "standup"}, headers=headers
        ).json()
        self.assertEqual([s["id"] for s in results], [standup])

        details = self.client.get(f"/api/sessions/{standup}", headers=headers).json()
        self.assertEqual(details["session"]["title"], "Daily Standup")
        self.assertEqual(details["transcripts"], [])
        self.assertIsNone(details["summary"])

        self.assertEqual(
            self.client.delete(f"/api/sessions/{standup}", headers=headers).status_code, 204
        )
        response = self.client.get(f"/api/sessions/{standup}", headers=headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "Session not found")

    def test_sessions_are_per_user(self):
        ada = self._headers("ada@example.com")
        grace = self._headers("grace@example.com")
        session_id = self.client.post(
            "/api/sessions", json={"title": "Private"}, headers=ada
        ).json()["id"]

        self.assertEqual(self.client.get("/api/sessions", headers=grace).json(), [])
        self.assertEqual(
            self.client.get(f"/api/sessions/{session_id}", headers=grace).status_code, 404
        )

    # Presets and batch

    def test_presets(self):
        headers = self._headers()
        preset_id = self.client.post(
            "/api/presets", json={"title": "Sales", "prompt": "Be brief."}, headers=headers
        ).json()["id"]

        response = self.client.patch(
            f"/api/presets/{preset_id}",
            json={"title": "Sales", "prompt": "Be briefer."},
            headers=headers,
        )
        self.assertEqual(response.status_code, 204)

        presets = self.client.get("/api/presets", headers=headers).json()
        self.assertEqual([p["prompt"] for p in presets], ["Be briefer."])

        self.assertEqual(
            self.client.patch(
                "/api/presets/missing", json={"title": "x", "prompt": "y"}, headers=headers
            ).status_code,
            404,
        )
        self.assertEqual(
            self.client.delete(f"/api/presets/{preset_id}", headers=headers).status_code, 204
        )
        self.assertEqual(self.client.get("/api/presets", headers=headers).json(), [])

    def test_batch(self):
        headers = self._headers()
        self.client.post("/api/presets", json={"title": "t", "prompt": "p"}, headers=headers)

        payload = self.client.get(
            "/api/batch", params={"include": "profile,presets"}, headers=headers
        ).json()

        self.assertEqual(payload["profile"]["display_name"], "Ada")
        self.assertEqual(len(payload["presets"]), 1)
        self.assertIsNone(payload["sessions"])

    # Public endpoints

    def test_download_info(self):
        response = self.client.get(
            "/api/download/info",
            headers={"User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_0)"},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["platform"], "mac")
        self.assertEqual(response.json()["filename"], "Glass.dmg")

    def test_download_redirect(self):
        response = self.client.get(
            "/api/download",
            headers={"User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64)"},
            follow_redirects=False,
        )

        self.assertEqual(response.status_code, 302)
        self.assertTrue(response.headers["location"].endswith("Glass-Setup.exe"))

    def test_runtime_config(self):
        self.assertEqual(self.client.get("/runtime-config.json").json(), {"API_URL": ""})

        self.settings = Settings(environment="development")
        self.assertEqual(
            self.client.get("/runtime-config.json").json(),
            {"API_URL": "http://localhost:9001"},
        )


if __name__ == "__main__":
    unittest.main()
