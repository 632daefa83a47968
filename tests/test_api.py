"""End-to-end API tests: registration, approval, role gates and credential endpoints over HTTP."""

import unittest
from collections.abc import Generator

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.core.container import get_cipher, get_password_hasher, get_token_service
from app.core.crypto import SecretCipher, generate_encryption_key
from app.core.database import get_db
from app.main import app
from tests.support import STRONG_PASSWORD, add_resource, add_user, make_cipher, make_hasher, make_session_factory, make_tokens

API = "/api/v1"


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.session_factory = make_session_factory()
        self.hasher = make_hasher()
        self.tokens = make_tokens()
        self.cipher = make_cipher()

        def override_get_db() -> Generator[Session, None, None]:
            db = self.session_factory()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_password_hasher] = lambda: self.hasher
        app.dependency_overrides[get_token_service] = lambda: self.tokens
        app.dependency_overrides[get_cipher] = lambda: self.cipher
        self.client = TestClient(app)

        with self.session_factory() as db:
            self.admin_id = add_user(db, self.hasher, "root", "admin").id
            add_user(db, self.hasher, "tech", "technician")
            add_user(db, self.hasher, "view", "viewer")
            self.resource_id = add_resource(db).id

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def login(self, username: str, password: str = STRONG_PASSWORD) -> dict[str, str]:
        response = self.client.post(
            f"{API}/auth/login", json={"email": f"{username}@example.com", "password": password}
        )
        self.assertEqual(response.status_code, 200, response.text)
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    def create_credential(self, headers: dict[str, str]) -> int:
        response = self.client.post(
            f"{API}/credentials",
            json={
                "resource_id": self.resource_id,
                "credential_type": "database",
                "username": "dbadmin",
                "password": "Secret123!",
            },
            headers=headers,
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["id"]


class TestHealth(ApiTestCase):
    def test_health_is_public(self) -> None:
        response = self.client.get(f"{API}/health/")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["database"], "connected")
        self.assertEqual(body["encryption"], "ready")
        self.assertNotIn("ENCRYPTION_KEY", response.text)


class TestRegistrationFlow(ApiTestCase):
    def test_register_approve_login(self) -> None:
        response = self.client.post(
            f"{API}/auth/register",
            json={"username": "newbie", "email": "newbie@example.com", "password": STRONG_PASSWORD},
        )
        self.assertEqual(response.status_code, 201, response.text)
        body = response.json()
        self.assertFalse(body["is_verified"])
        self.assertNotIn("password_hash", body)

        response = self.client.post(
            f"{API}/auth/login", json={"email": "newbie@example.com", "password": STRONG_PASSWORD}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"], "AccountInactiveError")

        admin = self.login("root")
        pending = self.client.get(f"{API}/users/pending", headers=admin).json()["users"]
        self.assertEqual([u["username"] for u in pending], ["newbie"])

        response = self.client.put(f"{API}/users/{body['id']}/approve", headers=admin)
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["user"]["approved_by"], self.admin_id)

        me = self.client.get(f"{API}/auth/me", headers=self.login("newbie")).json()
        self.assertEqual(me["username"], "newbie")
        self.assertEqual(me["role"], "technician")

    def test_validation_errors_are_listed(self) -> None:
        response = self.client.post(
            f"{API}/auth/register",
            json={"username": "x", "email": "bad", "password": "weak"},
        )
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["error"], "ValidationError")
        self.assertEqual(len(body["errors"]), 3)

    def test_malformed_body_is_a_validation_error(self) -> None:
        response = self.client.post(
            f"{API}/auth/register",
            json={"username": "", "email": "e@example.com", "password": STRONG_PASSWORD},
        )
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["error"], "ValidationError")
        self.assertNotIn("detail", body)
        self.assertEqual(len(body["errors"]), 1)
        self.assertTrue(body["errors"][0].startswith("username:"))

    def test_missing_fields_are_all_listed(self) -> None:
        response = self.client.post(f"{API}/auth/register", json={})
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["message"], "Validation failed")
        self.assertEqual(len(body["errors"]), 3)

    def test_duplicate_registration_conflicts(self) -> None:
        response = self.client.post(
            f"{API}/auth/register",
            json={"username": "tech", "email": "tech2@example.com", "password": STRONG_PASSWORD},
        )
        self.assertEqual(response.status_code, 409)

    def test_wrong_password(self) -> None:
        response = self.client.post(
            f"{API}/auth/login", json={"email": "tech@example.com", "password": "Wrong123!"}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], "Invalid email or password")


class TestAuthentication(ApiTestCase):
    def test_missing_token(self) -> None:
        response = self.client.get(f"{API}/credentials")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.headers["WWW-Authenticate"], "Bearer")

    def test_garbage_token(self) -> None:
        response = self.client.get(f"{API}/auth/verify", headers={"Authorization": "Bearer nope"})
        self.assertEqual(response.status_code, 401)

    def test_verify_and_logout(self) -> None:
        headers = self.login("tech")
        self.assertEqual(self.client.get(f"{API}/auth/verify", headers=headers).json()["role"], "technician")
        self.assertEqual(self.client.post(f"{API}/auth/logout", headers=headers).status_code, 200)

    def test_deactivation_revokes_access_immediately(self) -> None:
        tech = self.login("tech")
        admin = self.login("root")
        tech_id = self.client.get(f"{API}/auth/me", headers=tech).json()["id"]

        self.assertEqual(self.client.put(f"{API}/users/{tech_id}/deactivate", headers=admin).status_code, 200)
        self.assertEqual(self.client.get(f"{API}/auth/me", headers=tech).status_code, 401)

    def test_change_password(self) -> None:
        headers = self.login("tech")
        response = self.client.put(
            f"{API}/auth/password",
            json={"current_password": STRONG_PASSWORD, "new_password": "Another456?"},
            headers=headers,
        )
        self.assertEqual(response.status_code, 200, response.text)
        self.login("tech", "Another456?")


class TestUserAdministration(ApiTestCase):
    def test_non_admin_is_forbidden(self) -> None:
        response = self.client.get(f"{API}/users", headers=self.login("tech"))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["message"], "Insufficient permissions")

    def test_admin_cannot_deactivate_self(self) -> None:
        response = self.client.put(f"{API}/users/{self.admin_id}/deactivate", headers=self.login("root"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "SelfDeactivationError")

    def test_reject_approved_user_is_refused(self) -> None:
        admin = self.login("root")
        users = self.client.get(f"{API}/users", headers=admin).json()["users"]
        tech_id = next(u["id"] for u in users if u["username"] == "tech")
        response = self.client.delete(f"{API}/users/{tech_id}/reject", headers=admin)
        self.assertEqual(response.status_code, 400)

    def test_admin_creates_active_user(self) -> None:
        admin = self.login("root")
        response = self.client.post(
            f"{API}/users",
            json={"username": "ops", "email": "ops@example.com", "password": STRONG_PASSWORD, "role": "viewer"},
            headers=admin,
        )
        self.assertEqual(response.status_code, 201, response.text)
        self.assertTrue(response.json()["is_active"])
        self.login("ops")

    def test_unknown_user(self) -> None:
        response = self.client.put(f"{API}/users/999/approve", headers=self.login("root"))
        self.assertEqual(response.status_code, 404)


class TestCredentialEndpoints(ApiTestCase):
    def test_technician_creates_and_reads_secret(self) -> None:
        tech = self.login("tech")
        credential_id = self.create_credential(tech)

        listing = self.client.get(f"{API}/credentials", headers=tech)
        self.assertEqual(listing.status_code, 200)
        self.assertNotIn("Secret123!", listing.text)
        self.assertTrue(listing.json()["data"][0]["has_password"])

        detail = self.client.get(f"{API}/credentials/{credential_id}", headers=tech)
        self.assertEqual(detail.status_code, 200)
        self.assertEqual(detail.json()["password"], "Secret123!")

    def test_viewer_sees_list_but_not_secrets(self) -> None:
        credential_id = self.create_credential(self.login("tech"))
        viewer = self.login("view")
        self.assertEqual(self.client.get(f"{API}/credentials", headers=viewer).status_code, 200)
        self.assertEqual(self.client.get(f"{API}/credentials/{credential_id}", headers=viewer).status_code, 403)
        self.assertEqual(
            self.client.put(
                f"{API}/credentials/{credential_id}", json={"notes": "x"}, headers=viewer
            ).status_code,
            403,
        )

    def test_rotation_over_http(self) -> None:
        tech = self.login("tech")
        credential_id = self.create_credential(tech)
        response = self.client.put(
            f"{API}/credentials/{credential_id}", json={"password": "Rotated789#"}, headers=tech
        )
        self.assertEqual(response.status_code, 200, response.text)
        detail = self.client.get(f"{API}/credentials/{credential_id}", headers=tech).json()
        self.assertEqual(detail["password"], "Rotated789#")

    def test_only_admin_deletes(self) -> None:
        tech = self.login("tech")
        credential_id = self.create_credential(tech)
        self.assertEqual(self.client.delete(f"{API}/credentials/{credential_id}", headers=tech).status_code, 403)

        admin = self.login("root")
        self.assertEqual(self.client.delete(f"{API}/credentials/{credential_id}", headers=admin).status_code, 200)
        self.assertEqual(self.client.get(f"{API}/credentials/{credential_id}", headers=admin).status_code, 404)

    def test_decryption_failure_is_generic_500(self) -> None:
        tech = self.login("tech")
        credential_id = self.create_credential(tech)
        app.dependency_overrides[get_cipher] = lambda: SecretCipher(generate_encryption_key())

        response = self.client.get(f"{API}/credentials/{credential_id}", headers=tech)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "DecryptionFailedError", "message": "Internal server error"})

    def test_unknown_credential_type_is_a_validation_error(self) -> None:
        response = self.client.post(
            f"{API}/credentials",
            json={"resource_id": self.resource_id, "credential_type": "bogus", "password": "Secret123!"},
            headers=self.login("tech"),
        )
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["error"], "ValidationError")
        self.assertTrue(body["errors"][0].startswith("credential_type:"))

    def test_out_of_range_page_size_is_a_validation_error(self) -> None:
        response = self.client.get(f"{API}/credentials?limit=1000", headers=self.login("tech"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "ValidationError")


class TestClientsAndResources(ApiTestCase):
    def create_client(self, headers: dict[str, str], name: str = "Initech") -> int:
        response = self.client.post(f"{API}/clients", json={"name": name}, headers=headers)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["id"]

    def test_create_client_and_resource(self) -> None:
        tech = self.login("tech")
        client_id = self.create_client(tech)
        resource = self.client.post(
            f"{API}/resources",
            json={"client_id": client_id, "name": "fw-01", "resource_type": "vm", "port": 443},
            headers=tech,
        )
        self.assertEqual(resource.status_code, 201, resource.text)
        self.assertEqual(resource.json()["client_name"], "Initech")
        self.assertEqual(resource.json()["created_by_username"], "tech")

        viewer = self.login("view")
        listing = self.client.get(f"{API}/clients", headers=viewer).json()
        self.assertIn("Initech", [c["name"] for c in listing["data"]])
        self.assertEqual(listing["pagination"]["total"], 2)
        self.assertEqual(
            self.client.post(f"{API}/clients", json={"name": "Nope"}, headers=viewer).status_code, 403
        )

    def test_client_list_is_paginated(self) -> None:
        tech = self.login("tech")
        for name in ("B-corp", "C-corp"):
            self.create_client(tech, name)
        response = self.client.get(f"{API}/clients?page=2&limit=2", headers=tech)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual([c["name"] for c in body["data"]], ["C-corp"])
        self.assertEqual(body["pagination"]["total_pages"], 2)

    def test_unknown_resource_type_is_a_validation_error(self) -> None:
        tech = self.login("tech")
        response = self.client.post(
            f"{API}/resources",
            json={"client_id": self.create_client(tech), "name": "fw-01", "resource_type": "firewall"},
            headers=tech,
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "ValidationError")

    def test_blank_client_name_is_rejected(self) -> None:
        response = self.client.post(f"{API}/clients", json={"name": "   "}, headers=self.login("tech"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "ValidationError")

    def test_resource_for_unknown_client(self) -> None:
        response = self.client.post(
            f"{API}/resources", json={"client_id": 999, "name": "x"}, headers=self.login("tech")
        )
        self.assertEqual(response.status_code, 404)

    def test_get_and_update_client(self) -> None:
        tech = self.login("tech")
        client_id = self.create_client(tech)
        response = self.client.put(
            f"{API}/clients/{client_id}", json={"notes": "renewal in March"}, headers=tech
        )
        self.assertEqual(response.status_code, 200, response.text)
        detail = self.client.get(f"{API}/clients/{client_id}", headers=self.login("view")).json()
        self.assertEqual(detail["notes"], "renewal in March")
        self.assertEqual(detail["created_by_username"], "tech")
        self.assertEqual(
            self.client.put(f"{API}/clients/{client_id}", json={"notes": "x"}, headers=self.login("view")).status_code,
            403,
        )

    def test_get_and_update_resource(self) -> None:
        tech = self.login("tech")
        response = self.client.put(
            f"{API}/resources/{self.resource_id}", json={"hostname": "db-01.internal", "port": 5432}, headers=tech
        )
        self.assertEqual(response.status_code, 200, response.text)
        detail = self.client.get(f"{API}/resources/{self.resource_id}", headers=tech).json()
        self.assertEqual(detail["hostname"], "db-01.internal")
        self.assertEqual(detail["port"], 5432)

    def test_only_admin_deletes_client(self) -> None:
        tech = self.login("tech")
        client_id = self.create_client(tech)
        self.assertEqual(self.client.delete(f"{API}/clients/{client_id}", headers=tech).status_code, 403)

        admin = self.login("root")
        response = self.client.delete(f"{API}/clients/{client_id}", headers=admin)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Client deleted successfully")
        self.assertEqual(self.client.get(f"{API}/clients/{client_id}", headers=admin).status_code, 404)
        self.assertEqual(self.client.put(f"{API}/clients/{client_id}", json={"notes": "x"}, headers=admin).status_code, 404)
        self.assertEqual(self.client.delete(f"{API}/clients/{client_id}", headers=admin).status_code, 404)

    def test_deleted_resource_hides_its_credentials(self) -> None:
        credential_id = self.create_credential(self.login("tech"))
        admin = self.login("root")
        response = self.client.delete(f"{API}/resources/{self.resource_id}", headers=admin)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Resource deleted successfully")

        self.assertEqual(self.client.get(f"{API}/resources/{self.resource_id}", headers=admin).status_code, 404)
        self.assertEqual(self.client.get(f"{API}/credentials/{credential_id}", headers=admin).status_code, 404)
        self.assertEqual(self.client.get(f"{API}/credentials", headers=admin).json()["pagination"]["total"], 0)
