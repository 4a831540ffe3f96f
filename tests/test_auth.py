from datetime import datetime, timedelta, timezone
from unittest import mock

from tests.base import ApiTestCase, PASSWORD

from repairhub.models.user import User
from repairhub.utils.security import verify_password


class TestAuth(ApiTestCase):

    def register(self, **overrides):
        payload = {"name": "Khalid", "email": "Khalid@RepairHub.ae", "phone": "050 123 4567",
                   "password": "Garage2024"}
        payload.update(overrides)
        return self.client.post("/api/v1/auth/register", json=payload)

    def test_register_creates_general_account(self):
        res = self.register()
        self.assertEqual(res.status_code, 201)
        data = res.json()["data"]
        self.assertEqual(data["tokenType"], "Bearer")
        self.assertEqual(data["user"]["role"], "general")
        self.assertEqual(data["user"]["email"], "khalid@repairhub.ae")
        self.assertEqual(data["user"]["phone"], "+971501234567")

        me = self.client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {data['accessToken']}"})
        self.assertEqual(me.json()["data"]["id"], data["user"]["id"])

    def test_duplicate_email_and_phone(self):
        self.register()
        self.assertEqual(self.register(phone="0509999999").status_code, 400)
        self.assertEqual(self.register(email="other@repairhub.ae").status_code, 400)

    def test_weak_password(self):
        res = self.register(password="short")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"]["details"][0]["field"], "password")

    def test_login(self):
        user = self.make_user()
        res = self.client.post("/api/v1/auth/login", json={"email": user.email.upper(), "password": PASSWORD})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["data"]["user"]["id"], user.id)

    def test_login_wrong_password(self):
        user = self.make_user()
        res = self.client.post("/api/v1/auth/login", json={"email": user.email, "password": "Wrong1234"})
        self.assertEqual(res.status_code, 401)

    def test_invalid_token(self):
        res = self.client.get("/api/v1/users/me", headers={"Authorization": "Bearer not-a-jwt"})
        self.assertEqual(res.status_code, 401)


class TestPasswordReset(ApiTestCase):

    def request_code(self, email: str) -> str | None:
        with mock.patch("repairhub.services.auth_service.send_reset_code_email") as send:
            res = self.client.post("/api/v1/auth/password-reset/request", json={"email": email})
        self.assertEqual(res.status_code, 200)
        return send.call_args.args[2] if send.called else None

    def test_reset_with_code(self):
        user = self.make_user()
        code = self.request_code(user.email)
        self.assertEqual(len(code), 6)
        self.assertNotEqual(self.fetch(User, user.id).resetCode, code)

        res = self.client.post("/api/v1/auth/password-reset/verify", json={
            "email": user.email, "resetCode": code,
            "newPassword": "NewGarage99", "confirmPassword": "NewGarage99",
        })

        self.assertEqual(res.status_code, 200)
        stored = self.fetch(User, user.id)
        self.assertTrue(verify_password("NewGarage99", stored.password))
        self.assertIsNone(stored.resetCode)

    def test_unknown_email_is_silent(self):
        self.assertIsNone(self.request_code("nobody@repairhub.ae"))

    def test_wrong_code(self):
        user = self.make_user()
        code = self.request_code(user.email)
        wrong = "000000" if code != "000000" else "111111"
        res = self.client.post("/api/v1/auth/password-reset/verify", json={
            "email": user.email, "resetCode": wrong,
            "newPassword": "NewGarage99", "confirmPassword": "NewGarage99",
        })
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"]["code"], "RESET_CODE_INVALID")

    def test_expired_code(self):
        user = self.make_user()
        code = self.request_code(user.email)
        with self.Session() as db:
            db.get(User, user.id).resetCodeExpires = datetime.now(timezone.utc) - timedelta(minutes=1)
            db.commit()

        res = self.client.post("/api/v1/auth/password-reset/verify", json={
            "email": user.email, "resetCode": code,
            "newPassword": "NewGarage99", "confirmPassword": "NewGarage99",
        })
        self.assertEqual(res.status_code, 400)

    def test_passwords_must_match(self):
        user = self.make_user()
        res = self.client.post("/api/v1/auth/password-reset/verify", json={
            "email": user.email, "resetCode": "123456",
            "newPassword": "NewGarage99", "confirmPassword": "NewGarage98",
        })
        self.assertEqual(res.status_code, 400)


class TestBootstrapAdmin(ApiTestCase):

    def test_creates_admin_once(self):
        from repairhub.bootstrap_admin import create_admin
        from repairhub.models.role import UserRole

        with self.Session() as db:
            first = create_admin(db, " Root@RepairHub.ae ", "Bootstrap1")
            again = create_admin(db, "root@repairhub.ae", "Different1")

        self.assertEqual(first.id, again.id)
        self.assertEqual(first.role, UserRole.ADMIN)
        res = self.client.post("/api/v1/auth/login", json={"email": "root@repairhub.ae", "password": "Bootstrap1"})
        self.assertEqual(res.status_code, 200)
