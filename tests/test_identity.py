"""Tests for app.services.identity: token source precedence, sentinels, principal resolution."""

import unittest

from app.core.errors import AuthenticationError
from app.core.security import create_access_token
from app.schemas.auth import CurrentUser
from app.services.identity import authorize, resolve, select_token
from db_helpers import add_user, make_session, make_settings


class TestSelectToken(unittest.TestCase):
    def test_bearer_wins_over_cookie(self) -> None:
        self.assertEqual(select_token("header-token", "cookie-token"), "header-token")

    def test_cookie_used_without_header(self) -> None:
        self.assertEqual(select_token(None, "cookie-token"), "cookie-token")

    def test_sentinels_are_absent(self) -> None:
        for sentinel in ("none", "null", "NULL", " ", ""):
            self.assertIsNone(select_token(sentinel, None))
            self.assertIsNone(select_token(None, sentinel))
        self.assertEqual(select_token("null", "cookie-token"), "cookie-token")


class TestResolve(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session()
        self.settings = make_settings()
        self.user = add_user(self.db, "carol@example.com", role="admin")

    def tearDown(self) -> None:
        self.db.close()

    def test_valid_cookie_token(self) -> None:
        token, _ = create_access_token(self.user.id, self.settings)
        principal = resolve(self.db, self.settings, None, token)
        self.assertEqual(principal.id, self.user.id)
        self.assertEqual(principal.role, "admin")

    def test_role_comes_from_database(self) -> None:
        token, _ = create_access_token(self.user.id, self.settings)
        self.user.role = "user"
        self.db.commit()
        self.assertEqual(resolve(self.db, self.settings, token, None).role, "user")

    def test_invalid_header_does_not_fall_back_to_cookie(self) -> None:
        token, _ = create_access_token(self.user.id, self.settings)
        with self.assertRaises(AuthenticationError):
            resolve(self.db, self.settings, "garbage", token)

    def test_failures_share_one_message(self) -> None:
        other_settings = make_settings(JWT_SECRET="other")
        forged, _ = create_access_token(self.user.id, other_settings)
        missing_user, _ = create_access_token(self.user.id + 100, self.settings)
        messages = set()
        for bearer, cookie in ((None, None), ("none", "null"), (forged, None), (missing_user, None)):
            with self.assertRaises(AuthenticationError) as ctx:
                resolve(self.db, self.settings, bearer, cookie)
            self.assertIs(type(ctx.exception), AuthenticationError)
            messages.add(ctx.exception.message)
        self.assertEqual(len(messages), 1)


class TestAuthorize(unittest.TestCase):
    def test_set_membership(self) -> None:
        user = CurrentUser(id=1, name="u", email="u@example.com", role="user")
        self.assertTrue(authorize(user, ["user", "admin"]))
        self.assertFalse(authorize(user, ["admin"]))
        self.assertFalse(authorize(user, []))


if __name__ == "__main__":
    unittest.main()
