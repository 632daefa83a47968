"""Tests for the bootstrap user script's insert helper."""

import unittest

from app.core.errors import DuplicateUserError
from app.models import User
from app.scripts.create_user import create_active_user
from tests.support import STRONG_PASSWORD, FakeClock, add_user, make_hasher, make_session_factory


class TestCreateActiveUser(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.hasher = make_hasher()

    def tearDown(self) -> None:
        self.db.close()

    def test_user_is_active_verified_and_approved(self) -> None:
        clock = FakeClock()
        user = create_active_user(
            self.db, "admin", "admin@example.com", STRONG_PASSWORD, "admin", self.hasher, clock=clock
        )
        self.db.commit()

        stored = self.db.get(User, user.id)
        self.assertTrue(stored.is_active)
        self.assertTrue(stored.is_verified)
        self.assertIsNotNone(stored.approved_at)
        self.assertEqual(stored.approved_at.replace(tzinfo=None), clock.now.replace(tzinfo=None))
        self.assertTrue(self.hasher.verify(STRONG_PASSWORD, stored.password_hash))

    def test_default_clock_stamps_approval(self) -> None:
        user = create_active_user(self.db, "ops", "ops@example.com", STRONG_PASSWORD, "technician", self.hasher)
        self.assertIsNotNone(user.approved_at)

    def test_duplicate_email_refused(self) -> None:
        add_user(self.db, self.hasher, "taken")
        with self.assertRaises(DuplicateUserError):
            create_active_user(self.db, "other", "taken@example.com", STRONG_PASSWORD, "viewer", self.hasher)
