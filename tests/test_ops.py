"""Tests for the operations commands in main.py."""

from datetime import date

from main import reconcile_verified, send_reminders
from sponta.crud.notifications import get_user_notifications
from sponta.crud.user import set_streak
from sponta.crud.user_challenges import create_user_challenge, find_user_challenge, update_user_challenge
from tests.conftest import at


class TestReconcileVerified:
    def _drifted(self, db, make_user, make_challenge):
        user = make_user()
        challenge = make_challenge()
        uc, _ = create_user_challenge(db, user.id, challenge)
        update_user_challenge(db, uc.id, {"verified": True, "verified_at": at(2026, 3, 1)})
        return user, challenge

    def test_reports_without_fixing(self, db, make_user, make_challenge):
        user, challenge = self._drifted(db, make_user, make_challenge)

        assert reconcile_verified(db) == 1
        assert find_user_challenge(db, user.id, challenge.id).status == "accepted"

    def test_fix_marks_completed(self, db, make_user, make_challenge):
        user, challenge = self._drifted(db, make_user, make_challenge)

        assert reconcile_verified(db, fix=True) == 1

        repaired = find_user_challenge(db, user.id, challenge.id)
        assert repaired.status == "completed"
        assert repaired.completed_at is not None
        assert reconcile_verified(db) == 0

    def test_consistent_rows_are_ignored(self, db, make_user, make_challenge):
        make_user()
        create_user_challenge(db, "user-1", make_challenge())

        assert reconcile_verified(db) == 0


class TestSendReminders:
    def test_only_users_idle_today_are_reminded(self, db, make_user):
        make_user("idle")
        make_user("active")
        make_user("no-streak")
        set_streak(db, "idle", 3, 3, date(2026, 2, 28))
        set_streak(db, "active", 4, 4, date(2026, 3, 1))

        sent = send_reminders(db, now=at(2026, 3, 1))

        assert sent == 1
        assert [n.type for n in get_user_notifications(db, "idle")] == ["streak_reminder"]
        assert get_user_notifications(db, "active") == []
        assert get_user_notifications(db, "no-streak") == []
