"""
Unit tests for activity_logs/policy/authorization.py
Tests role gating and the editable window for mutations.
"""
import pytest
from datetime import date

from activity_logs.exceptions import EditWindowExpiredError, ForbiddenError, UnauthenticatedError
from activity_logs.policy.authorization import (
    authorize_comment, authorize_create, authorize_delete, authorize_read, authorize_update,
    can_edit, require_staff
)
from tests.fixtures.mock_data import FIXED_NOW


class TestAuthenticated:
    """Every decision needs a signed-in actor."""

    def test_read_without_actor(self, sample_activity):
        with pytest.raises(UnauthenticatedError):
            authorize_read(None, sample_activity)

    def test_update_without_actor(self, sample_activity):
        with pytest.raises(UnauthenticatedError):
            authorize_update(None, sample_activity, FIXED_NOW)

    def test_can_edit_without_actor(self, sample_activity):
        assert can_edit(None, sample_activity, FIXED_NOW) is False


class TestClientRules:
    """Clients act only on their own records inside the window."""

    def test_read_own(self, client_actor, sample_activity):
        authorize_read(client_actor, sample_activity)

    def test_read_other_forbidden(self, other_client_actor, sample_activity):
        with pytest.raises(ForbiddenError):
            authorize_read(other_client_actor, sample_activity)

    def test_create_own_in_window(self, client_actor):
        authorize_create(client_actor, "client-1", date(2024, 1, 2), FIXED_NOW)

    def test_create_for_other_forbidden(self, client_actor):
        with pytest.raises(ForbiddenError):
            authorize_create(client_actor, "client-2", date(2024, 1, 15), FIXED_NOW)

    def test_create_outside_window(self, client_actor):
        with pytest.raises(EditWindowExpiredError):
            authorize_create(client_actor, "client-1", date(2023, 12, 24), FIXED_NOW)

    def test_create_future_week(self, client_actor):
        with pytest.raises(EditWindowExpiredError):
            authorize_create(client_actor, "client-1", date(2024, 1, 22), FIXED_NOW)

    def test_update_own(self, client_actor, sample_activity):
        authorize_update(client_actor, sample_activity, FIXED_NOW)

    def test_update_expired(self, client_actor, expired_activity):
        with pytest.raises(EditWindowExpiredError):
            authorize_update(client_actor, expired_activity, FIXED_NOW)

    def test_update_move_out_of_window(self, client_actor, sample_activity):
        with pytest.raises(EditWindowExpiredError):
            authorize_update(client_actor, sample_activity, FIXED_NOW, new_date=date(2023, 12, 20))

    def test_ownership_checked_before_window(self, other_client_actor, expired_activity):
        """Wrong owner is reported as forbidden even when the window has passed."""
        with pytest.raises(ForbiddenError):
            authorize_update(other_client_actor, expired_activity, FIXED_NOW)

    def test_delete_expired(self, client_actor, expired_activity):
        with pytest.raises(EditWindowExpiredError):
            authorize_delete(client_actor, expired_activity, FIXED_NOW)

    def test_comment_own_expired(self, client_actor, expired_activity):
        authorize_comment(client_actor, expired_activity)

    def test_comment_other_forbidden(self, other_client_actor, sample_activity):
        with pytest.raises(ForbiddenError):
            authorize_comment(other_client_actor, sample_activity)

    def test_require_staff(self, client_actor):
        with pytest.raises(ForbiddenError):
            require_staff(client_actor)


class TestStaffRules:
    """Coaches and admins read and comment on anything, edit within the window."""

    def test_coach_reads_any(self, coach_actor, sample_activity):
        authorize_read(coach_actor, sample_activity)

    def test_admin_creates_on_behalf(self, admin_actor):
        authorize_create(admin_actor, "client-1", date(2024, 1, 15), FIXED_NOW)

    def test_coach_create_outside_window(self, coach_actor):
        with pytest.raises(EditWindowExpiredError):
            authorize_create(coach_actor, "client-1", date(2023, 12, 1), FIXED_NOW)

    def test_coach_update_expired(self, coach_actor, expired_activity):
        with pytest.raises(EditWindowExpiredError):
            authorize_update(coach_actor, expired_activity, FIXED_NOW)

    def test_coach_comments_on_expired(self, coach_actor, expired_activity):
        authorize_comment(coach_actor, expired_activity)

    def test_require_staff(self, coach_actor, admin_actor):
        assert require_staff(coach_actor) is coach_actor
        assert require_staff(admin_actor) is admin_actor


class TestCanEdit:
    """Test the non-raising check."""

    def test_editable(self, client_actor, sample_activity):
        assert can_edit(client_actor, sample_activity, FIXED_NOW) is True

    def test_expired(self, coach_actor, expired_activity):
        assert can_edit(coach_actor, expired_activity, FIXED_NOW) is False

    def test_not_owner(self, other_client_actor, sample_activity):
        assert can_edit(other_client_actor, sample_activity, FIXED_NOW) is False

    def test_custom_window(self, client_actor, expired_activity):
        assert can_edit(client_actor, expired_activity, FIXED_NOW, weeks_back=3) is True
