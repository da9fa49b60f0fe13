"""
User operations backed by the auth store.
"""
import logging
from typing import Optional

from activity_logs.config import Settings
from activity_logs.database.repositories import UserRepository
from activity_logs.exceptions import ForbiddenError, InvalidInputError, NotFoundError, UnauthenticatedError
from activity_logs.models import Actor, UserPage, UserProfile, UserRole
from activity_logs.policy.authorization import require_actor, require_staff

logger = logging.getLogger(__name__)


class UserService:
    """Sign-in lookup, user listings and profile updates."""

    def __init__(self, user_repo: UserRepository, settings: Settings):
        self.users = user_repo
        self.settings = settings

    def sign_in(self, email: str) -> Actor:
        """
        Resolve a verified email to an actor and record the login.
        Verification itself happens in the external auth provider.

        Raises:
            UnauthenticatedError: Unknown email
        """
        profile = self.users.get_by_email(email or "")
        if profile is None:
            logger.warning("Sign-in attempt for unknown email")
            raise UnauthenticatedError("Unknown user")
        self.users.touch_last_login(profile.id)
        logger.info(f"User signed in: {profile.id} ({profile.role.value})")
        return Actor.from_profile(profile)

    def get_user(self, actor: Optional[Actor], user_id: str) -> UserProfile:
        """Users may read their own profile; coaches and admins any profile."""
        actor = require_actor(actor)
        if actor.user_id != user_id:
            require_staff(actor)
        profile = self.users.get_by_id(user_id)
        if profile is None:
            raise NotFoundError(f"User not found: {user_id}")
        return profile

    def list_users(self, actor: Optional[Actor], role: Optional[UserRole] = None,
                   page: int = 1, limit: Optional[int] = None) -> UserPage:
        """
        List users one page at a time.

        Coaches only see clients assigned to them; admins may filter by role;
        clients may not list users.
        """
        actor = require_staff(actor)
        page = max(page, 1)
        limit = limit or self.settings.users_page_size

        coach_email = None
        if actor.role == UserRole.COACH:
            if not actor.email:
                raise ForbiddenError("Coach account has no email to match assignments")
            role, coach_email = UserRole.CLIENT, actor.email

        items, total = self.users.list_users(role=role, coach_email=coach_email, page=page, limit=limit)
        return UserPage(items=items, page=page, limit=limit, total=total)

    def update_name(self, actor: Optional[Actor], name: str) -> Actor:
        """Change the signed-in user's display name."""
        actor = require_actor(actor)
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("Name is required")
        if not self.users.update_name(actor.user_id, name):
            raise NotFoundError(f"User not found: {actor.user_id}")
        return actor.model_copy(update={"name": name})
