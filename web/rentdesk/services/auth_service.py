import logging
from typing import Optional, Tuple
import bcrypt
from fastapi import HTTPException

from ..core import BaseService, ValidationError, AuthenticationError, NotFoundError
from ..infrastructure.repositories import (
    UserRepository, LandlordProfileRepository, RenterProfileRepository,
)
from ..models import User
from ..security import mint_tokens, decode_token, create_token
from ..roles import Role, HOME_PATHS

logger = logging.getLogger(__name__)


class AuthService(BaseService):
    """Authentication service handling user authentication and authorization"""

    def __init__(self, session, user_repo: Optional[UserRepository] = None):
        super().__init__(session)
        self.user_repo = user_repo or UserRepository(session)

    async def signup(self, email: str, password: str, name: str, role: str) -> User:
        """Create an account and the empty profile of its role"""
        user = await self.create_user(email=email, password=password, role=role, name=name)
        if role == Role.landlord.value:
            await LandlordProfileRepository(self.session).create(
                obj_in={"user_id": user.id, "full_name": name, "contact_email": user.email}
            )
        elif role == Role.renter.value:
            await RenterProfileRepository(self.session).create(
                obj_in={"user_id": user.id, "full_name": name, "email": user.email}
            )
        logger.info("New %s account %s", role, user.id)
        return user

    async def authenticate_user(self, email: str, password: str) -> Tuple[User, str, str]:
        """Authenticate user with email and password"""

        user = await self.user_repo.get_by_email(email)
        if not user:
            raise AuthenticationError("Invalid email or password")

        if not self._verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid email or password")

        access_token, refresh_token = self.issue_tokens(user)
        return user, access_token, refresh_token

    def issue_tokens(self, user: User) -> Tuple[str, str]:
        return mint_tokens(sub=user.id, role=user.role, email=user.email)

    @staticmethod
    def home_path(role: str) -> str:
        return HOME_PATHS.get(role, "/")

    async def refresh_access_token(self, refresh_token: str) -> str:
        """Generate new access token from refresh token"""
        try:
            payload = decode_token(refresh_token)
        except HTTPException:
            raise AuthenticationError("Invalid refresh token")

        if payload.get("typ") != "refresh":
            raise AuthenticationError("Invalid refresh token")

        user = await self.user_repo.get(int(payload["sub"]))
        if not user:
            raise AuthenticationError("Invalid refresh token")

        return create_token(sub=user.id, role=user.role, email=user.email)

    async def create_user(
        self,
        email: str,
        password: str,
        role: str,
        name: Optional[str] = None,
    ) -> User:
        """Create a new user with hashed password"""

        email = email.lower()
        if await self.user_repo.exists_by_email(email):
            raise ValidationError("Email already registered", field="email")

        valid_roles = [r.value for r in Role]
        if role not in valid_roles:
            raise ValidationError(f"Invalid role. Must be one of: {', '.join(valid_roles)}", field="role")

        user_data = {
            "email": email,
            "password_hash": self._hash_password(password),
            "role": role,
            "name": name or "",
        }
        return await self.user_repo.create(obj_in=user_data)

    async def get_user(self, user_id: int) -> User:
        user = await self.user_repo.get(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def change_password(
        self,
        user_id: int,
        current_password: str,
        new_password: str
    ) -> User:
        """Change user password"""

        user = await self.user_repo.get(user_id)
        if not user:
            raise AuthenticationError("User not found")

        if not self._verify_password(current_password, user.password_hash):
            raise AuthenticationError("Current password is incorrect")

        return await self.user_repo.update_password(user_id, self._hash_password(new_password))

    async def ensure_admin(self, email: str, password: str) -> Optional[User]:
        """Create the bootstrap admin account when it does not exist yet"""
        if not email or not password:
            return None
        existing = await self.user_repo.get_by_email(email)
        if existing:
            return existing
        user = await self.create_user(email=email, password=password, role=Role.admin.value, name="Administrator")
        logger.info("Bootstrap admin %s created", email)
        return user

    def _hash_password(self, password: str) -> str:
        """Hash password using bcrypt"""
        return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')

    def _verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify password against hash"""
        try:
            return bcrypt.checkpw(
                plain_password.encode('utf-8'),
                hashed_password.encode('utf-8')
            )
        except ValueError as e:
            logger.warning("Password verification error: %s", e)
            return False
