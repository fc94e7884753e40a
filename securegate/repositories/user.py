"""
User repository.
"""

from securegate.models.user import User

from .base import SoftDeleteRepository


class UserRepository(SoftDeleteRepository[User]):
    model = User

    async def get_by_email(self, email: str) -> User | None:
        """Active user with this email."""
        return await self.find_first(email=email)

    async def get_by_reset_token_hash(self, token_hash: str) -> User | None:
        return await self.find_first(reset_token_hash=token_hash)
