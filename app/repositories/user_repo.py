from app.core.security import hash_password
from app.db.collections import USERS
from app.db.store import DocumentStore
from app.models.user import UserCreate, UserInDB


class UserRepository:
    """User database operations."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def create_user(self, user_data: UserCreate) -> UserInDB:
        """Create a new user."""
        user = UserInDB(
            name=user_data.name,
            email=user_data.email.lower(),
            password_hash=hash_password(user_data.password)
        )
        await self.store.insert(USERS, user.to_document())
        return user

    async def get_user_by_email(self, email: str) -> UserInDB | None:
        """Get user by email."""
        docs = await self.store.find(USERS, {"email": email.lower()}, limit=1)
        if docs:
            return UserInDB(**docs[0])
        return None

    async def get_user_by_id(self, user_id: str) -> UserInDB | None:
        """Get user by ID."""
        doc = await self.store.get(USERS, user_id)
        if doc:
            return UserInDB(**doc)
        return None

