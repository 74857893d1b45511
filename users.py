"""User directory with passwordless login-or-create."""
import logging
from typing import List

from bson import ObjectId
from pymongo.database import Database
from pymongo.errors import BulkWriteError, DuplicateKeyError

from database import USERS
from errors import NotFound, storage_errors
from schemas import Role, User

logger = logging.getLogger(__name__)

SEED_USERS = [
    {"id": "1", "name": "Alex Johnson", "email": "alex@example.com",
     "avatar": "https://i.pravatar.cc/150?img=1", "role": "admin"},
    {"id": "2", "name": "Sarah Miller", "email": "sarah@example.com",
     "avatar": "https://i.pravatar.cc/150?img=2", "role": "manager"},
    {"id": "3", "name": "David Kim", "email": "david@example.com",
     "avatar": "https://i.pravatar.cc/150?img=3", "role": "member"},
    {"id": "4", "name": "Emily Chen", "email": "emily@example.com",
     "avatar": "https://i.pravatar.cc/150?img=4", "role": "member"},
]

DUPLICATE_KEY = 11000

AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed={email}"


class UserStore:
    def __init__(self, db: Database):
        self.collection = db[USERS]

    def seed(self) -> int:
        """Insert the default users if the collection is empty. Returns how many were added."""
        with storage_errors("Error seeding users"):
            if self.collection.count_documents({}) > 0:
                return 0
            try:
                self.collection.insert_many([dict(u) for u in SEED_USERS], ordered=False)
            except BulkWriteError as exc:
                # Another worker seeding the same empty database wins the
                # duplicates; anything other than a duplicate key is fatal.
                errors = exc.details.get("writeErrors", [])
                if any(e.get("code") != DUPLICATE_KEY for e in errors):
                    raise
                added = len(SEED_USERS) - len(errors)
            else:
                added = len(SEED_USERS)
        logger.info("Seeded %d users", added)
        return added

    def list(self) -> List[User]:
        with storage_errors("Error fetching users"):
            docs = list(self.collection.find())
        return [User.model_validate(d) for d in docs]

    def get(self, user_id: str) -> User:
        with storage_errors("Error fetching user"):
            doc = self.collection.find_one({"id": user_id})
        if doc is None:
            raise NotFound("User not found")
        return User.model_validate(doc)

    def login(self, email: str) -> User:
        """Return the user with ``email``, creating a member account on first sight.

        No credential is checked.
        """
        with storage_errors("Error during login"):
            doc = self.collection.find_one({"email": email})
            if doc is None:
                user = User(
                    id=str(ObjectId()),
                    name=email.split("@")[0],
                    email=email,
                    avatar=AVATAR_URL.format(email=email),
                    role=Role.MEMBER,
                )
                try:
                    self.collection.insert_one(user.model_dump(by_alias=True))
                except DuplicateKeyError:
                    # A concurrent login created it first.
                    doc = self.collection.find_one({"email": email})
                else:
                    logger.info("Created user %s on first login", email)
                    return user
        return User.model_validate(doc)
