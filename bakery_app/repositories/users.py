"""User persistence.

User rows carry password hashes, so they are read straight from the database
and never written to the cache.
"""

from typing import Any, Dict, List, Optional

from bakery_app.cache.base import CacheStrategy
from bakery_app.core.errors import DatabaseError
from bakery_app.core.logging import logger
from bakery_app.db.session import Database, Query
from bakery_app.repositories.base import CacheAside, reject_nulls
from bakery_app.schemas.user import User

_UPDATABLE = ("first_name", "last_name", "email", "phone_number", "password_hash", "role")
_REQUIRED = ("first_name", "last_name", "email", "password_hash", "role")


class UserRepository:
    def __init__(self, db: Database, cache: CacheStrategy):
        self.store = CacheAside(db, cache, User, table_name="users", cache_prefix="users")

    def create(
        self,
        first_name: str,
        last_name: str,
        email: str,
        phone_number: Optional[str],
        password_hash: str,
        role: str,
    ) -> User:
        query = Query(
            "INSERT INTO users (first_name, last_name, email, phone_number, password_hash, role) "
            "VALUES (:first_name, :last_name, :email, :phone_number, :password_hash, :role) RETURNING *",
            {
                "first_name": first_name,
                "last_name": last_name,
                "email": email,
                "phone_number": phone_number,
                "password_hash": password_hash,
                "role": role,
            },
        )
        user = self.store.fetch_one(query, "user registration")
        if user is None:
            raise DatabaseError("No data returned after user registration")
        logger.info("User registered", extra={"user_id": user.id})
        return user

    def find_by_email(self, email: str) -> Optional[User]:
        query = Query("SELECT * FROM users WHERE LOWER(email) = LOWER(:email)", {"email": email})
        return self.store.fetch_one(query, "find user by email")

    def find_by_id(self, user_id: int) -> Optional[User]:
        query = Query("SELECT * FROM users WHERE id = :id", {"id": user_id})
        return self.store.fetch_one(query, f"find user by ID: {user_id}")

    def find_page(self, page: int, limit: int, role: Optional[str] = None) -> List[User]:
        params: Dict[str, Any] = {"limit": limit, "offset": (page - 1) * limit}
        where = ""
        if role is not None:
            where = "WHERE role = :role"
            params["role"] = role
        query = Query(f"SELECT * FROM users {where} ORDER BY id ASC LIMIT :limit OFFSET :offset", params)
        return self.store.fetch_list(query, "paginated users")

    def count(self, role: Optional[str] = None) -> int:
        if role is None:
            query = Query("SELECT COUNT(*) AS total FROM users")
        else:
            query = Query("SELECT COUNT(*) AS total FROM users WHERE role = :role", {"role": role})
        return int(self.store.scalar(query, "count users") or 0)

    def update(self, user_id: int, changes: Dict[str, Any]) -> Optional[User]:
        fields = {k: v for k, v in changes.items() if k in _UPDATABLE}
        reject_nulls(fields, _REQUIRED)
        if not fields:
            return self.find_by_id(user_id)
        assignments = ", ".join(f"{k} = :{k}" for k in fields)
        query = Query(
            f"UPDATE users SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = :id RETURNING *",
            {**fields, "id": user_id},
        )
        return self.store.fetch_one(query, f"user update for ID: {user_id}")

    def soft_delete(self, user_id: int) -> bool:
        result = self.store.execute(
            Query(
                "UPDATE users SET is_active = :inactive, updated_at = CURRENT_TIMESTAMP WHERE id = :id",
                {"inactive": False, "id": user_id},
            ),
            "soft delete user",
        )
        return result.rowcount > 0

    def touch_last_seen(self, user_id: int) -> None:
        self.store.execute(
            Query("UPDATE users SET last_seen = CURRENT_TIMESTAMP WHERE id = :id", {"id": user_id}),
            "update user last seen",
        )
