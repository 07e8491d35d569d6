import logging
from typing import Any, Dict, List, Mapping

from jobly import db
from jobly.auth_utils import hash_password, verify_password
from jobly.errors import ConflictError, InvalidCredentialsError, NotFoundError
from jobly.query_helpers import create_values, sql_for_partial_update

logger = logging.getLogger(__name__)

TABLE = "users"
PUBLIC_COLUMNS = ("username", "first_name", "last_name", "email", "photo_url")
CREATE_KEYS = ("username", "password", "first_name", "last_name", "email", "photo_url")
UPDATE_KEYS = ("password", "first_name", "last_name", "email", "photo_url")


def _public(row: Mapping[str, Any]) -> Dict[str, Any]:
    return {col: row.get(col) for col in PUBLIC_COLUMNS}


class User:
    """Site users. The password hash never leaves this class."""

    @staticmethod
    def create(details: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert a user, hashing the plaintext password first."""
        existing = db.fetch_one(
            "SELECT username, email FROM users WHERE username=$1 OR email=$2",
            [details.get("username"), details.get("email")],
        )
        if existing:
            taken = "Username" if existing["username"] == details.get("username") else "Email"
            raise ConflictError(f"{taken} already registered")

        values = dict(details)
        values["password"] = hash_password(values["password"])
        query = create_values(values, TABLE, PUBLIC_COLUMNS)
        user = db.execute_returning(query.text, query.parameters)
        logger.info("Registered user %s", user["username"])
        return user

    @staticmethod
    def all() -> List[Dict[str, Any]]:
        return db.fetch_all("SELECT username, first_name, last_name, email FROM users ORDER BY username")

    @staticmethod
    def get(username: str) -> Dict[str, Any]:
        user = db.fetch_one(
            "SELECT username, first_name, last_name, email, photo_url FROM users WHERE username=$1",
            [username],
        )
        if not user:
            raise NotFoundError("User")
        return user

    @staticmethod
    def update(username: str, items: Mapping[str, Any]) -> Dict[str, Any]:
        values = dict(items)
        if values.get("password") is not None:
            values["password"] = hash_password(values["password"])

        query = sql_for_partial_update(TABLE, values, "username", username)
        user = db.execute_returning(query.text, query.parameters)
        if not user:
            raise NotFoundError("User")
        logger.info("Updated user %s", username)
        return _public(user)

    @staticmethod
    def delete(username: str) -> str:
        deleted = db.execute_returning("DELETE FROM users WHERE username=$1 RETURNING username", [username])
        if not deleted:
            raise NotFoundError("User")
        logger.info("Deleted user %s", username)
        return "User deleted"

    @staticmethod
    def authenticate(username: str, password: str) -> None:
        """Raise InvalidCredentialsError unless the password matches."""
        row = db.fetch_one("SELECT password FROM users WHERE username=$1", [username])
        if not row or not verify_password(password, row["password"]):
            logger.warning("Failed login for %s", username)
            raise InvalidCredentialsError()

    @staticmethod
    def get_admin_status(username: str) -> bool:
        row = db.fetch_one("SELECT is_admin FROM users WHERE username=$1", [username])
        if not row:
            raise NotFoundError("User")
        return bool(row["is_admin"])
