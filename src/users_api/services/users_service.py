"""
Users service - one parameterized statement per operation over tbl_users
"""

import logging
from typing import Optional

from fastapi import Depends

from users_api.database.connection import Database, DatabaseError, get_database
from users_api.services.base_service import BaseService, ServiceResult
from users_api.utils.passwords import hash_password

logger = logging.getLogger(__name__)

USERS_TABLE = "tbl_users"

# Columns that are ever returned; the password column never leaves the service
PUBLIC_COLUMNS = "id, firstname, fullname, lastname"

# Columns an update may touch, in SET clause order
UPDATABLE_FIELDS = ("firstname", "fullname", "lastname")


class UsersService(BaseService):
    """Service for user record operations"""

    def __init__(self, database: Database):
        super().__init__(database, USERS_TABLE)

    async def ping(self) -> ServiceResult:
        """Issue a trivial read and return the store's current timestamp"""
        try:
            result = await self._run("Ping", "SELECT NOW() AS now")
        except DatabaseError as e:
            return self.database_failure("Ping", e)
        return ServiceResult(success=True, data=result.rows, count=len(result.rows))

    async def list_users(self) -> ServiceResult:
        try:
            result = await self._run(
                "Query",
                f"SELECT {PUBLIC_COLUMNS} FROM {self.table_name} ORDER BY id"
            )
        except DatabaseError as e:
            return self.database_failure("Query", e)
        return ServiceResult(success=True, data=result.rows, count=len(result.rows))

    async def get_user(self, user_id: int) -> ServiceResult:
        try:
            result = await self._run(
                "Query",
                f"SELECT {PUBLIC_COLUMNS} FROM {self.table_name} WHERE id = $1",
                [user_id]
            )
        except DatabaseError as e:
            return self.database_failure("Query", e)

        if not result.rows:
            return self.not_found(f"User {user_id} not found")
        return ServiceResult(success=True, data=result.rows[:1], count=1)

    async def create_user(
        self,
        firstname: str,
        fullname: Optional[str],
        lastname: str,
        password: str
    ) -> ServiceResult:
        """
        Hash the password and insert a new user

        Args:
            firstname: Required first name
            fullname: Optional full name, stored as NULL when absent
            lastname: Required last name
            password: Plaintext password; only its bcrypt digest is stored

        Returns:
            ServiceResult whose single row echoes the name fields and the
            generated id
        """
        hashed_password = await hash_password(password)

        try:
            result = await self._run(
                "Insert",
                f"INSERT INTO {self.table_name} (firstname, fullname, lastname, password) "
                f"VALUES ($1, $2, $3, $4) RETURNING id",
                [firstname, fullname, lastname, hashed_password]
            )
        except DatabaseError as e:
            return self.database_failure("Insert", e)

        user = {
            "id": result.insert_id,
            "firstname": firstname,
            "fullname": fullname,
            "lastname": lastname
        }
        logger.info(f"Created user {result.insert_id}")
        return ServiceResult(success=True, data=[user], count=1)

    async def update_user(self, user_id: int, fields: dict, password: Optional[str] = None) -> ServiceResult:
        """
        Update the given name fields and, when supplied, the password

        Existence is judged only by the affected-row count of the UPDATE, so
        an update that leaves the values unchanged still succeeds.
        """
        set_parts = []
        params = []
        for field_name in UPDATABLE_FIELDS:
            if field_name in fields:
                params.append(fields[field_name])
                set_parts.append(f"{field_name} = ${len(params)}")

        if password:
            params.append(await hash_password(password))
            set_parts.append(f"password = ${len(params)}")

        params.append(user_id)
        statement = f"UPDATE {self.table_name} SET {', '.join(set_parts)} WHERE id = ${len(params)}"

        try:
            result = await self._run("Update", statement, params)
        except DatabaseError as e:
            return self.database_failure("Update", e)

        if result.affected_rows == 0:
            return self.not_found(f"User {user_id} not found")
        logger.info(f"Updated user {user_id}")
        return ServiceResult(success=True, count=result.affected_rows)

    async def delete_user(self, user_id: int) -> ServiceResult:
        try:
            result = await self._run(
                "Delete",
                f"DELETE FROM {self.table_name} WHERE id = $1",
                [user_id]
            )
        except DatabaseError as e:
            return self.database_failure("Delete", e)

        if result.affected_rows == 0:
            return self.not_found(f"User {user_id} not found")
        logger.info(f"Deleted user {user_id}")
        return ServiceResult(success=True, count=result.affected_rows)


def get_users_service(database: Database = Depends(get_database)) -> UsersService:
    """Build a service bound to the application's database handle"""
    return UsersService(database)
