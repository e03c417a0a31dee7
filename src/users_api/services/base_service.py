"""
Base service layer for single-statement database operations
"""

import logging
from typing import Dict, Any, List, Optional, Sequence
from dataclasses import dataclass

from users_api.database.connection import Database, DatabaseError, QueryResult

logger = logging.getLogger(__name__)

@dataclass
class ServiceResult:
    """Result from service operation"""
    success: bool
    data: Optional[List[Dict[str, Any]]] = None
    count: int = 0
    error: Optional[str] = None
    error_type: Optional[str] = None

class BaseService:
    """Base service that runs exactly one statement per operation"""

    def __init__(self, database: Database, table_name: str):
        self.database = database
        self.table_name = table_name

    async def _run(self, operation: str, statement: str, params: Sequence[Any] = ()) -> QueryResult:
        """Execute a statement, logging it under the operation name"""
        logger.debug(f"Executing {operation} on {self.table_name}: {statement}")
        return await self.database.query(statement, params)

    @staticmethod
    def database_failure(operation: str, error: DatabaseError) -> ServiceResult:
        logger.error(f"{operation} error: {error}")
        return ServiceResult(
            success=False,
            error=f"Database {operation.upper()} failed: {error}",
            error_type="DATABASE_ERROR"
        )

    @staticmethod
    def not_found(message: str) -> ServiceResult:
        return ServiceResult(
            success=False,
            error=message,
            error_type="RESOURCE_NOT_FOUND"
        )
