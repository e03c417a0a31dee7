"""
Health check API route
"""

import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from users_api.models.user import PingResponse
from users_api.services.users_service import UsersService, get_users_service

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/ping", response_model=PingResponse)
async def ping(service: UsersService = Depends(get_users_service)):
    """Check store connectivity and report the store's clock"""
    result = await service.ping()

    if not result.success:
        return JSONResponse(status_code=500, content={"error": "Database error"})

    return PingResponse(status="ok", time=result.data[0]["now"])
