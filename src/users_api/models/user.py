"""
User Pydantic models
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel

class UserCreate(BaseModel):
    # Presence of the required fields is checked in the route so that
    # missing values produce the documented 400 messages
    firstname: Optional[str] = None
    fullname: Optional[str] = None
    lastname: Optional[str] = None
    password: Optional[str] = None

class UserUpdateRequest(BaseModel):
    firstname: Optional[str] = None
    fullname: Optional[str] = None
    lastname: Optional[str] = None
    password: Optional[str] = None

class UserResponse(BaseModel):
    id: int
    firstname: Optional[str]
    fullname: Optional[str]
    lastname: Optional[str]

class UserCreatedResponse(UserResponse):
    message: str = "User created successfully"

class MessageResponse(BaseModel):
    message: str

class PingResponse(BaseModel):
    status: str
    time: datetime
