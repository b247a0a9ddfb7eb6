"""
Pydantic models for user data.

Passwords are accepted on registration and login only; they are never
part of a response model.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    """Schema for registering a user."""

    username: str = Field(..., min_length=1, examples=["alice"])
    email: str = Field(..., min_length=3, pattern=r"^[^@\s]+@[^@\s]+$", examples=["alice@example.com"])
    password: str = Field(..., min_length=1, examples=["strongpassword"])


class UserLogin(BaseModel):
    email: str = Field(..., examples=["alice@example.com"])
    password: str = Field(..., examples=["strongpassword"])


class UserRead(BaseModel):
    id: int
    username: str
    email: str
    registered_events: List[int] = Field(default_factory=list, alias="registeredEvents")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class TokenRead(BaseModel):
    token: str


class MessageRead(BaseModel):
    message: str
