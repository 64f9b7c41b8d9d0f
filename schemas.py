"""
Schemas for the Store Ratings platform

MongoDB collections are defined below using Pydantic models. Each class name is
converted to lowercase for the collection name (User -> "user").

We will use these collections:
- user: system users (admin, normal user, store owner)
- store: registered stores, each assigned to one owner
- rating: user ratings for stores, one per (user, store) pair

The form models are shared by the API (request bodies) and the client (form
validation), so both sides reject the same input. Response models describe the
camelCase JSON the API returns and the client parses.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


class UserRole(str, Enum):
    USER = "user"
    OWNER = "owner"
    ADMIN = "admin"


NAME_MIN_LENGTH = 20
NAME_MAX_LENGTH = 60
ADDRESS_MAX_LENGTH = 400


def check_password_policy(password: str) -> str:
    # 8-16 chars, at least one uppercase and one special char
    if not (8 <= len(password) <= 16):
        raise ValueError("Password must be 8-16 characters long")
    if not re.search(r"[A-Z]", password):
        raise ValueError("Password must include at least one uppercase letter")
    if not re.search(r"[^A-Za-z0-9]", password):
        raise ValueError("Password must include at least one special character")
    return password


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Collections

class Document(BaseModel):
    model_config = ConfigDict(use_enum_values=True)


class User(Document):
    name: str = Field(..., min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    email: EmailStr
    address: str = Field(..., max_length=ADDRESS_MAX_LENGTH)
    password_hash: str = Field(..., description="BCrypt hash of password")
    role: UserRole = Field(UserRole.USER)
    created_at: datetime = Field(default_factory=utcnow)


class Store(Document):
    owner_id: str = Field(..., description="Reference to user _id (owner)")
    name: str = Field(..., min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    email: EmailStr
    address: str = Field(..., max_length=ADDRESS_MAX_LENGTH)
    created_at: datetime = Field(default_factory=utcnow)


class Rating(Document):
    user_id: str = Field(...)
    store_id: str = Field(...)
    value: int = Field(..., ge=1, le=5)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None


# Forms and request bodies

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, loc_by_alias=False)


class UserForm(CamelModel):
    name: str = Field(..., min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    email: EmailStr
    address: str = Field(..., max_length=ADDRESS_MAX_LENGTH)
    password: str
    role: UserRole = UserRole.USER

    @field_validator("password")
    @classmethod
    def password_policy(cls, value: str) -> str:
        return check_password_policy(value)


class StoreForm(CamelModel):
    name: str = Field(..., min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    email: EmailStr
    address: str = Field(..., max_length=ADDRESS_MAX_LENGTH)
    owner_id: Optional[str] = Field(None, validate_default=True)

    @field_validator("owner_id")
    @classmethod
    def owner_selected(cls, value: Optional[str]) -> str:
        if not value:
            raise ValueError("Select a store owner")
        return value


class LoginForm(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_policy(cls, value: str) -> str:
        return check_password_policy(value)


class ChangePasswordForm(ChangePasswordRequest):
    confirm_password: str

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        if "new_password" in info.data and value != info.data["new_password"]:
            raise ValueError("Passwords do not match")
        return value

    def to_request(self) -> ChangePasswordRequest:
        return ChangePasswordRequest(current_password=self.current_password, new_password=self.new_password)


class RatingForm(CamelModel):
    store_id: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)


# Responses

class UserOut(CamelModel):
    id: str
    name: str
    email: str
    address: str
    role: UserRole
    store_rating: Optional[float] = None


class StoreWithRating(CamelModel):
    id: str
    name: str
    email: str
    address: str
    owner_id: str
    average_rating: float = 0.0
    total_ratings: int = Field(0, ge=0)
    user_rating: Optional[int] = Field(None, ge=1, le=5)


class RatingWithUser(CamelModel):
    id: str
    store_id: str
    user_id: str
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    rating: int = Field(..., ge=1, le=5)
    created_at: datetime


class StoreStatistics(CamelModel):
    total_users: int = Field(..., ge=0)
    total_stores: int = Field(..., ge=0)
    total_ratings: int = Field(..., ge=0)


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class MessageResponse(CamelModel):
    message: str
