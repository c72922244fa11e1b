"""
Request schemas and the helpers that turn pydantic failures into
field-level violations.

Each endpoint declares its own schema; ``validate_body`` returns the parsed
model or raises ``ValidationError`` with a list of ``{field, message}``.
"""

from __future__ import annotations

from typing import Annotated, List, Optional

from bson.objectid import ObjectId
from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    HttpUrl,
    StringConstraints,
    field_validator,
    ValidationError as SchemaError,
)

from blog_backend.errors import ValidationError


def is_object_id(value: str) -> bool:
    return isinstance(value, str) and ObjectId.is_valid(value)


def _check_object_id(value: str) -> str:
    if not is_object_id(value):
        raise ValueError('must be a valid id')
    return value


# bcrypt only looks at the first 72 bytes and refuses anything longer
MAX_PASSWORD_BYTES = 72


def password_fits(value: str) -> bool:
    return len(value.encode("utf-8")) <= MAX_PASSWORD_BYTES


def _check_password(value):
    if value is not None and not password_fits(value):
        raise ValueError(f"must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


# Passwords are taken exactly as sent.
NewPassword = Annotated[str, StringConstraints(strip_whitespace=False, min_length=6)]
GivenPassword = Annotated[str, StringConstraints(strip_whitespace=False, min_length=1)]


class RequestSchema(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    def changes(self) -> dict:
        """Fields the client actually sent, for partial updates."""
        return self.model_dump(exclude_unset=True, exclude_none=True, mode="json")


class RegisterRequest(RequestSchema):
    username: str = Field(min_length=1)
    email: EmailStr
    password: NewPassword

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        return _check_password(value)


class LoginRequest(RequestSchema):
    email: EmailStr
    password: GivenPassword


class PostCreate(RequestSchema):
    title: str = Field(min_length=1)
    desc: str = Field(min_length=1)
    username: str = Field(min_length=1)
    userId: str
    photo: Optional[HttpUrl] = None
    categories: List[str] = Field(default_factory=list)

    @field_validator("userId")
    @classmethod
    def check_user_id(cls, value: str) -> str:
        return _check_object_id(value)


class PostUpdate(RequestSchema):
    title: Optional[str] = Field(default=None, min_length=1)
    desc: Optional[str] = Field(default=None, min_length=1)
    photo: Optional[HttpUrl] = None
    categories: Optional[List[str]] = None


class CommentCreate(RequestSchema):
    comment: str = Field(min_length=1)
    author: str = Field(min_length=1)
    postId: str
    userId: str

    @field_validator("postId", "userId")
    @classmethod
    def check_ids(cls, value: str) -> str:
        return _check_object_id(value)


class CommentUpdate(RequestSchema):
    comment: Optional[str] = Field(default=None, min_length=1)


class UserUpdate(RequestSchema):
    username: Optional[str] = Field(default=None, min_length=3)
    email: Optional[EmailStr] = None
    password: Optional[NewPassword] = None
    profilePic: Optional[str] = None

    @field_validator("password")
    @classmethod
    def check_password(cls, value: Optional[str]) -> Optional[str]:
        return _check_password(value)


def violations_from(error: SchemaError) -> List[dict]:
    violations = []
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "body"
        violations.append({"field": field, "message": item["msg"]})
    return violations


def validate_body(schema, payload):
    if not isinstance(payload, dict):
        raise ValidationError([{"field": "body", "message": "JSON object body is required"}])
    try:
        return schema.model_validate(payload)
    except SchemaError as e:
        raise ValidationError(violations_from(e))


def parse_object_id(value: str, field: str = "id") -> ObjectId:
    if not is_object_id(value):
        raise ValidationError([{"field": field, "message": f"Valid {field} is required"}])
    return ObjectId(value)
