"""Schema for accounts module."""

import typing as t

from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from ninja import Schema
from pydantic import UUID4, EmailStr, Field, model_validator

from common.schema import StrippedString

from .models import EventFlowUser


class RegisterUserSchema(Schema):
    name: StrippedString = Field(..., min_length=2, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8)

    @model_validator(mode="after")
    def validate_password_strength(self) -> t.Self:
        """Run Django's password validators against the would-be user."""
        tmp_user = EventFlowUser(email=self.email, username=self.email, name=self.name)
        try:
            validate_password(self.password, user=tmp_user)
        except DjangoValidationError as e:
            raise ValueError(" ".join(e.messages)) from e
        return self


class RegisteredUserSchema(Schema):
    id: UUID4


class MinimalUserSchema(Schema):
    id: UUID4
    name: str
    email: str
    avatar: str
