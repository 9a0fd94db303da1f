import re
import typing as t
import uuid

from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models


class EventFlowUserManager(UserManager["EventFlowUser"]):
    def create_user_with_email(self, *, email: str, password: str, name: str = "", **extra: t.Any) -> "EventFlowUser":
        """Create a user whose username is their e-mail address."""
        email = self.normalize_email(email)
        return self.create_user(username=email, email=email, password=password, name=name, **extra)


class EventFlowUser(AbstractUser):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, help_text="E-mail address, also used as the login name")
    name = models.CharField(max_length=255, blank=True, db_index=True, help_text="Display name")
    avatar = models.URLField(blank=True, default="", help_text="Avatar image URL")

    objects = EventFlowUserManager()  # type: ignore[misc]

    class Meta:
        ordering = ["username"]

    @property
    def display_name(self) -> str:
        """Display name."""
        return self.get_display_name()

    def get_display_name(self) -> str:
        """Returns the user's name, or a readable form of their e-mail as a fallback."""
        return self.name or self.get_full_name() or re.sub(r"(\W|_)+", " ", self.email.split("@")[0]).title()
