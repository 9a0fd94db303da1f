import secrets
import string
import typing as t
from datetime import datetime, time, timedelta

import faker
import pytest
from django.core.cache import cache
from django.test.client import Client
from django.utils import timezone
from ninja_jwt.tokens import RefreshToken

from accounts.models import EventFlowUser


class EventFlowUserFactory:
    """Factory for creating EventFlowUser instances for testing."""

    fake = faker.Faker()

    def create_user(self, **kwargs: t.Any) -> EventFlowUser:
        email = kwargs.pop("email", "".join(secrets.choice(string.ascii_lowercase) for _ in range(8)) + "@user.test")
        password = kwargs.pop("password", "password")
        name = kwargs.pop("name", self.fake.name())
        return EventFlowUser.objects.create_user_with_email(email=email, password=password, name=name, **kwargs)

    def __call__(self, **kwargs: t.Any) -> EventFlowUser:
        return self.create_user(**kwargs)


@pytest.fixture
def user_factory() -> EventFlowUserFactory:
    return EventFlowUserFactory()


@pytest.fixture
def organizer(user_factory: EventFlowUserFactory) -> EventFlowUser:
    return user_factory(email="organizer@example.com", name="Olga Organizer")


@pytest.fixture
def attendee(user_factory: EventFlowUserFactory) -> EventFlowUser:
    return user_factory(email="attendee@example.com", name="Alex Attendee")


def auth_client(user: EventFlowUser) -> Client:
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {str(refresh.access_token)}")  # type: ignore[attr-defined]


@pytest.fixture
def client_for() -> t.Callable[[EventFlowUser], Client]:
    """Build an authenticated API client for any user."""
    return auth_client


@pytest.fixture
def organizer_client(organizer: EventFlowUser) -> Client:
    """API client for the event organizer."""
    return auth_client(organizer)


@pytest.fixture
def attendee_client(attendee: EventFlowUser) -> Client:
    """API client for a regular attendee."""
    return auth_client(attendee)


@pytest.fixture
def next_week() -> datetime:
    same_time_next_week = timezone.now() + timedelta(days=7)
    return timezone.make_aware(
        datetime.combine(same_time_next_week.date(), time(hour=12, minute=0)),
        timezone.get_current_timezone(),
    )


@pytest.fixture(autouse=True)
def clear_cache() -> t.Iterator[None]:
    """Throttle counters live in the local-memory cache; start every test from zero."""
    cache.clear()
    yield
    cache.clear()
