"""In-process implementation of the registration store.

Everything lives in dictionaries guarded by one re-entrant lock. `atomic()` holds the
lock for the whole block and restores a snapshot if the block raises, which gives
the same all-or-nothing behaviour as a serializable database transaction.
"""

import copy
import threading
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from django.utils import timezone

from events.domain import (
    EventRecord,
    RegistrationRecord,
    RegistrationStatus,
    TicketRecord,
    generate_qr_code,
)
from events.exceptions import RegistrationRejectedError, RejectionReason


@dataclass
class StoredNotification:
    user_id: UUID
    title: str
    message: str
    link: str = ""
    read: bool = False


@dataclass
class StoredAnalytics:
    page_views: int = 0
    total_revenue: Decimal = Decimal("0")


@dataclass
class _State:
    users: dict[UUID, tuple[str, str]] = field(default_factory=dict)
    events: dict[UUID, EventRecord] = field(default_factory=dict)
    tickets: dict[UUID, TicketRecord] = field(default_factory=dict)
    registrations: dict[UUID, RegistrationRecord] = field(default_factory=dict)
    analytics: dict[UUID, StoredAnalytics] = field(default_factory=dict)
    notifications: list[StoredNotification] = field(default_factory=list)


class _Repository:
    def __init__(self, store: "InMemoryRegistrationStore") -> None:
        self._store = store

    @property
    def _state(self) -> _State:
        return self._store.state


class MemoryEventRepository(_Repository):
    def get(self, event_id: UUID, *, for_update: bool = False) -> EventRecord | None:
        with self._store.lock:
            event = self._state.events.get(event_id)
            return replace(event) if event else None


class MemoryTicketRepository(_Repository):
    def get(self, ticket_id: UUID, *, for_update: bool = False) -> TicketRecord | None:
        with self._store.lock:
            ticket = self._state.tickets.get(ticket_id)
            return replace(ticket) if ticket else None

    def increment_sold(self, ticket_id: UUID, quantity: int) -> bool:
        with self._store.lock:
            ticket = self._state.tickets.get(ticket_id)
            if ticket is None:
                return False
            if ticket.quantity is not None and ticket.sold + quantity > ticket.quantity:
                return False
            ticket.sold += quantity
            return True


class MemoryRegistrationRepository(_Repository):
    def _export(self, registration: RegistrationRecord) -> RegistrationRecord:
        name, email = self._state.users.get(registration.user_id, ("", ""))
        ticket = self._state.tickets.get(registration.ticket_id) if registration.ticket_id else None
        event = self._state.events.get(registration.event_id)
        return replace(
            registration,
            attendee_name=name,
            attendee_email=email,
            ticket_name=ticket.name if ticket else None,
            event_title=event.title if event else "",
            event_slug=event.slug if event else "",
        )

    def get(self, registration_id: UUID) -> RegistrationRecord | None:
        with self._store.lock:
            registration = self._state.registrations.get(registration_id)
            return self._export(registration) if registration else None

    def create(
        self,
        *,
        event_id: UUID,
        user_id: UUID,
        ticket_id: UUID | None,
        status: str,
        stripe_payment_id: str | None = None,
        quantity: int = 1,
    ) -> RegistrationRecord:
        with self._store.lock:
            if self.has_active(event_id, user_id):
                raise RegistrationRejectedError(RejectionReason.DUPLICATE)
            registration = RegistrationRecord(
                id=uuid.uuid4(),
                event_id=event_id,
                user_id=user_id,
                ticket_id=ticket_id,
                status=status,
                qr_code=generate_qr_code(),
                created_at=timezone.now(),
                stripe_payment_id=stripe_payment_id,
                quantity=quantity,
            )
            self._state.registrations[registration.id] = registration
            return self._export(registration)

    def count_active(self, event_id: UUID) -> int:
        with self._store.lock:
            return sum(1 for r in self._state.registrations.values() if r.event_id == event_id and r.is_active)

    def has_active(self, event_id: UUID, user_id: UUID) -> bool:
        with self._store.lock:
            return any(
                r.event_id == event_id and r.user_id == user_id and r.is_active
                for r in self._state.registrations.values()
            )

    def find_by_qr_code(self, event_id: UUID, qr_code: str) -> RegistrationRecord | None:
        with self._store.lock:
            for registration in self._state.registrations.values():
                if registration.event_id == event_id and registration.qr_code == qr_code:
                    return self._export(registration)
            return None

    def find_by_email(self, event_id: UUID, email: str) -> RegistrationRecord | None:
        with self._store.lock:
            user_ids = {uid for uid, (_, mail) in self._state.users.items() if mail.lower() == email.lower()}
            matches = [
                r for r in self._state.registrations.values() if r.event_id == event_id and r.user_id in user_ids
            ]
            if not matches:
                return None
            matches.sort(key=lambda r: r.created_at, reverse=True)
            matches.sort(key=lambda r: r.status == RegistrationStatus.CANCELLED)
            return self._export(matches[0])

    def list_for_user(self, user_id: UUID) -> list[RegistrationRecord]:
        with self._store.lock:
            found = [self._export(r) for r in self._state.registrations.values() if r.user_id == user_id]
            return sorted(found, key=lambda r: r.created_at, reverse=True)

    def transition_by_payment_id(self, payment_id: str, *, from_status: str, to_status: str) -> int:
        with self._store.lock:
            changed = 0
            for registration in self._state.registrations.values():
                if registration.stripe_payment_id == payment_id and registration.status == from_status:
                    registration.status = to_status
                    changed += 1
            return changed

    def transition(self, registration_id: UUID, *, from_status: str, to_status: str) -> int:
        with self._store.lock:
            registration = self._state.registrations.get(registration_id)
            if registration is None or registration.status != from_status:
                return 0
            registration.status = to_status
            return 1

    def mark_checked_in(self, registration_id: UUID, at: datetime) -> int:
        with self._store.lock:
            registration = self._state.registrations.get(registration_id)
            if (
                registration is None
                or registration.status != RegistrationStatus.CONFIRMED
                or registration.checked_in
            ):
                return 0
            registration.checked_in = True
            registration.checked_in_at = at
            return 1


class MemoryAnalyticsRepository(_Repository):
    def add_revenue(self, event_id: UUID, amount: Decimal) -> None:
        with self._store.lock:
            self._state.analytics.setdefault(event_id, StoredAnalytics()).total_revenue += amount

    def increment_page_views(self, event_id: UUID) -> None:
        with self._store.lock:
            self._state.analytics.setdefault(event_id, StoredAnalytics()).page_views += 1


class MemoryNotificationRepository(_Repository):
    def create(self, *, user_id: UUID, title: str, message: str, link: str = "") -> None:
        with self._store.lock:
            self._state.notifications.append(
                StoredNotification(user_id=user_id, title=title, message=message, link=link)
            )


class InMemoryRegistrationStore:
    """Registration store kept in process memory."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.state = _State()
        self._depth = 0
        self.events = MemoryEventRepository(self)
        self.tickets = MemoryTicketRepository(self)
        self.registrations = MemoryRegistrationRepository(self)
        self.analytics = MemoryAnalyticsRepository(self)
        self.notifications = MemoryNotificationRepository(self)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self.lock:
            snapshot = copy.deepcopy(self.state) if self._depth == 0 else None
            self._depth += 1
            try:
                yield
            except BaseException:
                if snapshot is not None:
                    self.state = snapshot
                raise
            finally:
                self._depth -= 1

    # Seeding helpers

    def add_user(self, *, email: str, name: str = "", user_id: UUID | None = None) -> UUID:
        user_id = user_id or uuid.uuid4()
        with self.lock:
            self.state.users[user_id] = (name, email)
        return user_id

    def add_event(
        self,
        *,
        organizer_id: UUID,
        title: str = "Launch Party",
        slug: str | None = None,
        status: str = "PUBLISHED",
        capacity: int | None = None,
    ) -> EventRecord:
        event_id = uuid.uuid4()
        event = EventRecord(
            id=event_id,
            slug=slug or f"event-{event_id.hex[:8]}",
            title=title,
            status=status,
            capacity=capacity,
            organizer_id=organizer_id,
        )
        with self.lock:
            self.state.events[event.id] = event
        return replace(event)

    def add_ticket(
        self,
        *,
        event_id: UUID,
        name: str = "General Admission",
        price: Decimal = Decimal("0"),
        quantity: int | None = None,
        sold: int = 0,
    ) -> TicketRecord:
        ticket = TicketRecord(
            id=uuid.uuid4(), event_id=event_id, name=name, price=price, quantity=quantity, sold=sold
        )
        with self.lock:
            self.state.tickets[ticket.id] = ticket
        return replace(ticket)

    def notifications_for(self, user_id: UUID) -> list[StoredNotification]:
        with self.lock:
            return [n for n in self.state.notifications if n.user_id == user_id]

    def analytics_for(self, event_id: UUID) -> StoredAnalytics | None:
        with self.lock:
            return self.state.analytics.get(event_id)
