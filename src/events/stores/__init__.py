from .django_store import DjangoRegistrationStore
from .memory import InMemoryRegistrationStore

__all__ = ["DjangoRegistrationStore", "InMemoryRegistrationStore", "get_registration_store"]


def get_registration_store() -> DjangoRegistrationStore:
    return DjangoRegistrationStore()
