"""Identity and document-store adapters.

The Firebase-backed adapters are imported from their own modules so the
core does not load firebase_admin unless it is used.
"""

from work_tracker.providers.base import (
    DocumentStore,
    Identity,
    IdentityHandler,
    IdentityProvider,
    IdentitySubscribers,
)
from work_tracker.providers.memory import InMemoryDocumentStore, LocalIdentityProvider
from work_tracker.providers.sql import SqlDocumentStore

__all__ = [
    "DocumentStore",
    "Identity",
    "IdentityHandler",
    "IdentityProvider",
    "IdentitySubscribers",
    "InMemoryDocumentStore",
    "LocalIdentityProvider",
    "SqlDocumentStore",
]
