"""Python client for the TeamPulse API, with versioned local snapshots."""

from teampulse.client.api import ApiError, TeamPulseClient
from teampulse.client.storage import SnapshotStorage
from teampulse.client.stores import (
    AuthStore,
    BudgetStore,
    ClientContext,
    KudosStore,
    NotificationStore,
)

__all__ = [
    "ApiError",
    "AuthStore",
    "BudgetStore",
    "ClientContext",
    "KudosStore",
    "NotificationStore",
    "SnapshotStorage",
    "TeamPulseClient",
]
