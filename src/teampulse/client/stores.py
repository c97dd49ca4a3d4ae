"""Per-feature client stores.

Stores cache API results and persist them as versioned snapshots. They do
not reach into each other; everything shared travels in the read-only
``ClientContext`` handed to each store.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from uuid import uuid4

from teampulse.client.api import TeamPulseClient
from teampulse.client.storage import SnapshotStorage


@dataclass(frozen=True)
class ClientContext:
    """Shared, read-only context for every store."""

    client: TeamPulseClient
    storage: SnapshotStorage
    user_id: str | None = None
    demo: bool = False

    def with_user(self, user_id: str | None) -> ClientContext:
        return dataclasses.replace(self, user_id=user_id)


class SnapshotStore:
    """Base store: state dict persisted under ``teampulse-<feature>``."""

    feature: str = ""
    version: int = 1

    def __init__(self, context: ClientContext):
        self.context = context
        self.state: dict[str, Any] = self.initial_state()
        stored = context.storage.load(self.key, self.version)
        if isinstance(stored, dict):
            self.state.update(stored)
            self.on_rehydrate()

    @property
    def key(self) -> str:
        return f"teampulse-{self.feature}"

    def initial_state(self) -> dict[str, Any]:
        return {}

    def on_rehydrate(self) -> None:
        pass

    def set_state(self, **changes: Any) -> None:
        self.state.update(changes)
        self.context.storage.save(self.key, self.state, self.version)

    def clear(self) -> None:
        self.state = self.initial_state()
        self.context.storage.remove_item(self.key)


class AuthStore(SnapshotStore):
    feature = "auth"

    def initial_state(self) -> dict[str, Any]:
        return {"token": None, "user": None}

    def on_rehydrate(self) -> None:
        if self.state.get("token"):
            self.context.client.token = self.state["token"]

    @property
    def user(self) -> dict[str, Any] | None:
        return self.state["user"]

    @property
    def is_authenticated(self) -> bool:
        return bool(self.state["token"])

    def session_context(self) -> ClientContext:
        """Context bound to the signed-in user, for the other stores."""
        user = self.state["user"]
        return self.context.with_user(user["id"] if user else None)

    async def login(self, email: str, password: str) -> dict[str, Any]:
        data = await self.context.client.login(email, password)
        self.set_state(token=data["token"], user=data["user"])
        return data["user"]

    async def register(self, **user: Any) -> dict[str, Any]:
        data = await self.context.client.register(**user)
        self.set_state(token=data["token"], user=data["user"])
        return data["user"]

    async def refresh_user(self) -> dict[str, Any]:
        user = await self.context.client.me()
        self.set_state(user=user)
        return user

    async def logout(self) -> None:
        try:
            await self.context.client.logout()
        finally:
            self.clear()


class KudosStore(SnapshotStore):
    feature = "kudos"

    def initial_state(self) -> dict[str, Any]:
        return {"kudos": [], "tags": []}

    @property
    def kudos(self) -> list[dict[str, Any]]:
        return self.state["kudos"]

    async def refresh(self, page: int = 1, limit: int = 20, **filters: Any) -> list[dict[str, Any]]:
        if self.context.demo:
            return self.kudos
        data = await self.context.client.list_kudos(page, limit, **filters)
        self.set_state(kudos=data["kudos"])
        return self.kudos

    async def refresh_tags(self) -> list[dict[str, Any]]:
        if not self.context.demo:
            self.set_state(tags=await self.context.client.kudos_tags())
        return self.state["tags"]

    async def send(self, to_user_id: str, message: str, **options: Any) -> dict[str, Any]:
        """Send kudos; in demo mode it is only recorded locally."""
        if self.context.demo:
            kudos = {
                "id": str(uuid4()),
                "fromUserId": self.context.user_id,
                "toUserId": str(to_user_id),
                "message": message,
                "isPublic": options.get("is_public", True),
                "status": "APPROVED",
                "monetaryAmount": str(options.get("monetary_amount") or "0"),
                "currency": options.get("currency", "USD"),
                "tags": [],
                "createdAt": datetime.now(timezone.utc).isoformat(),
            }
        else:
            kudos = await self.context.client.send_kudos(to_user_id, message, **options)
        self.set_state(kudos=[kudos, *self.kudos])
        return kudos

    def for_user(self, user_id: str) -> list[dict[str, Any]]:
        return [k for k in self.kudos if user_id in (k["fromUserId"], k["toUserId"])]

    def stats(self) -> dict[str, int]:
        """Sent and received counts for the context's user."""
        user_id = self.context.user_id
        return {
            "sent": sum(1 for k in self.kudos if k["fromUserId"] == user_id),
            "received": sum(1 for k in self.kudos if k["toUserId"] == user_id),
        }


class BudgetStore(SnapshotStore):
    feature = "budget"

    def initial_state(self) -> dict[str, Any]:
        return {"budget": None}

    async def refresh(self) -> dict[str, Any] | None:
        if not self.context.demo:
            self.set_state(budget=await self.context.client.my_budget())
        return self.state["budget"]

    def available(self) -> tuple[Decimal, Decimal]:
        """(available total, available monthly) from the cached budget."""
        budget = self.state["budget"]
        if not budget:
            return Decimal("0"), Decimal("0")
        return Decimal(str(budget["availableBudget"])), Decimal(str(budget["availableMonthlyBudget"]))


class NotificationStore(SnapshotStore):
    feature = "notifications"

    def initial_state(self) -> dict[str, Any]:
        return {"notifications": [], "unreadCount": 0}

    @property
    def unread_count(self) -> int:
        return self.state["unreadCount"]

    async def refresh(self, page: int = 1, limit: int = 20) -> list[dict[str, Any]]:
        if not self.context.demo:
            data = await self.context.client.notifications(page, limit)
            self.set_state(notifications=data["notifications"], unreadCount=data["unreadCount"])
        return self.state["notifications"]

    async def mark_read(self, notification_id: str) -> None:
        if not self.context.demo:
            await self.context.client.mark_notification_read(notification_id)
        notifications = [
            {**n, "isRead": True} if n["id"] == str(notification_id) else n
            for n in self.state["notifications"]
        ]
        self.set_state(
            notifications=notifications,
            unreadCount=sum(1 for n in notifications if not n["isRead"]),
        )

    async def mark_all_read(self) -> None:
        if not self.context.demo:
            await self.context.client.mark_all_notifications_read()
        self.set_state(
            notifications=[{**n, "isRead": True} for n in self.state["notifications"]],
            unreadCount=0,
        )
