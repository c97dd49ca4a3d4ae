"""Async HTTP client for the TeamPulse REST API."""

from __future__ import annotations

from typing import Any
from uuid import UUID

import httpx

DEFAULT_BASE_URL = "http://localhost:3001/api"


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or f"HTTP error! status: {response.status_code}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    if isinstance(error, str):
        return error
    if isinstance(body, dict) and body.get("message"):
        return body["message"]
    return f"HTTP error! status: {response.status_code}"


def _params(**values: Any) -> dict[str, Any]:
    """Drop unset query parameters and stringify the rest."""
    params = {}
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        params[key] = str(value)
    return params


class TeamPulseClient:
    """Thin wrapper over the REST surface.

    The bearer token is remembered after ``login``/``register`` and sent on
    every later request.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        token: str | None = None,
        http: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        self.token = token
        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> TeamPulseClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        response = await self.http.request(method, path, json=json, params=params, headers=headers)
        if response.is_error:
            raise ApiError(response.status_code, _error_message(response))
        return response.json()

    # Auth

    async def register(self, **user: Any) -> dict[str, Any]:
        data = await self.request("POST", "/auth/register", json=user)
        self.token = data.get("token")
        return data

    async def login(self, email: str, password: str) -> dict[str, Any]:
        data = await self.request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data.get("token")
        return data

    async def logout(self) -> None:
        try:
            await self.request("POST", "/auth/logout")
        finally:
            self.token = None

    async def me(self) -> dict[str, Any]:
        return (await self.request("GET", "/auth/me"))["user"]

    # Kudos

    async def send_kudos(
        self,
        to_user_id: UUID | str,
        message: str,
        *,
        tag_ids: list[str] | None = None,
        is_public: bool = True,
        monetary_amount: float | str | None = None,
        currency: str = "USD",
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "toUserId": str(to_user_id),
            "message": message,
            "tagIds": [str(t) for t in tag_ids or []],
            "isPublic": is_public,
            "currency": currency,
        }
        if monetary_amount is not None:
            body["monetaryAmount"] = str(monetary_amount)
        return (await self.request("POST", "/kudos", json=body))["kudos"]

    async def list_kudos(self, page: int = 1, limit: int = 20, **filters: Any) -> dict[str, Any]:
        return await self.request("GET", "/kudos", params=_params(page=page, limit=limit, **filters))

    async def get_kudos(self, kudos_id: UUID | str) -> dict[str, Any]:
        return (await self.request("GET", f"/kudos/{kudos_id}"))["kudos"]

    async def approve_kudos(self, kudos_id: UUID | str, reason: str | None = None) -> dict[str, Any]:
        return (await self.request("POST", f"/kudos/{kudos_id}/approve", json={"reason": reason}))["kudos"]

    async def reject_kudos(self, kudos_id: UUID | str, reason: str | None = None) -> dict[str, Any]:
        return (await self.request("POST", f"/kudos/{kudos_id}/reject", json={"reason": reason}))["kudos"]

    async def kudos_tags(self) -> list[dict[str, Any]]:
        return (await self.request("GET", "/kudos/tags/all"))["tags"]

    # Budgets

    async def my_budget(self) -> dict[str, Any]:
        return (await self.request("GET", "/budgets/me"))["budget"]

    async def allocate_budget(self, user_id: UUID | str, amount: float | str, type: str = "total") -> dict[str, Any]:
        body = {"userId": str(user_id), "amount": str(amount), "type": type}
        return (await self.request("POST", "/budgets/allocate", json=body))["budget"]

    # Notifications

    async def notifications(self, page: int = 1, limit: int = 20, is_read: bool | None = None) -> dict[str, Any]:
        return await self.request("GET", "/notifications", params=_params(page=page, limit=limit, isRead=is_read))

    async def mark_notification_read(self, notification_id: UUID | str) -> dict[str, Any]:
        return (await self.request("PUT", f"/notifications/{notification_id}/read"))["notification"]

    async def mark_all_notifications_read(self) -> int:
        return (await self.request("PUT", "/notifications/read-all"))["count"]

    # Vouchers

    async def vouchers(self, page: int = 1, limit: int = 20, **filters: Any) -> dict[str, Any]:
        return await self.request("GET", "/vouchers", params=_params(page=page, limit=limit, **filters))

    async def redeem_voucher(self, voucher_id: UUID | str) -> dict[str, Any]:
        return (await self.request("POST", f"/vouchers/{voucher_id}/redeem"))["voucher"]
