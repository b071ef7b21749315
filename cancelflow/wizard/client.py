# cancelflow/wizard/client.py
"""
How the wizard reaches the cancellation service.

HttpCancellationClient talks to the JSON API over httpx;
ServiceCancellationClient calls a CancellationService in-process (scripts, tests).
Both raise CancellationApiError for every failure, so the wizard handles one type.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol

import httpx

from cancelflow.core.errors import CancellationError
from cancelflow.services.cancellation_service import CancellationService
from cancelflow.web.schemas import CancellationOut

logger = logging.getLogger(__name__)

# snake_case service field -> JSON body key
_WIRE_KEYS = {"reason": "reason", "accepted_downsell": "acceptedDownsell"}


class CancellationApiError(Exception):
    def __init__(self, status: Optional[int], code: str, detail: str = "") -> None:
        super().__init__(f"{status or '-'} {code}: {detail}")
        self.status = status
        self.code = code
        self.detail = detail


@dataclass(frozen=True)
class CreatedCancellation:
    id: str
    downsell_variant: str


class CancellationApi(Protocol):
    async def create(self, user_id: str, subscription_id: str) -> CreatedCancellation: ...

    async def update(self, cancellation_id: str, fields: Mapping[str, Any]) -> dict[str, Any]: ...


class HttpCancellationClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> "HttpCancellationClient":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _send(
        self, method: str, body: dict[str, Any], required: tuple[str, ...] = ()
    ) -> dict[str, Any]:
        try:
            resp = await self._client.request(method, "/cancellations", json=body)
        except httpx.HTTPError as e:
            raise CancellationApiError(None, "transport_error", str(e)) from e

        if resp.is_error:
            try:
                payload = resp.json()
            except ValueError:
                payload = {}
            if not isinstance(payload, dict):
                payload = {}
            raise CancellationApiError(
                resp.status_code,
                str(payload.get("error") or "http_error"),
                str(payload.get("detail") or resp.reason_phrase),
            )
        try:
            data = resp.json()
        except ValueError as e:
            raise CancellationApiError(resp.status_code, "bad_response", "response is not JSON") from e
        if not isinstance(data, dict):
            raise CancellationApiError(resp.status_code, "bad_response", "response is not a JSON object")
        missing = [k for k in required if k not in data]
        if missing:
            raise CancellationApiError(
                resp.status_code, "bad_response", f"response lacks {', '.join(missing)}"
            )
        return data

    async def create(self, user_id: str, subscription_id: str) -> CreatedCancellation:
        data = await self._send(
            "POST",
            {"userId": user_id, "subscriptionId": subscription_id},
            required=("id", "downsell_variant"),
        )
        return CreatedCancellation(id=str(data["id"]), downsell_variant=str(data["downsell_variant"]))

    async def update(self, cancellation_id: str, fields: Mapping[str, Any]) -> dict[str, Any]:
        body: dict[str, Any] = {"cancellationId": cancellation_id}
        for k, v in fields.items():
            body[_WIRE_KEYS[k]] = v
        return await self._send("PUT", body)


class ServiceCancellationClient:
    def __init__(self, service: CancellationService) -> None:
        self.service = service

    async def create(self, user_id: str, subscription_id: str) -> CreatedCancellation:
        try:
            record = await self.service.create(user_id, subscription_id)
        except CancellationError as e:
            raise CancellationApiError(e.status_code, e.code, e.detail) from e
        return CreatedCancellation(id=record.id, downsell_variant=record.downsell_variant)

    async def update(self, cancellation_id: str, fields: Mapping[str, Any]) -> dict[str, Any]:
        try:
            record = await self.service.update(cancellation_id, fields)
        except CancellationError as e:
            raise CancellationApiError(e.status_code, e.code, e.detail) from e
        return CancellationOut.model_validate(record).model_dump(mode="json")
