from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from venue_booking.application.dto.package_payload import DayOffPayloadDTO, PackagePayloadDTO
from venue_booking.application.exceptions import UpstreamServiceError
from venue_booking.application.ports.catalog import CatalogPort
from venue_booking.core.config import settings
from venue_booking.domain.entities.day_off import DayOff
from venue_booking.domain.entities.package import Package


def unwrap(body: Any) -> Any:
    """The booking API wraps payloads as {"success": ..., "data": ...}."""
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


class HttpCatalog(CatalogPort):
    def __init__(
        self,
        base_url: str | None = None,
        api_token: str | None = None,
        default_interval: int | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = (base_url or settings.CATALOG_BASE_URL).rstrip("/")
        self._api_token = api_token if api_token is not None else settings.API_TOKEN
        self._default_interval = default_interval or settings.DEFAULT_SLOT_INTERVAL_MINUTES
        self._client = client or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        return headers

    async def get_package(self, package_id: int) -> Package | None:
        url = f"{self._base_url}/packages/{package_id}"
        try:
            response = await self._client.get(url, headers=self._headers())
            if response.status_code == 404:
                return None
            response.raise_for_status()
            payload = PackagePayloadDTO.model_validate(unwrap(response.json()))
        except (httpx.HTTPError, ValueError) as e:
            self._logger.error("Error loading package", extra={"package_id": package_id, "error": str(e)})
            raise UpstreamServiceError(f"Could not load package {package_id}") from e

        return payload.to_entity(default_interval=self._default_interval)

    async def list_day_offs(self, location_id: int) -> list[DayOff]:
        url = f"{self._base_url}/day-offs/location/{location_id}"
        try:
            response = await self._client.get(url, headers=self._headers())
            response.raise_for_status()
            items = unwrap(response.json()) or []
        except (httpx.HTTPError, ValueError) as e:
            self._logger.error("Error loading day offs", extra={"error": str(e)})
            raise UpstreamServiceError(f"Could not load day offs for location {location_id}") from e

        day_offs: list[DayOff] = []
        for item in items:
            try:
                day_offs.append(DayOffPayloadDTO.model_validate(item).to_entity())
            except ValidationError as e:
                self._logger.warning("Skipping malformed day off", extra={"error": str(e)})
        return day_offs

    async def aclose(self) -> None:
        await self._client.aclose()
