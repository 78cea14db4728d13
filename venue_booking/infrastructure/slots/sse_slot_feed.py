from __future__ import annotations

import json
import logging
from datetime import date
from typing import AsyncIterator

import httpx
from pydantic import ValidationError

from venue_booking.application.dto.slot_feed_event import SlotFeedEventDTO
from venue_booking.application.exceptions import SlotFeedError
from venue_booking.application.ports.slot_feed import SlotFeedPort
from venue_booking.core.config import settings
from venue_booking.domain.entities.time_slot import SlotAvailability


class SseSlotFeed(SlotFeedPort):
    """Reads the available-slots server-sent event stream, one message per booking change."""

    def __init__(
        self,
        base_url: str | None = None,
        api_token: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = (base_url or settings.CATALOG_BASE_URL).rstrip("/")
        self._api_token = api_token if api_token is not None else settings.API_TOKEN
        # No read timeout: the stream stays open between updates
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.HTTP_TIMEOUT_SECONDS, read=None)
        )
        self._logger = logging.getLogger(__name__)

    def _url(self, package_id: int, room_id: int | None, day: date) -> str:
        return f"{self._base_url}/package-time-slots/available-slots/{package_id}/{room_id or 0}/{day.isoformat()}"

    async def stream(self, package_id: int, room_id: int | None, day: date) -> AsyncIterator[SlotAvailability]:
        params = {"token": self._api_token} if self._api_token else None
        headers = {"Accept": "text/event-stream"}
        try:
            async with self._client.stream(
                "GET", self._url(package_id, room_id, day), params=params, headers=headers
            ) as response:
                response.raise_for_status()
                event = "message"
                data: list[str] = []
                async for line in response.aiter_lines():
                    if line.startswith(":"):
                        continue
                    if line:
                        field, _, value = line.partition(":")
                        value = value[1:] if value.startswith(" ") else value
                        if field == "event":
                            event = value
                        elif field == "data":
                            data.append(value)
                        continue

                    # Blank line ends one event
                    if data:
                        availability = self._parse(event, "\n".join(data))
                        if availability is not None:
                            yield availability
                    event, data = "message", []

                if data:
                    availability = self._parse(event, "\n".join(data))
                    if availability is not None:
                        yield availability
        except httpx.HTTPError as e:
            self._logger.warning("Slot stream failed", extra={"package_id": package_id, "error": str(e)})
            raise SlotFeedError(f"Slot feed failed: {e}") from e

    def _parse(self, event: str, raw: str) -> SlotAvailability | None:
        if event == "error":
            raise SlotFeedError(raw or "Slot feed reported an error")
        try:
            body = json.loads(raw)
            if isinstance(body, dict) and "data" in body and "available_slots" not in body:
                body = body["data"]
            return SlotFeedEventDTO.model_validate(body).to_availability()
        except (json.JSONDecodeError, ValidationError) as e:
            self._logger.warning("Skipping malformed slot event", extra={"error": str(e)})
            return None

    async def aclose(self) -> None:
        await self._client.aclose()
