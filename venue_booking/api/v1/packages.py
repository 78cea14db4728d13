from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from venue_booking.api.v1.schemas import (
    DatesResponseSchema,
    QuoteRequestSchema,
    QuoteResponseSchema,
    SlotSchema,
    SlotsResponseSchema,
)
from venue_booking.application.exceptions import SlotFeedError, UpstreamServiceError
from venue_booking.application.ports.catalog import CatalogPort
from venue_booking.application.ports.slot_feed import SlotFeedPort
from venue_booking.application.utils.availability import eligible_dates
from venue_booking.application.utils.pricing import calculate_price
from venue_booking.application.utils.slots import bookable_slots, restrictions_for
from venue_booking.core.config import settings
from venue_booking.domain.entities.day_off import DayOff
from venue_booking.domain.entities.package import Package
from venue_booking.domain.entities.selection_state import AddOnSelection, AttractionSelection
from venue_booking.domain.entities.time_slot import TimeSlot
from venue_booking.domain.entities.wizard_step import SlotStatus
from venue_booking.wiring.dependencies import get_catalog, get_day_offs, get_slot_feed, get_today

router = APIRouter()
logger = logging.getLogger(__name__)


async def _load_package(catalog: CatalogPort, package_id: int) -> Package:
    try:
        package = await catalog.get_package(package_id)
    except UpstreamServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))
    if package is None:
        raise HTTPException(status_code=404, detail="Package not found")
    return package


def _slot_schema(slot: TimeSlot) -> SlotSchema:
    return SlotSchema(start=f"{slot.start:%H:%M}", end=f"{slot.end:%H:%M}")


@router.get("/packages/{package_id}/dates", response_model=DatesResponseSchema)
async def package_dates(
    package_id: int,
    catalog: CatalogPort = Depends(get_catalog),
    day_offs: list[DayOff] = Depends(get_day_offs),
    today: date = Depends(get_today),
):
    package = await _load_package(catalog, package_id)
    horizon = package.horizon_days(settings.AVAILABILITY_HORIZON_DAYS)
    dates = eligible_dates(
        package.availability,
        horizon_days=horizon,
        reference_date=today,
        day_offs=day_offs,
        package_id=package.id,
    )
    return DatesResponseSchema(package_id=package.id, horizon_days=horizon, dates=dates)


@router.get("/packages/{package_id}/slots", response_model=SlotsResponseSchema)
async def package_slots(
    package_id: int,
    day: date = Query(alias="date"),
    room_id: int | None = Query(None),
    catalog: CatalogPort = Depends(get_catalog),
    feed: SlotFeedPort = Depends(get_slot_feed),
    day_offs: list[DayOff] = Depends(get_day_offs),
    today: date = Depends(get_today),
):
    package = await _load_package(catalog, package_id)
    if package.has_rooms and room_id is None:
        raise HTTPException(status_code=400, detail="room_id is required for this package")
    if room_id is not None and package.find_room(room_id) is None:
        raise HTTPException(status_code=404, detail="Room not found")

    allowed = eligible_dates(
        package.availability,
        horizon_days=package.horizon_days(settings.AVAILABILITY_HORIZON_DAYS),
        reference_date=today,
        day_offs=day_offs,
        package_id=package.id,
    )
    if day not in allowed:
        return SlotsResponseSchema(
            package_id=package.id, room_id=room_id, booking_date=day, status=SlotStatus.UNAVAILABLE.value, slots=[]
        )

    # One message from the live feed is the current snapshot
    stream = feed.stream(package.id, room_id, day)
    try:
        availability = await anext(stream, None)
    except SlotFeedError as e:
        logger.warning("Slot snapshot failed", extra={"package_id": package.id, "error": str(e)})
        raise HTTPException(status_code=502, detail=str(e))
    finally:
        await stream.aclose()

    if availability is None:
        return SlotsResponseSchema(
            package_id=package.id, room_id=room_id, booking_date=day, status=SlotStatus.UNAVAILABLE.value, slots=[]
        )

    restrictions = restrictions_for(day, day_offs, package.id, room_id)
    return SlotsResponseSchema(
        package_id=package.id,
        room_id=room_id,
        booking_date=day,
        status=SlotStatus.READY.value,
        slots=[_slot_schema(slot) for slot in bookable_slots(availability, restrictions)],
        booked=[_slot_schema(slot) for slot in availability.booked_slots],
    )


@router.post("/packages/{package_id}/quote", response_model=QuoteResponseSchema)
async def package_quote(
    package_id: int,
    req: QuoteRequestSchema,
    catalog: CatalogPort = Depends(get_catalog),
):
    package = await _load_package(catalog, package_id)
    participants = min(req.participants, package.capacity or req.participants)

    add_ons = [AddOnSelection(item.id, item.quantity) for item in req.add_ons]
    chosen = {item.id for item in req.add_ons}
    for add_on in package.add_ons:
        if add_on.is_forced_for(package.id) and add_on.id not in chosen:
            add_ons.append(AddOnSelection(add_on.id, max(1, add_on.min_quantity_for(package.id)), forced=True))

    breakdown = calculate_price(
        package,
        participants,
        attractions=[AttractionSelection(item.id, item.quantity) for item in req.attractions],
        add_ons=add_ons,
        promo_code=req.promo_code,
        gift_card_code=req.gift_card_code,
    )
    return QuoteResponseSchema(package_id=package.id, participants=participants, **breakdown.to_payload())
