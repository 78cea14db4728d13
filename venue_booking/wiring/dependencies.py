from datetime import date, datetime
from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from venue_booking.core.config import settings
from venue_booking.application.exceptions import UpstreamServiceError
from venue_booking.application.ports.booking_service import BookingServicePort
from venue_booking.application.ports.catalog import CatalogPort
from venue_booking.application.ports.payment_gateway import PaymentGatewayPort
from venue_booking.application.ports.slot_feed import SlotFeedPort
from venue_booking.application.use_cases.booking_wizard import BookingWizard
from venue_booking.application.use_cases.submit_booking import SubmitBookingUseCase
from venue_booking.domain.entities.day_off import DayOff
from venue_booking.infrastructure.booking.http_booking_service import HttpBookingService
from venue_booking.infrastructure.booking.memory_booking_service import MemoryBookingService
from venue_booking.infrastructure.catalog.http_catalog import HttpCatalog
from venue_booking.infrastructure.catalog.memory_catalog import MemoryCatalog, demo_packages
from venue_booking.infrastructure.payments.http_payment_gateway import HttpPaymentGateway
from venue_booking.infrastructure.payments.mock_payment_gateway import MockPaymentGateway
from venue_booking.infrastructure.slots.memory_slot_feed import MemorySlotFeed
from venue_booking.infrastructure.slots.sse_slot_feed import SseSlotFeed


logger = logging.getLogger(__name__)


@lru_cache
def get_catalog() -> CatalogPort:
    if settings.uses_mock_adapters:
        logger.info("Using MemoryCatalog (ENV=%s)", settings.ENV)
        return MemoryCatalog(demo_packages())
    return HttpCatalog()


@lru_cache
def get_slot_feed() -> SlotFeedPort:
    if settings.uses_mock_adapters:
        return MemorySlotFeed(get_catalog())
    return SseSlotFeed()


@lru_cache
def get_booking_service() -> BookingServicePort:
    if settings.uses_mock_adapters:
        return MemoryBookingService()
    return HttpBookingService()


@lru_cache
def get_payment_gateway() -> PaymentGatewayPort:
    if settings.uses_mock_adapters:
        return MockPaymentGateway()
    return HttpPaymentGateway()


def get_today() -> date:
    return datetime.now(ZoneInfo(settings.BUSINESS_TIMEZONE)).date()


async def get_day_offs() -> list[DayOff]:
    try:
        return await get_catalog().list_day_offs(settings.LOCATION_ID)
    except UpstreamServiceError as e:
        # Closures are advisory; dates still come from the package schedule
        logger.warning("Day offs not available", extra={"error": str(e)})
        return []


def get_submit_booking_use_case() -> SubmitBookingUseCase:
    return SubmitBookingUseCase(
        booking_service=get_booking_service(),
        payment_gateway=get_payment_gateway(),
        location_id=settings.LOCATION_ID,
        send_receipt_email=settings.SEND_RECEIPT_EMAIL,
        online_card_processing=settings.ONLINE_CARD_PROCESSING_ENABLED,
    )


async def build_booking_wizard() -> BookingWizard:
    return BookingWizard(
        catalog=get_catalog(),
        slot_feed=get_slot_feed(),
        submit_booking=get_submit_booking_use_case(),
        horizon_days=settings.AVAILABILITY_HORIZON_DAYS,
        day_offs=await get_day_offs(),
        today=get_today(),
    )
