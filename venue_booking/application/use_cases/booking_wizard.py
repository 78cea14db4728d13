from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, time
from decimal import Decimal
from typing import Sequence

from venue_booking.application.exceptions import BookingValidationError, UpstreamServiceError
from venue_booking.application.ports.catalog import CatalogPort
from venue_booking.application.ports.slot_feed import SlotFeedPort
from venue_booking.application.use_cases.slot_reconciler import SlotReconciler
from venue_booking.application.use_cases.submit_booking import SubmitBookingUseCase
from venue_booking.application.utils.availability import DEFAULT_HORIZON_DAYS, eligible_dates
from venue_booking.application.utils.card import clean_card_number
from venue_booking.application.utils.pricing import amount_due_now, calculate_price
from venue_booking.application.utils.slots import candidate_slots, choose_time, restrictions_for
from venue_booking.application.utils.wizard_guards import (
    can_select_schedule,
    card_details_error,
    customer_complete,
    is_submit_ready,
    missing_fields,
    schedule_complete,
)
from venue_booking.domain.entities.booking import SubmissionResult
from venue_booking.domain.entities.day_off import DayOff
from venue_booking.domain.entities.package import Package
from venue_booking.domain.entities.price_breakdown import PriceBreakdown
from venue_booking.domain.entities.selection_state import (
    AddOnSelection,
    AttractionSelection,
    CardDetails,
    CustomerInfo,
    SelectionState,
)
from venue_booking.domain.entities.time_slot import TimeSlot
from venue_booking.domain.entities.wizard_step import SlotStatus, WizardStep

MAX_PARTICIPANTS = 999
PAYMENT_METHODS = ("card", "in-store", "pay_later")
PAYMENT_SPLITS = ("full", "partial", "custom")


class BookingWizard:
    """
    Step-by-step booking session for one customer.

    State only changes through the setters below. Setters that can fail return
    False and leave the reason in `error`; reading `price_breakdown` always
    reprices the current selection.
    """

    def __init__(
        self,
        catalog: CatalogPort,
        slot_feed: SlotFeedPort,
        submit_booking: SubmitBookingUseCase,
        horizon_days: int = DEFAULT_HORIZON_DAYS,
        day_offs: Sequence[DayOff] = (),
        today: date | None = None,
    ) -> None:
        self._catalog = catalog
        self._submit_booking = submit_booking
        self._horizon_days = horizon_days
        self._day_offs = tuple(day_offs)
        self._today = today
        self._reconciler = SlotReconciler(slot_feed, on_update=self._handle_slot_update)
        self._package: Package | None = None
        self._state = SelectionState()
        self._card = CardDetails()
        self._step = WizardStep.SELECT_PACKAGE
        self._error: str | None = None
        self._submission: SubmissionResult | None = None
        self._submitting = False
        self._logger = logging.getLogger(__name__)

    # Read-only views

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def package(self) -> Package | None:
        return self._package

    @property
    def step(self) -> WizardStep:
        return self._step

    @property
    def card(self) -> CardDetails:
        return self._card

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def submission(self) -> SubmissionResult | None:
        return self._submission

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    @property
    def eligible_dates(self) -> list[date]:
        if self._package is None:
            return []
        return eligible_dates(
            self._package.availability,
            horizon_days=self._package.horizon_days(self._horizon_days),
            reference_date=self._today or date.today(),
            day_offs=self._day_offs,
            package_id=self._package.id,
        )

    @property
    def candidate_slots(self) -> list[TimeSlot]:
        if self._package is None:
            return []
        window = self._package.window
        return candidate_slots(window.start, window.end, self._package.duration.minutes, window.interval_minutes)

    @property
    def slots(self) -> list[TimeSlot]:
        return self._reconciler.slots

    @property
    def slot_status(self) -> SlotStatus:
        return self._reconciler.status

    @property
    def price_breakdown(self) -> PriceBreakdown | None:
        if self._package is None:
            return None
        return calculate_price(
            self._package,
            self._state.participants,
            attractions=self._state.attractions,
            add_ons=self._state.add_ons,
            promo_code=self._state.promo_code,
            gift_card_code=self._state.gift_card_code,
        )

    @property
    def amount_due(self) -> Decimal | None:
        breakdown = self.price_breakdown
        if breakdown is None:
            return None
        return amount_due_now(
            breakdown, self._state.payment_method, self._state.payment_split, self._state.custom_amount
        )

    @property
    def missing_fields(self) -> list[str]:
        return missing_fields(self._state, self._package)

    @property
    def is_submit_ready(self) -> bool:
        return is_submit_ready(self._state, self._package)

    @property
    def card_required(self) -> bool:
        return self._submit_booking.charges_card(self._state) and bool(self.amount_due)

    @property
    def card_error(self) -> str | None:
        if not self.card_required:
            return None
        return card_details_error(self._card)

    # Package and schedule

    async def select_package(self, package_id: int) -> bool:
        try:
            package = await self._catalog.get_package(package_id)
        except UpstreamServiceError as e:
            self._logger.warning("Package lookup failed", extra={"package_id": package_id, "error": str(e)})
            return self._reject("Could not load the package. Please try again.")
        if package is None:
            return self._reject("Package not found")

        await self._reconciler.stop()
        # Package-scoped data goes; customer, payment and codes stay
        self._package = package
        self._state = replace(
            self._state,
            package_id=package.id,
            room_id=None,
            booking_date=None,
            booking_time=None,
            participants=self._clamp_participants(package, package.max_participants),
            attractions=(),
            add_ons=self._forced_add_ons(package),
        )
        self._error = None
        self._logger.info("Package selected", extra={"package_id": package.id})
        return True

    async def set_room(self, room_id: int) -> bool:
        try:
            package = self._require_package()
            if package.find_room(room_id) is None:
                raise BookingValidationError("Room not found")
        except BookingValidationError as e:
            return self._reject(str(e))
        if room_id != self._state.room_id:
            self._state = replace(self._state, room_id=room_id)
        self._error = None
        await self._resubscribe()
        return True

    async def set_date(self, day: date) -> bool:
        try:
            self._require_package()
            if day not in self.eligible_dates:
                raise BookingValidationError("This date is not available")
        except BookingValidationError as e:
            return self._reject(str(e))
        if day != self._state.booking_date:
            self._state = replace(self._state, booking_date=day)
        self._error = None
        await self._resubscribe()
        return True

    async def retry_slots(self) -> None:
        await self._reconciler.retry()

    def set_time(self, value: time) -> bool:
        if value not in [slot.start for slot in self._reconciler.slots]:
            return self._reject("This time is no longer available")
        self._state = replace(self._state, booking_time=value)
        self._error = None
        return True

    def set_participants(self, count: int) -> int:
        if self._package is None:
            return self._state.participants
        clamped = self._clamp_participants(self._package, count)
        self._state = replace(self._state, participants=clamped)
        return clamped

    # Extras

    def toggle_attraction(self, attraction_id: int) -> bool:
        package = self._package
        attraction = package.find_attraction(attraction_id) if package else None
        if attraction is None:
            return self._reject("Attraction not found")
        current = self._state.attractions
        if any(a.attraction_id == attraction_id for a in current):
            kept = tuple(a for a in current if a.attraction_id != attraction_id)
        else:
            kept = current + (AttractionSelection(attraction_id, max(1, attraction.min_quantity)),)
        self._state = replace(self._state, attractions=kept)
        return True

    def set_attraction_quantity(self, attraction_id: int, quantity: int) -> bool:
        package = self._package
        attraction = package.find_attraction(attraction_id) if package else None
        if attraction is None:
            return self._reject("Attraction not found")
        quantity = _clamp(quantity, max(1, attraction.min_quantity), attraction.max_quantity)
        others = tuple(a for a in self._state.attractions if a.attraction_id != attraction_id)
        self._state = replace(self._state, attractions=others + (AttractionSelection(attraction_id, quantity),))
        return True

    def toggle_add_on(self, add_on_id: int) -> bool:
        package = self._package
        add_on = package.find_add_on(add_on_id) if package else None
        if add_on is None:
            return self._reject("Add-on not found")
        current = self._state.add_ons
        selected = next((a for a in current if a.add_on_id == add_on_id), None)
        if selected is not None:
            if selected.forced:
                return self._reject(f"{add_on.name} is included with this package")
            kept = tuple(a for a in current if a.add_on_id != add_on_id)
        else:
            kept = current + (AddOnSelection(add_on_id, max(1, add_on.min_quantity_for(package.id))),)
        self._state = replace(self._state, add_ons=kept)
        return True

    def set_add_on_quantity(self, add_on_id: int, quantity: int) -> bool:
        package = self._package
        add_on = package.find_add_on(add_on_id) if package else None
        if add_on is None:
            return self._reject("Add-on not found")
        minimum = max(1, add_on.min_quantity_for(package.id))
        quantity = _clamp(quantity, minimum, max(minimum, add_on.max_quantity))
        forced = add_on.is_forced_for(package.id)
        others = tuple(a for a in self._state.add_ons if a.add_on_id != add_on_id)
        self._state = replace(self._state, add_ons=others + (AddOnSelection(add_on_id, quantity, forced),))
        return True

    def apply_promo_code(self, code: str) -> bool:
        return self._apply_code(code, kind="promo")

    def apply_gift_card(self, code: str) -> bool:
        return self._apply_code(code, kind="gift_card")

    # Customer and payment

    def set_customer(
        self,
        first_name: str | None = None,
        last_name: str | None = None,
        email: str | None = None,
        phone: str | None = None,
    ) -> None:
        current = self._state.customer
        self._state = replace(
            self._state,
            customer=CustomerInfo(
                first_name=current.first_name if first_name is None else first_name,
                last_name=current.last_name if last_name is None else last_name,
                email=current.email if email is None else email,
                phone=current.phone if phone is None else phone,
            ),
        )

    def set_notes(self, notes: str) -> None:
        self._state = replace(self._state, notes=notes)

    def set_payment(self, method: str, split: str = "full", custom_amount: Decimal | None = None) -> bool:
        if method not in PAYMENT_METHODS:
            return self._reject(f"Unknown payment method: {method}")
        if split not in PAYMENT_SPLITS:
            return self._reject(f"Unknown payment option: {split}")
        if split == "partial":
            breakdown = self.price_breakdown
            if breakdown is None or not breakdown.partial_available:
                return self._reject("Partial payment is not available for this package")
        if split == "custom" and (custom_amount is None or custom_amount <= 0):
            return self._reject("Custom amount must be greater than zero")
        self._state = replace(
            self._state,
            payment_method=method,
            payment_split=split,
            custom_amount=custom_amount if split == "custom" else Decimal("0"),
        )
        self._error = None
        return True

    def set_card_details(self, number: str, month: str, year: str, cvv: str) -> None:
        self._card = CardDetails(number=clean_card_number(number), month=month, year=year, cvv=cvv)

    # Navigation

    def can_advance(self) -> bool:
        if self._step is WizardStep.SELECT_PACKAGE:
            return can_select_schedule(self._state)
        if self._step is WizardStep.SELECT_SCHEDULE:
            return schedule_complete(self._state, self._package)
        if self._step is WizardStep.SELECT_EXTRAS:
            return True
        if self._step is WizardStep.ENTER_CUSTOMER:
            return customer_complete(self._state.customer)
        # review_and_pay only moves on through submit()
        return False

    async def advance(self) -> bool:
        if not self.can_advance():
            return self._reject("Please complete this step before continuing")
        await self._move_to(_step_at(self._step.position + 1))
        self._error = None
        return True

    async def back(self) -> bool:
        if self._step in (WizardStep.SELECT_PACKAGE, WizardStep.SUBMITTED):
            return False
        await self._move_to(_step_at(self._step.position - 1))
        return True

    async def go_to(self, step: WizardStep) -> bool:
        if self._step is WizardStep.SUBMITTED or step is WizardStep.SUBMITTED:
            return False
        if step.position > self._step.position:
            return False
        await self._move_to(step)
        return True

    async def submit(self) -> SubmissionResult:
        if self._submitting:
            return SubmissionResult(status="busy", error="A booking is already being submitted")
        if self._step is not WizardStep.REVIEW_AND_PAY or self._package is None:
            return self._invalid("Review your booking before submitting")
        if not self.is_submit_ready:
            return self._invalid(f"Missing required fields: {', '.join(self.missing_fields)}")

        self._submitting = True
        try:
            result = await self._submit_booking.execute(self._state, self._package, self._card)
        finally:
            self._submitting = False

        self._submission = result
        if not result.is_success:
            self._error = result.error
            return result

        await self._reconciler.stop()
        self._step = WizardStep.SUBMITTED
        self._state = SelectionState()
        self._card = CardDetails()
        self._error = None
        return result

    async def close(self) -> None:
        await self._reconciler.stop()

    # Internals

    def _require_package(self) -> Package:
        if self._package is None:
            raise BookingValidationError("Select a package first")
        return self._package

    def _reject(self, message: str) -> bool:
        self._error = message
        self._logger.info("Wizard input rejected", extra={"reason": message})
        return False

    def _invalid(self, message: str) -> SubmissionResult:
        self._reject(message)
        return SubmissionResult(status="invalid", error=message)

    def _apply_code(self, code: str, kind: str) -> bool:
        package = self._package
        text = (code or "").strip()
        field_name = "promo_code" if kind == "promo" else "gift_card_code"
        if not text:
            self._state = replace(self._state, **{field_name: ""})
            return True
        if package is None:
            return self._reject("Select a package first")
        found = package.find_promo(text) if kind == "promo" else package.find_gift_card(text)
        if found is None or not found.is_active:
            label = "promo code" if kind == "promo" else "gift card"
            return self._reject(f"Invalid or inactive {label}")
        self._state = replace(self._state, **{field_name: text})
        self._error = None
        return True

    async def _move_to(self, step: WizardStep) -> None:
        # Leaving the schedule step closes the slot stream; coming back reopens it
        leaving_schedule = self._step is WizardStep.SELECT_SCHEDULE and step is not WizardStep.SELECT_SCHEDULE
        self._step = step
        if step is WizardStep.SELECT_SCHEDULE:
            await self._resubscribe()
        elif leaving_schedule:
            await self._reconciler.stop()

    async def _resubscribe(self) -> None:
        package = self._package
        state = self._state
        if package is None or state.booking_date is None or (package.has_rooms and state.room_id is None):
            await self._reconciler.stop()
            return
        restrictions = restrictions_for(state.booking_date, self._day_offs, package.id, state.room_id)
        await self._reconciler.watch(package.id, state.room_id, state.booking_date, restrictions)

    def _handle_slot_update(self, slots: list[TimeSlot], first_message: bool) -> None:
        chosen = choose_time(self._state.booking_time, slots, first_message)
        if chosen != self._state.booking_time:
            self._logger.info(
                "Selected time reassigned",
                extra={"package_id": self._state.package_id, "reason": f"{self._state.booking_time} -> {chosen}"},
            )
            self._state = replace(self._state, booking_time=chosen)

    @staticmethod
    def _clamp_participants(package: Package, count: int) -> int:
        return _clamp(count, 1, package.capacity or MAX_PARTICIPANTS)

    @staticmethod
    def _forced_add_ons(package: Package) -> tuple[AddOnSelection, ...]:
        return tuple(
            AddOnSelection(add_on.id, max(1, add_on.min_quantity_for(package.id)), forced=True)
            for add_on in package.add_ons
            if add_on.is_forced_for(package.id)
        )


def _clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(value, upper))


def _step_at(position: int) -> WizardStep:
    return list(WizardStep)[position]
