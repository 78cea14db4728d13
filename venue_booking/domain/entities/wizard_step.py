from __future__ import annotations

from enum import Enum


class WizardStep(str, Enum):
    SELECT_PACKAGE = "select_package"
    SELECT_SCHEDULE = "select_schedule"
    SELECT_EXTRAS = "select_extras"
    ENTER_CUSTOMER = "enter_customer"
    REVIEW_AND_PAY = "review_and_pay"
    SUBMITTED = "submitted"

    @property
    def position(self) -> int:
        return list(WizardStep).index(self)


class SlotStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    UNAVAILABLE = "unavailable"
