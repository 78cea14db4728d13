import logging

from fastapi import FastAPI

from venue_booking.api.v1.packages import router as packages_router
from venue_booking.core.config import settings

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("package_id", "room_id", "date", "booking_id", "reference_number", "reason", "error"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

app = FastAPI(title="Venue Booking Engine", version="1.0.0")

app.include_router(packages_router, prefix="/v1", tags=["packages"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "env": settings.ENV}
