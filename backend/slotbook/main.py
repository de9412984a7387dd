import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from .errors import register_error_handlers
from .middleware.audit import audit_middleware
from .middleware.rate_limit import rate_limit_middleware
from .redis_client import redis_client
from .routers import (
    auth,
    bookings,
    slots,
    staff_bookings,
    staff_slots,
    staff_subjects,
    staff_users,
    subjects,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Slotbook API")

register_error_handlers(app)

# ===== Middleware order (last added runs first) =====
app.middleware("http")(rate_limit_middleware)
app.middleware("http")(audit_middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# ===== Public =====
app.include_router(subjects.router)
app.include_router(slots.router)
app.include_router(bookings.router)
app.include_router(auth.router)

# ===== Staff =====
app.include_router(staff_subjects.router)
app.include_router(staff_slots.router)
app.include_router(staff_bookings.router)
app.include_router(staff_users.router)


@app.get("/health")
def health(db: Session = Depends(get_db)):
    db_ok = True
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check: database unreachable")
        db_ok = False

    try:
        redis_ok = bool(redis_client.ping())
    except RedisError as e:
        logger.warning(f"Health check: redis unreachable: {e}")
        redis_ok = False

    return {"status": "ok" if db_ok else "degraded", "database": db_ok, "redis": redis_ok}
