# backend/slotbook/middleware/audit.py
# One JSON line per request on the "slotbook.audit" logger.
# Health checks are skipped; 5xx answers are logged at ERROR.

import json
import logging
import time

from fastapi import Request

from ..utils.client_ip import client_ip

logger = logging.getLogger("slotbook.audit")

SKIP_PATHS = frozenset({"/health"})


def _level(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


async def audit_middleware(request: Request, call_next):
    if request.url.path in SKIP_PATHS:
        return await call_next(request)

    started = time.time()
    clock = time.perf_counter()

    response = await call_next(request)

    record = {
        "ts": int(started),
        "method": request.method,
        "path": request.url.path,
        "status": response.status_code,
        "ip": client_ip(request),
        "ua": request.headers.get("User-Agent", ""),
        "duration_ms": round((time.perf_counter() - clock) * 1000, 1),
    }
    logger.log(_level(response.status_code), json.dumps(record, ensure_ascii=False))

    return response
