import logging
import time

from fastapi import Request

logger = logging.getLogger("app.middleware.requests")


async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000

    message = f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f} ms)"
    if response.status_code >= 500:
        logger.error(message)
    elif response.status_code >= 400:
        logger.warning(message)
    else:
        logger.info(message)
    return response
