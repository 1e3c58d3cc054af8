import logging
import time
from fastapi import Request

logger = logging.getLogger("dating_api.requests")


async def log_requests(request: Request, call_next):
    """Log method, path, status and duration of every request"""
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        # Re-raised so the 500 handler still builds the response
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.error(f"{request.method} {request.url.path} 500 {elapsed_ms:.1f}ms (unhandled error)")
        raise
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms")
    return response
