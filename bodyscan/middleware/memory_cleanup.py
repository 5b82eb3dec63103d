"""
Memory Cleanup Middleware

Frame uploads decode full-resolution stills and run the pose model on them.
This middleware forces garbage collection after those requests so decoded
images and model outputs are released promptly.
"""
import gc
import logging
from typing import Iterable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class MemoryCleanupMiddleware(BaseHTTPMiddleware):
    """
    Middleware that performs garbage collection after image-handling requests.

    Args:
        app: The ASGI application
        path_suffixes: Request paths ending with one of these trigger a collection
    """

    def __init__(self, app, path_suffixes: Iterable[str] = ("/frames/image",)):
        super().__init__(app)
        self.path_suffixes = tuple(path_suffixes)

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        if request.url.path.endswith(self.path_suffixes):
            collected = gc.collect()
            logger.debug(f"Memory cleanup completed for {request.url.path} ({collected} objects)")

        return response
