"""Shared error handling utilities for API routers."""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Coroutine, TypeVar

from fastapi import HTTPException

from reddit_insight.core.errors import (
    ConfigurationError,
    MalformedResponse,
    StorageError,
    UpstreamError,
    ValidationError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def service_error_handler(
    *,
    validation_status: int = 400,
    not_found_status: int = 404,
) -> Callable[
    [Callable[..., Coroutine[Any, Any, T]]],
    Callable[..., Coroutine[Any, Any, T]],
]:
    """Decorator that maps domain exceptions to HTTPException.

    Upstream and extraction failures share one status: for the caller both
    mean the operation was aborted and previously shown data still stands.
    """

    def decorator(
        fn: Callable[..., Coroutine[Any, Any, T]],
    ) -> Callable[..., Coroutine[Any, Any, T]]:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return await fn(*args, **kwargs)
            except ConfigurationError as exc:
                raise HTTPException(status_code=503, detail=str(exc)) from exc
            except (UpstreamError, MalformedResponse) as exc:
                logger.warning("%s failed: %s", fn.__name__, exc)
                raise HTTPException(
                    status_code=502, detail=f"Analysis failed: {exc}"
                ) from exc
            except StorageError as exc:
                logger.error("%s failed: %s", fn.__name__, exc)
                raise HTTPException(
                    status_code=503, detail=f"Storage unavailable: {exc}"
                ) from exc
            except ValidationError as exc:
                raise HTTPException(
                    status_code=validation_status, detail=str(exc)
                ) from exc
            except LookupError as exc:
                raise HTTPException(
                    status_code=not_found_status, detail=str(exc)
                ) from exc

        return wrapper

    return decorator
