"""
Guarded calls to external stores

Every collaborator call runs under a timeout; any failure is re-raised as
UpstreamStoreError so callers deal with a single error type.
"""

import asyncio
import logging
from typing import Awaitable, TypeVar

from .protocols import UpstreamStoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_store(operation: str, awaitable: Awaitable[T], timeout: float) -> T:
    """
    Await a store call with a timeout.

    Args:
        operation: Name used in logs and in the raised error
        awaitable: The pending store call
        timeout: Seconds before the call is abandoned

    Raises:
        UpstreamStoreError: the call raised or timed out
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.error(f"{operation} timed out after {timeout}s")
        raise UpstreamStoreError(operation, e) from e
    except asyncio.CancelledError:
        raise
    except UpstreamStoreError:
        raise
    except Exception as e:
        logger.error(f"{operation} failed: {e}")
        raise UpstreamStoreError(operation, e) from e
