"""Coalescing of concurrent operations that share an idempotency key."""

import asyncio
from typing import Any, Awaitable, Callable, Dict, TypeVar

from loss_reports.utils.logger import get_logger

log = get_logger(__name__)

T = TypeVar("T")


class InFlightCreates:
    """
    Per-key registry of in-flight operations.

    The first caller for a key runs the operation; callers arriving while it
    is still running await the same future and receive the same result (or
    the same exception). The key is released as soon as the operation
    finishes, so later calls run again and rely on the store's uniqueness
    constraint instead.

    Only covers a single process. Across processes the database unique
    constraint is what prevents duplicates.
    """

    def __init__(self) -> None:
        self._in_flight: Dict[str, "asyncio.Future[Any]"] = {}

    async def run(self, key: str, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``operation`` for ``key`` unless one is already running.

        Args:
            key: Idempotency key (request identity)
            operation: Zero-argument coroutine function producing the result

        Returns:
            The result of the single operation run for this key
        """
        existing = self._in_flight.get(key)
        if existing is not None:
            log.debug("joining in-flight operation", key=key)
            return await asyncio.shield(existing)

        future: "asyncio.Future[T]" = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future
        try:
            result = await operation()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so an unobserved failure is not reported at GC.
            future.exception()
            raise
        else:
            future.set_result(result)
            return result
        finally:
            self._in_flight.pop(key, None)

    @property
    def active_count(self) -> int:
        """Return the number of keys currently in flight."""
        return len(self._in_flight)
