"""Scoped access to time-series store clients."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Type

from pyarrow import flight

from errors import StoreError, StoreQueryFailed, StoreUnavailable

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], Any]

_UNAVAILABLE_ERRORS = (
    flight.FlightUnavailableError,
    flight.FlightTimedOutError,
    ConnectionError,
)


@contextmanager
def store_session(
    factory: ClientFactory,
    store: str,
    close_error: Type[StoreError] = StoreUnavailable,
) -> Iterator[Any]:
    """Yield a freshly built client and close it on every exit path.

    A failure while closing is raised as ``close_error`` only when the body
    itself succeeded; otherwise it is logged and the body's error propagates.
    """
    try:
        client = factory()
    except Exception as exc:
        raise StoreUnavailable(
            f"Could not connect to the {store} store: {exc}", store=store
        ) from exc

    body_failed = False
    try:
        yield client
    except BaseException:
        body_failed = True
        raise
    finally:
        try:
            client.close()
        except Exception as exc:
            if not body_failed:
                raise close_error(
                    f"Failed to close the {store} store client: {exc}", store=store
                ) from exc
            logger.warning(
                "Ignoring store client close failure",
                extra={"store": store, "reason": str(exc)},
            )


def classify_query_error(exc: Exception, store: str) -> StoreError:
    """Map a client-library query failure onto the store error taxonomy."""
    if isinstance(exc, _UNAVAILABLE_ERRORS):
        return StoreUnavailable(f"The {store} store is unavailable: {exc}", store=store)
    return StoreQueryFailed(f"Query against the {store} store failed: {exc}", store=store)
