"""Remote uniqueness lookups.

``UniquenessCoordinator`` keeps at most one lookup in flight per binding.
Submitting a new value cancels the previous lookup, and every completed
lookup is checked against the field's value at completion time: a result
for a value the field no longer holds is a ghost result and is dropped.
Cancellation is best-effort; the value guard alone keeps results correct.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from fieldrules.errors import LookupFailedError, LookupTransportError, MalformedLookupResponse
from fieldrules.host import Field
from fieldrules.settings import EngineSettings
from fieldrules.types import RemoteSource, Verdict

logger = logging.getLogger(__name__)


class LookupTransport(Protocol):
    """Fetches the entries matching ``value`` from a remote source."""

    async def fetch(self, source: RemoteSource, value: str) -> list[Any]:
        """Return the JSON array answered by the source.

        Raises:
            LookupTransportError: Network failure or error status
            MalformedLookupResponse: Body is not a JSON array
        """
        ...


class HttpLookupTransport:
    """``LookupTransport`` over HTTP GET using httpx.

    Args:
        client: Shared client to use; a short-lived client per request is
            created when omitted
        timeout: Request timeout in seconds (settings default if omitted)
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self._client = client
        self._timeout = timeout if timeout is not None else EngineSettings.from_env().lookup_timeout

    async def fetch(self, source: RemoteSource, value: str) -> list[Any]:
        if self._client is not None:
            return await self._get(self._client, source, value)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._get(client, source, value)

    async def _get(self, client: httpx.AsyncClient, source: RemoteSource, value: str) -> list[Any]:
        try:
            response = await client.get(source.url, params={source.param: value}, timeout=self._timeout)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise LookupTransportError(f"Lookup against {source.url} failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedLookupResponse(f"Lookup against {source.url} returned invalid JSON") from e

        if not isinstance(data, list):
            raise MalformedLookupResponse(
                f"Lookup against {source.url} returned {type(data).__name__}, expected a JSON array"
            )
        return data


@dataclass
class InFlightLookup:
    """Handle on a single submitted lookup.

    Attributes:
        value: The field value that was queried
        task: The asyncio task running the lookup
    """

    value: str
    task: asyncio.Task[None]

    @property
    def done(self) -> bool:
        return self.task.done()

    def cancel(self) -> bool:
        """Request cancellation. Returns False if the lookup already finished."""
        return self.task.cancel()


class UniquenessCoordinator:
    """Serializes remote uniqueness lookups for one bound field.

    Args:
        field: The bound field (its value is re-read at completion)
        source: Endpoint descriptor
        transport: Performs the actual request
        on_result: Called with VALID, INVALID or UNDETERMINED for every
            result that survives the value guard
    """

    def __init__(
        self,
        field: Field,
        source: RemoteSource,
        transport: LookupTransport,
        on_result: Callable[[Verdict], None],
    ) -> None:
        self.field = field
        self.source = source
        self.transport = transport
        self.on_result = on_result
        self._inflight: InFlightLookup | None = None

    @property
    def pending(self) -> InFlightLookup | None:
        """The in-flight lookup, or None if nothing is outstanding."""
        if self._inflight is not None and not self._inflight.done:
            return self._inflight
        return None

    def submit(self, value: str) -> InFlightLookup:
        """Start a lookup for ``value``, superseding any pending one.

        Must be called while an event loop is running.
        """
        self.cancel()
        task = asyncio.get_running_loop().create_task(self._run(value))
        self._inflight = InFlightLookup(value=value, task=task)
        return self._inflight

    def cancel(self) -> None:
        """Cancel the pending lookup, if any."""
        previous = self.pending
        if previous is not None:
            logger.debug("Cancelling superseded lookup for %r", previous.value)
            previous.cancel()

    async def wait(self) -> None:
        """Wait until the latest submitted lookup has finished."""
        while self._inflight is not None and not self._inflight.done:
            current = self._inflight
            try:
                await asyncio.shield(current.task)
            except asyncio.CancelledError:
                if not current.task.cancelled():
                    raise

    def is_current(self, value: str) -> bool:
        return self.field.value == value

    async def _run(self, value: str) -> None:
        try:
            matches = await self.transport.fetch(self.source, value)
        except LookupFailedError as e:
            if not self.is_current(value):
                logger.debug("Discarding failed lookup for stale value %r", value)
                return
            logger.warning("Uniqueness lookup for %r could not be completed: %s", value, e)
            self.on_result(Verdict.UNDETERMINED)
            return
        except Exception:
            if self.is_current(value):
                logger.exception("Uniqueness lookup for %r raised unexpectedly", value)
                self.on_result(Verdict.UNDETERMINED)
            return

        if not self.is_current(value):
            logger.debug("Discarding ghost result for %r (field is now %r)", value, self.field.value)
            return

        self.on_result(Verdict.INVALID if matches else Verdict.VALID)
