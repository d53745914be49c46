from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Mapping

from fleet_dashboard.dashboard.queries import (
    CacheKey,
    QueryDescriptor,
    QueryInputs,
    QueryRegistry,
    Source,
)
from fleet_dashboard.errors import FetchError
from fleet_dashboard.services import EventHook, FleetAPI, QueryErrorEvent, QueryResultEvent
from fleet_dashboard.utils import get_logger


logger = get_logger(__name__)


@dataclass(slots=True)
class _CacheEntry:
    payload: Any
    fetched_at: float


@dataclass(slots=True)
class _SourceState:
    key: CacheKey | None = None
    enabled: bool = False
    data: Any = None
    data_key: CacheKey | None = None
    data_scope: Hashable = None
    has_data: bool = False
    error: FetchError | None = None


@dataclass(frozen=True, slots=True)
class SourceStatus:
    """Public, immutable view of one source's query state."""

    source: Source
    enabled: bool = False
    is_fetching: bool = False
    has_data: bool = False
    key: CacheKey | None = None
    error: FetchError | None = None

    @property
    def is_loading(self) -> bool:
        return self.is_fetching and not self.has_data


@dataclass(slots=True)
class _InFlight:
    tasks: dict[tuple[Source, CacheKey], asyncio.Task[None]] = field(default_factory=dict)

    def has(self, source: Source, key: CacheKey | None) -> bool:
        return key is not None and (source, key) in self.tasks


class DependencyResolver:
    """Run each enabled source's fetch and hand current results to subscribers.

    A fetch executes only while its predicate holds and re-executes whenever
    its cache key changes. Completions are tagged with the key they were
    started for; a completion whose key is no longer current is cached under
    that key and otherwise dropped.
    """

    def __init__(
        self,
        api: FleetAPI,
        registry: QueryRegistry,
        *,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._api = api
        self._registry = registry
        self._clock = clock or time.monotonic
        self._states: dict[Source, _SourceState] = {
            descriptor.source: _SourceState() for descriptor in registry
        }
        self._cache: dict[Source, dict[CacheKey, _CacheEntry]] = {
            descriptor.source: {} for descriptor in registry
        }
        self._in_flight = _InFlight()
        self._inputs: QueryInputs | None = None
        self._syncing = False
        self._resync = False

        self.results: EventHook[QueryResultEvent[Any]] = EventHook()
        self.errors: EventHook[QueryErrorEvent] = EventHook()
        self.resets: EventHook[Source] = EventHook()

    # ------------------------------------------------------------------ Queries

    @property
    def inputs(self) -> QueryInputs | None:
        return self._inputs

    def status(self, source: Source) -> SourceStatus:
        state = self._states[source]
        return SourceStatus(
            source=source,
            enabled=state.enabled,
            is_fetching=state.enabled and self._in_flight.has(source, state.key),
            has_data=state.has_data,
            key=state.key,
            error=state.error,
        )

    def statuses(self) -> Mapping[Source, SourceStatus]:
        return {source: self.status(source) for source in self._states}

    def data(self, source: Source) -> Any:
        return self._states[source].data

    def cached(self, source: Source, key: CacheKey) -> Any:
        entry = self._cache[source].get(key)
        return entry.payload if entry is not None else None

    @property
    def pending(self) -> int:
        return len(self._in_flight.tasks)

    # ----------------------------------------------------------------- Actions

    def sync(self, inputs: QueryInputs) -> None:
        """Re-evaluate every descriptor against new inputs.

        Subscribers may call back into ``sync`` while results are being
        emitted; the nested call only records the newer inputs and the outer
        loop runs another pass with them.
        """

        self._inputs = inputs
        if self._syncing:
            self._resync = True
            return
        self._syncing = True
        try:
            while True:
                self._resync = False
                current = self._inputs
                for descriptor in self._registry:
                    if self._resync:
                        break
                    self._sync_source(descriptor, current)
                if not self._resync:
                    break
        finally:
            self._syncing = False

    def invalidate(self, source: Source | None = None) -> None:
        """Forget cached payloads so the next activation fetches again."""

        targets = [source] if source is not None else list(self._cache)
        for target in targets:
            self._cache[target].clear()

    def refresh(self) -> None:
        """Drop every cached payload and refetch all enabled sources."""

        if self._inputs is None:
            return
        self.invalidate()
        for descriptor in self._registry:
            state = self._states[descriptor.source]
            if state.enabled and state.key is not None:
                self._start_fetch(descriptor, state.key, self._inputs)

    async def settle(self) -> None:
        """Wait until no fetch is in flight, including ones started meanwhile."""

        while self._in_flight.tasks:
            await asyncio.gather(*list(self._in_flight.tasks.values()), return_exceptions=True)

    async def close(self) -> None:
        tasks = list(self._in_flight.tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._in_flight.tasks.clear()

    # ----------------------------------------------------------------- Helpers

    def _sync_source(self, descriptor: QueryDescriptor, inputs: QueryInputs) -> None:
        source = descriptor.source
        state = self._states[source]
        enabled = descriptor.enabled(inputs)
        key = descriptor.key(inputs)
        was_enabled = state.enabled
        previous_key = state.key
        state.enabled = enabled
        state.key = key

        if not enabled:
            if was_enabled:
                logger.debug("Source disabled", source=source.value, key=key)
            return
        if was_enabled and previous_key == key:
            return

        if previous_key != key:
            state.error = None

        scope = descriptor.scope(inputs)
        entry = self._cache[source].get(key)
        if entry is None and state.has_data and state.data_key != key:
            if scope != state.data_scope or not descriptor.keep_previous_data:
                self._reset(source)

        if entry is not None and state.data_key != key:
            self._apply(descriptor, key, scope, entry.payload, from_cache=True)

        if entry is None or self._is_stale(descriptor, entry):
            self._start_fetch(descriptor, key, inputs)

    def _is_stale(self, descriptor: QueryDescriptor, entry: _CacheEntry) -> bool:
        return self._clock() - entry.fetched_at >= descriptor.stale_time

    def _is_current(self, source: Source, key: CacheKey) -> bool:
        state = self._states[source]
        return state.enabled and state.key == key

    def _start_fetch(
        self, descriptor: QueryDescriptor, key: CacheKey, inputs: QueryInputs
    ) -> None:
        if self._in_flight.has(descriptor.source, key):
            return
        logger.debug("Fetching source", source=descriptor.source.value, key=key)
        task = asyncio.get_running_loop().create_task(
            self._run_fetch(descriptor, key, inputs),
            name=f"dashboard:{descriptor.source.value}",
        )
        self._in_flight.tasks[(descriptor.source, key)] = task

    async def _run_fetch(
        self, descriptor: QueryDescriptor, key: CacheKey, inputs: QueryInputs
    ) -> None:
        source = descriptor.source
        try:
            payload = await descriptor.fetch(self._api, inputs)
        except asyncio.CancelledError:
            self._in_flight.tasks.pop((source, key), None)
            raise
        except Exception as exc:  # noqa: BLE001 - scoped to this source's card
            self._in_flight.tasks.pop((source, key), None)
            self._fail(descriptor, key, exc)
            return

        # Subscribers must observe the source as settled.
        self._in_flight.tasks.pop((source, key), None)
        self._cache[source][key] = _CacheEntry(payload=payload, fetched_at=self._clock())
        if not self._is_current(source, key):
            logger.info("Discarding stale result", source=source.value, key=key)
            return
        self._apply(descriptor, key, descriptor.scope(inputs), payload, from_cache=False)

    def _apply(
        self,
        descriptor: QueryDescriptor,
        key: CacheKey,
        scope: Hashable,
        payload: Any,
        *,
        from_cache: bool,
    ) -> None:
        state = self._states[descriptor.source]
        state.data = payload
        state.data_key = key
        state.data_scope = scope
        state.has_data = True
        if not from_cache:
            state.error = None
        logger.debug(
            "Source result applied",
            source=descriptor.source.value,
            key=key,
            from_cache=from_cache,
        )
        self.results.emit(
            QueryResultEvent(
                source=descriptor.source.value,
                key=key,
                payload=payload,
                from_cache=from_cache,
            )
        )

    def _fail(self, descriptor: QueryDescriptor, key: CacheKey, exc: Exception) -> None:
        source = descriptor.source
        if not self._is_current(source, key):
            logger.info("Discarding stale failure", source=source.value, key=key, error=str(exc))
            return
        error = exc if isinstance(exc, FetchError) else FetchError(source.value, exc)
        self._states[source].error = error
        logger.warning("Source fetch failed", source=source.value, key=key, error=str(exc))
        self.errors.emit(QueryErrorEvent(source=source.value, key=key, error=error))

    def _reset(self, source: Source) -> None:
        state = self._states[source]
        state.data = None
        state.data_key = None
        state.data_scope = None
        state.has_data = False
        self.resets.emit(source)


__all__ = ["DependencyResolver", "SourceStatus"]
