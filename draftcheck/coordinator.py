"""
Hybrid Feedback Coordinator

Drives the fast and slow tiers off one input stream:

  keystroke -> both debounce timers restart
  timer fires -> cache lookup -> (maybe) analyzer request
  result or error -> per-tier bookkeeping -> resolver -> MergedView

Each tier is a small state machine (IDLE, PENDING, IN_FLIGHT,
SETTLED, NOT_APPLICABLE) owned by a TierPipeline. The coordinator
holds the single "current snapshot" pointer; anything that completes
for a snapshot that is no longer current is cached but never shown.

Usage:
    coordinator = HybridFeedbackCoordinator(fast, slow, SqlitePreferenceStore())
    coordinator.subscribe(render)
    coordinator.set_content("You're an idiot and everyone like you is wrong.")
    await coordinator.wait_idle()
    coordinator.view.ready_to_post
"""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import replace
from typing import Callable, Optional

from draftcheck.analyzers import AnalyzerClient
from draftcheck.cache import ResultCache
from draftcheck.config import Settings, TierConfig, settings as default_settings, tier_config
from draftcheck.debounce import DebounceScheduler
from draftcheck.errors import AnalyzerError, ServiceUnavailable
from draftcheck.logging import get_logger
from draftcheck.merge import resolve
from draftcheck.models import ContentSnapshot, MergedView, TierState, TierStatus
from draftcheck.preferences import PreferenceStore, parse_sensitivity
from draftcheck.schemas.feedback import SensitivityLevel, Tier

logger = get_logger("coordinator")

Subscriber = Callable[[MergedView], None]


class TierPipeline:
    """One tier's debounce -> cache -> request -> settle loop."""

    def __init__(
        self,
        client: AnalyzerClient,
        cache: ResultCache,
        config: TierConfig,
        on_change: Callable[[], None],
        next_sequence: Callable[[], int],
        *,
        enabled: bool = True,
        debounce: Optional[float] = None,
    ):
        self.tier: Tier = config.tier
        self.client = client
        self.cache = cache
        self.config = config
        self.enabled = enabled
        self.status = TierStatus(config.tier)
        self._on_change = on_change
        self._next_sequence = next_sequence
        self._debouncer: DebounceScheduler[ContentSnapshot] = DebounceScheduler(
            config.debounce_seconds if debounce is None else debounce,
            self._start,
        )
        self._current: Optional[ContentSnapshot] = None
        self._inflight: dict[ContentSnapshot, asyncio.Task] = {}
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

    # --- input ---

    def observe(self, snapshot: ContentSnapshot) -> None:
        """New text: restart this tier's quiet period."""
        self._current = snapshot
        if self.enabled:
            self._debouncer.push(snapshot)
        self._update_state()

    def refresh(self, snapshot: ContentSnapshot) -> None:
        """New settings for the same text: re-key now, skipping the debounce."""
        self._current = snapshot
        if self.enabled:
            self._debouncer.cancel()
            self._start(snapshot)
        self._update_state()

    # --- lifecycle ---

    @property
    def busy(self) -> bool:
        return self._debouncer.pending or bool(self._tasks)

    async def wait_idle(self) -> None:
        await self._debouncer.wait()
        tasks = list(self._tasks)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def aclose(self) -> None:
        self._closed = True
        self._debouncer.cancel()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # --- internals ---

    def _is_current(self, snapshot: ContentSnapshot) -> bool:
        return snapshot == self._current

    def _update_state(self) -> None:
        cur = self._current
        if not self.enabled or cur is None:
            state = TierState.IDLE
        elif not self.client.accepts(cur):
            state = TierState.NOT_APPLICABLE
        elif cur in self._inflight:
            state = TierState.IN_FLIGHT
        elif self._debouncer.pending:
            state = TierState.PENDING
        elif self.status.result_for(cur) is not None or self.status.error_for(cur) is not None:
            state = TierState.SETTLED
        else:
            state = TierState.IDLE
        self.status.state = state

    def _changed(self) -> None:
        self._update_state()
        if not self._closed:
            self._on_change()

    def _start(self, snapshot: ContentSnapshot) -> None:
        task = asyncio.get_running_loop().create_task(self._run(snapshot))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, snapshot: ContentSnapshot) -> None:
        if not self.client.accepts(snapshot):
            # Not applicable: no request, not loading, no error.
            self._changed()
            return

        key = self.cache.key_for(self.tier, snapshot)
        entry = await self.cache.get(key)
        if entry is not None:
            if self._is_current(snapshot):
                self.status.accept(snapshot, entry.result, self._next_sequence())
            if entry.is_fresh:
                self._changed()
                return
            # Stale: keep showing it, revalidate below.

        if not self._is_current(snapshot) or snapshot in self._inflight:
            self._changed()
            return

        self._inflight[snapshot] = asyncio.current_task()  # type: ignore[assignment]
        self._changed()
        try:
            result = await self.client.analyze(snapshot)
        except ServiceUnavailable as e:
            logger.info("Slow tier degraded, continuing with fast tier only",
                        extra={"tier": self.tier.value, "status_code": e.status_code})
            self._settle_error(snapshot, e)
        except AnalyzerError as e:
            self._settle_error(snapshot, e)
        except Exception as e:
            logger.exception("Unexpected analyzer failure",
                             extra={"tier": self.tier.value, "error_type": type(e).__name__})
            self._settle_error(snapshot, e)
        else:
            await self.cache.put(
                key, result,
                stale_after=self.config.stale_after,
                evict_after=self.config.evict_after,
            )
            if self._is_current(snapshot):
                self.status.accept(snapshot, result, self._next_sequence())
            else:
                logger.debug("Dropped response for superseded snapshot",
                             extra={"tier": self.tier.value, "cache_key": key[:12]})
        finally:
            self._inflight.pop(snapshot, None)
            self._changed()

    def _settle_error(self, snapshot: ContentSnapshot, error: Exception) -> None:
        if self._is_current(snapshot):
            self.status.fail(snapshot, error)
        else:
            logger.debug("Dropped error for superseded snapshot",
                         extra={"tier": self.tier.value, "error_type": type(error).__name__})


class HybridFeedbackCoordinator:
    """Owns the MergedView. Everything else feeds it."""

    def __init__(
        self,
        fast_client: AnalyzerClient,
        slow_client: AnalyzerClient,
        preferences: PreferenceStore,
        *,
        cache: Optional[ResultCache] = None,
        discussion_id: Optional[str] = None,
        topic_id: Optional[str] = None,
        enabled: bool = True,
        enable_ai: Optional[bool] = None,
        fast_debounce: Optional[float] = None,
        slow_debounce: Optional[float] = None,
        min_content_length: Optional[int] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or default_settings
        if enable_ai is None:
            enable_ai = settings.ENABLE_AI
        self.preferences = preferences
        self.min_content_length = (
            settings.MIN_CONTENT_LENGTH if min_content_length is None
            else min_content_length
        )
        self.cache = (
            cache if cache is not None
            else ResultCache(max_entries=settings.CACHE_MAX_ENTRIES)
        )
        # One length gate for the view and for both tiers.
        for client in (fast_client, slow_client):
            client.min_content_length = self.min_content_length

        self._snapshot = ContentSnapshot(
            text="",
            sensitivity=preferences.load(),
            discussion_id=discussion_id,
            topic_id=topic_id,
        )
        self._has_input = False
        self._subscribers: list[Subscriber] = []
        self._view = MergedView(sensitivity=self._snapshot.sensitivity)

        counter = itertools.count(1)
        next_sequence = lambda: next(counter)  # noqa: E731
        self.fast = TierPipeline(
            fast_client, self.cache, tier_config(Tier.FAST, settings),
            self._publish, next_sequence,
            enabled=enabled, debounce=fast_debounce,
        )
        self.slow = TierPipeline(
            slow_client, self.cache, tier_config(Tier.SLOW, settings),
            self._publish, next_sequence,
            enabled=enabled and enable_ai, debounce=slow_debounce,
        )

    # --- observable state ---

    @property
    def view(self) -> MergedView:
        return self._view

    @property
    def snapshot(self) -> ContentSnapshot:
        return self._snapshot

    @property
    def sensitivity(self) -> SensitivityLevel:
        return self._snapshot.sensitivity

    @property
    def is_content_valid(self) -> bool:
        return len(self._snapshot.text) >= self.min_content_length

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call `callback` with every new view. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # --- inputs ---

    def set_content(self, text: str) -> None:
        """Feed one keystroke's worth of text."""
        self._snapshot = self._snapshot.with_text(text)
        self._has_input = True
        self.fast.observe(self._snapshot)
        self.slow.observe(self._snapshot)
        self._publish()

    def set_sensitivity(self, level: SensitivityLevel | str) -> None:
        """Persist the new level and re-key both tiers."""
        parsed = parse_sensitivity(level)
        if parsed is None:
            raise ValueError(f"Unknown sensitivity level: {level!r}")
        level = parsed
        self.preferences.save(level)
        if level is self._snapshot.sensitivity:
            return
        self._rekey(replace(self._snapshot, sensitivity=level))

    def set_context(
        self,
        discussion_id: Optional[str] = None,
        topic_id: Optional[str] = None,
    ) -> None:
        snapshot = replace(self._snapshot, discussion_id=discussion_id, topic_id=topic_id)
        if snapshot != self._snapshot:
            self._rekey(snapshot)

    def _rekey(self, snapshot: ContentSnapshot) -> None:
        self._snapshot = snapshot
        if self._has_input:
            self.fast.refresh(snapshot)
            self.slow.refresh(snapshot)
        self._publish()

    # --- lifecycle ---

    async def wait_idle(self) -> None:
        """Wait until no timer is pending and no request is in flight."""
        while self.fast.busy or self.slow.busy:
            await self.fast.wait_idle()
            await self.slow.wait_idle()

    async def aclose(self) -> None:
        await self.fast.aclose()
        await self.slow.aclose()
        self._subscribers.clear()

    def _publish(self) -> None:
        view = resolve(
            self._snapshot if self._has_input else None,
            self.fast.status,
            self.slow.status,
            sensitivity=self._snapshot.sensitivity,
            is_content_valid=self.is_content_valid,
        )
        if view == self._view:
            return
        self._view = view
        for callback in list(self._subscribers):
            try:
                callback(view)
            except Exception:
                logger.exception("Subscriber failed",
                                 extra={"sensitivity": view.sensitivity.value})
