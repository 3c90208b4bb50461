"""Refresh controller: owns scan configuration, schedules scans, publishes state."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from functools import partial
from typing import Callable, Optional, Set, Tuple

from devcap.backend.scanner import ScanCallError, ScanError, ScanResult, ScannerBridge
from devcap.config.exceptions import ConfigError
from devcap.config.settings import Settings, default_scan_path
from devcap.utils.listeners import ListenerRegistry

from . import aggregation
from .expansion import ExpansionState
from .models import BadgeMode, Period, Project
from .scheduling import RepeatingTimer, ScanDispatcher, TimerFactory

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _local_now() -> datetime:
    return datetime.now().astimezone()


class StaleResultPolicy(str, Enum):
    """What to do with a scan that completes after a newer one was issued."""

    DISCARD = "discard"
    LAST_WRITER = "last_writer"


@dataclass(frozen=True)
class ControllerSnapshot:
    """Immutable view of controller state handed to subscribers.

    Rollups are computed on access from ``projects``; nothing is cached.
    """

    scan_path: str
    period: Period
    refresh_interval_seconds: float
    badge_mode: BadgeMode
    projects: Tuple[Project, ...] = field(default_factory=tuple)
    is_loading: bool = False
    last_refresh_at: Optional[datetime] = None
    last_error: Optional[ScanError] = None
    expansion: ExpansionState = field(default_factory=ExpansionState)

    @property
    def total_commits(self) -> int:
        return aggregation.total_commits(self.projects)

    @property
    def total_branches(self) -> int:
        return aggregation.total_branches(self.projects)

    @property
    def badge_value(self) -> Optional[int]:
        return aggregation.badge_value(self.projects, self.badge_mode)

    @property
    def scan_failed(self) -> bool:
        return self.last_error is not None


@dataclass(frozen=True)
class _TriggerInputs:
    scan_path: str
    period: Period
    refresh_interval_seconds: float
    badge_mode: BadgeMode


class RefreshController:
    """Coordinates scans against the scanner bridge.

    Every method must be called from the thread that runs the dispatcher's
    event loop; completions are delivered there as well. Configuration lives
    in :class:`Settings`; writes made through this controller or directly to
    the store are picked up by a change listener, which re-scans when the path
    or period changes and re-arms the timer when the interval changes.

    Overlapping refreshes are not cancelled. Each request is numbered and,
    under :attr:`StaleResultPolicy.DISCARD`, a completion for anything but the
    most recently issued request is dropped. ``LAST_WRITER`` keeps whichever
    completion arrives last.
    """

    def __init__(
        self,
        settings: Settings,
        bridge: ScannerBridge,
        dispatcher: ScanDispatcher,
        timer_factory: TimerFactory,
        clock: Clock = _local_now,
        stale_policy: Optional[StaleResultPolicy] = None,
    ) -> None:
        self._settings = settings
        self._bridge = bridge
        self._dispatcher = dispatcher
        self._timer_factory = timer_factory
        self._clock = clock
        self._stale_policy = stale_policy or self._policy_from_settings()

        self._projects: Tuple[Project, ...] = ()
        self._is_loading = False
        self._last_refresh_at: Optional[datetime] = None
        self._last_error: Optional[ScanError] = None
        self._expansion = ExpansionState()

        self._timer: Optional[RepeatingTimer] = None
        self._issued = 0
        self._pending: Set[int] = set()
        self._closed = False

        self._subscribers = ListenerRegistry("controller state")
        self._observed = self._read_inputs()
        self._settings.add_change_listener(self._on_settings_changed)

    def _policy_from_settings(self) -> StaleResultPolicy:
        raw = self._settings.stale_results
        try:
            return StaleResultPolicy(raw)
        except ValueError:
            logger.warning("Unknown stale result policy %r, discarding stale scans", raw)
            return StaleResultPolicy.DISCARD

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def scan_path(self) -> str:
        return self._settings.scan_path

    @property
    def period(self) -> Period:
        return self._settings.period

    @property
    def refresh_interval_seconds(self) -> float:
        return self._settings.refresh_interval_seconds

    @property
    def badge_mode(self) -> BadgeMode:
        return self._settings.badge_mode

    @property
    def projects(self) -> Tuple[Project, ...]:
        return self._projects

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def last_refresh_at(self) -> Optional[datetime]:
        return self._last_refresh_at

    @property
    def last_error(self) -> Optional[ScanError]:
        return self._last_error

    @property
    def expansion(self) -> ExpansionState:
        return self._expansion

    @property
    def stale_policy(self) -> StaleResultPolicy:
        return self._stale_policy

    @property
    def auto_refresh_active(self) -> bool:
        return self._timer is not None and self._timer.active

    @property
    def pending_requests(self) -> int:
        return len(self._pending)

    def snapshot(self) -> ControllerSnapshot:
        return ControllerSnapshot(
            scan_path=self._observed.scan_path,
            period=self._observed.period,
            refresh_interval_seconds=self._observed.refresh_interval_seconds,
            badge_mode=self._observed.badge_mode,
            projects=self._projects,
            is_loading=self._is_loading,
            last_refresh_at=self._last_refresh_at,
            last_error=self._last_error,
            expansion=self._expansion,
        )

    def subscribe(self, callback: Callable[[ControllerSnapshot], None]) -> None:
        """Register ``callback`` for every state change.

        Bound methods are held weakly. The current snapshot is not replayed;
        call :meth:`snapshot` for the initial render.
        """
        self._subscribers.add(callback)

    def unsubscribe(self, callback: Callable[[ControllerSnapshot], None]) -> None:
        self._subscribers.remove(callback)

    def _publish(self) -> None:
        self._subscribers.notify(self.snapshot())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        """First-run initialisation, initial scan and auto-refresh."""
        if not self.scan_path:
            default = default_scan_path()
            logger.info("No scan path configured, defaulting to %s", default)
            # observed first, so the change listener sees no difference and does not scan twice
            self._observed = replace(self._observed, scan_path=default)
            try:
                self._settings.scan_path = default
            except ConfigError:
                self._observed = self._read_inputs()
                raise
        self.refresh()
        self.start_auto_refresh()

    def shutdown(self) -> None:
        self.stop_auto_refresh()
        self._settings.remove_change_listener(self._on_settings_changed)
        self._closed = True
        self._pending.clear()
        self._subscribers.clear()

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------
    def refresh(self) -> None:
        if self._closed:
            return
        path = self.scan_path
        if not path:
            logger.debug("Refresh skipped: no scan path configured")
            return
        period = self.period

        self._issued += 1
        sequence = self._issued
        self._pending.add(sequence)
        self._is_loading = True
        logger.info("Scanning %s for %s activity (request %d)", path, period.value, sequence)
        self._publish()

        self._dispatcher.submit(
            partial(self._run_scan, path, period),
            partial(self._on_scan_finished, sequence),
            partial(self._on_scan_error, sequence),
        )

    def _run_scan(self, path: str, period: Period) -> ScanResult:
        # worker thread: only touches the bridge
        try:
            return self._bridge.scan(path, period, None)
        except Exception as exc:
            logger.exception("Scanner bridge raised instead of returning a result")
            return ScanResult.failure(ScanCallError(str(exc)))

    def _on_scan_error(self, sequence: int, exc: BaseException) -> None:
        self._on_scan_finished(sequence, ScanResult.failure(ScanCallError(str(exc))))

    def _on_scan_finished(self, sequence: int, result: ScanResult) -> None:
        if self._closed:
            return
        self._pending.discard(sequence)

        if self._stale_policy is StaleResultPolicy.DISCARD and sequence != self._issued:
            logger.debug(
                "Discarding result of request %d, request %d is newer",
                sequence,
                self._issued,
            )
            return

        self._is_loading = False
        self._projects = result.projects
        self._last_error = result.error
        self._last_refresh_at = self._clock()
        if result.ok:
            logger.info(
                "Scan %d finished: %d projects, %d commits",
                sequence,
                len(result.projects),
                aggregation.total_commits(result.projects),
            )
        else:
            logger.warning("Scan %d failed, showing no activity: %s", sequence, result.error)
        self._publish()

    # ------------------------------------------------------------------
    # Auto-refresh
    # ------------------------------------------------------------------
    def start_auto_refresh(self) -> None:
        self.stop_auto_refresh()
        if self._closed:
            return
        interval = self.refresh_interval_seconds
        if interval <= 0:
            logger.info("Auto-refresh disabled")
            return
        self._timer = self._timer_factory(interval, self.refresh)
        self._timer.start()
        logger.info("Auto-refresh every %s seconds", interval)

    def stop_auto_refresh(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    # ------------------------------------------------------------------
    # Configuration triggers
    # ------------------------------------------------------------------
    def set_scan_path(self, path: str) -> None:
        self._settings.scan_path = str(path).strip()

    def set_period(self, period: "Period | str") -> None:
        self._settings.period = Period.parse(period)

    def set_refresh_interval(self, seconds: float) -> None:
        self._settings.refresh_interval_seconds = seconds

    def set_badge_mode(self, mode: "BadgeMode | str") -> None:
        self._settings.badge_mode = BadgeMode(mode)

    def _read_inputs(self) -> _TriggerInputs:
        return _TriggerInputs(
            scan_path=self._settings.scan_path,
            period=self._settings.period,
            refresh_interval_seconds=self._settings.refresh_interval_seconds,
            badge_mode=self._settings.badge_mode,
        )

    def _on_settings_changed(self) -> None:
        if self._closed:
            return
        previous, current = self._observed, self._read_inputs()
        if current == previous:
            return
        self._observed = current

        rescan = (
            current.scan_path != previous.scan_path
            or current.period != previous.period
        )
        rearm = current.refresh_interval_seconds != previous.refresh_interval_seconds

        if rescan:
            self.refresh()
        if rearm:
            self.start_auto_refresh()
        if not rescan or not self.scan_path:
            # refresh() already published unless it was a no-op
            self._publish()

    # ------------------------------------------------------------------
    # Expansion
    # ------------------------------------------------------------------
    def toggle_expansion(self) -> ExpansionState:
        self._expansion = self._expansion.toggle()
        self._publish()
        return self._expansion


__all__ = ["ControllerSnapshot", "RefreshController", "StaleResultPolicy"]
