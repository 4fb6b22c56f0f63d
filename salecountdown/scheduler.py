"""
salecountdown/scheduler.py

Asyncio-based countdown subscriptions.

Each subscription owns one task that sleeps for its interval, recomputes
a snapshot from the time source, fires any edge callbacks the dispatcher
reports, and hands the snapshot to on_tick. Snapshots are always
recomputed from now() rather than accumulated, so a subscription catches
up correctly after the host sleeps or the loop stalls.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, fields
from numbers import Real
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from .countdown import ThresholdsLike, compute_snapshot
from .dispatcher import CallbackDispatcher
from .errors import ConfigError
from .models import SaleWindow, TimeRemaining
from .progress import percentage
from .thresholds import ThresholdPolicy
from .time_source import Instant, SystemTimeSource, TimeSource, parse_instant


# Default re-evaluation period
DEFAULT_INTERVAL_MS = 1000

SleepFunc = Callable[[float], Awaitable[Any]]


@dataclass
class CountdownCallbacks:
    """
    Handlers for a subscription. Any of them may be a coroutine function.

    Attributes:
        on_start: Called once when the sale opens.
        on_urgent: Called once on entering the urgent tier.
        on_critical: Called once on entering the critical tier.
        on_expire: Called once when the sale ends. Ticking stops afterwards.
        on_tick: Called with every snapshot, after edge callbacks.
        on_error: Called with any exception raised by another handler.
    """
    on_start: Optional[Callable[[], Any]] = None
    on_urgent: Optional[Callable[[], Any]] = None
    on_critical: Optional[Callable[[], Any]] = None
    on_expire: Optional[Callable[[], Any]] = None
    on_tick: Optional[Callable[[TimeRemaining], Any]] = None
    on_error: Optional[Callable[[BaseException], Any]] = None

    @classmethod
    def coerce(
        cls,
        callbacks: Union["CountdownCallbacks", Mapping[str, Any], None]
    ) -> "CountdownCallbacks":
        """Accept a CountdownCallbacks, a mapping of handler names, or None."""
        if callbacks is None:
            return cls()
        if isinstance(callbacks, cls):
            return callbacks
        if isinstance(callbacks, Mapping):
            known = {f.name for f in fields(cls)}
            unknown = set(callbacks) - known
            if unknown:
                raise ConfigError(f"Unknown callbacks: {sorted(unknown)}")
            return cls(**callbacks)
        raise ConfigError(f"Unsupported callbacks type: {type(callbacks).__name__}")


class Subscription:
    """
    A live countdown for one sale window.

    Created by CountdownScheduler.subscribe(); not shared between callers.
    """

    def __init__(
        self,
        window: SaleWindow,
        interval_ms: float,
        thresholds: ThresholdPolicy,
        callbacks: CountdownCallbacks,
        time_source: TimeSource,
        sleep: SleepFunc
    ):
        self.window = window
        self.interval_ms = interval_ms
        self.thresholds = thresholds
        self.callbacks = callbacks
        self._time_source = time_source
        self._sleep = sleep
        self._dispatcher = CallbackDispatcher()
        self._snapshot: Optional[TimeRemaining] = None
        self._last_now: Optional[Instant] = None
        self._active = True
        self._in_tick = False
        self._task: Optional[asyncio.Task] = None
        self.logger = logging.getLogger(f"{__name__}.subscription")

    @property
    def active(self) -> bool:
        """True until expiry, unsubscribe() or a fatal error."""
        return self._active

    def get_snapshot(self) -> TimeRemaining:
        """Most recent snapshot."""
        return self._snapshot

    def get_progress(self) -> float:
        """
        Percentage of the window elapsed at the last snapshot.

        Raises:
            ConfigError: If the window has no start time.
        """
        return percentage(self.window, self._last_now)

    def unsubscribe(self) -> None:
        """
        Stop future ticks. Safe to call repeatedly and from inside callbacks.

        A tick that is already running is allowed to finish.
        """
        if not self._active:
            return

        self._active = False
        if self._task is not None and not self._in_tick:
            self._task.cancel()
        self.logger.debug(f"Unsubscribed from window ending {self.window.end_time}")

    async def wait_closed(self) -> None:
        """Wait until the subscription's task has finished."""
        if self._task is not None:
            await asyncio.wait({self._task})

    async def _start(self) -> None:
        self._in_tick = True
        try:
            await self._evaluate()
        finally:
            self._in_tick = False

        if self._active:
            self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        """Tick loop. Runs until expiry, unsubscribe or a fatal error."""
        interval_s = self.interval_ms / 1000

        try:
            while self._active:
                await self._sleep(interval_s)
                if not self._active:
                    break

                self._in_tick = True
                try:
                    await self._evaluate()
                except Exception as e:
                    self.logger.exception(f"Error evaluating countdown: {e}")
                    await self._report(e)
                finally:
                    self._in_tick = False

        except asyncio.CancelledError:
            self.logger.debug("Tick loop cancelled")
            raise
        finally:
            self._active = False

    def _now(self) -> Instant:
        # Never let a subscription's clock run backwards
        now = parse_instant(self._time_source.now())
        if self._last_now is not None and now < self._last_now:
            now = self._last_now
        self._last_now = now
        return now

    async def _evaluate(self) -> None:
        snapshot = compute_snapshot(self.window, self._now(), self.thresholds)
        self._snapshot = snapshot

        for kind in self._dispatcher.observe(snapshot.state):
            handler = getattr(self.callbacks, kind.handler_name)
            if not await self._invoke(kind.handler_name, handler):
                return

        if not await self._invoke("on_tick", self.callbacks.on_tick, snapshot):
            return

        if self._dispatcher.finished and self._active:
            self._active = False
            self.logger.info(f"Countdown for window ending {self.window.end_time} expired")

    async def _invoke(self, name: str, handler: Optional[Callable], *args) -> bool:
        """
        Run one handler in isolation.

        Returns:
            False if the handler raised ConfigError and the subscription stopped.
        """
        if handler is None:
            return True

        try:
            result = handler(*args)
            if inspect.isawaitable(result):
                await result
        except ConfigError as e:
            self.logger.error(f"Fatal config error in {name}, stopping: {e}")
            self._active = False
            await self._report(e)
            return False
        except Exception as e:
            self.logger.exception(f"Error in {name} callback: {e}")
            await self._report(e)
        return True

    async def _report(self, error: BaseException) -> None:
        if self.callbacks.on_error is None:
            return
        try:
            result = self.callbacks.on_error(error)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            self.logger.exception(f"Error in on_error callback: {e}")


class CountdownScheduler:
    """
    Creates countdown subscriptions.

    The scheduler holds no registry: each Subscription it returns belongs
    to its caller and runs independently.

    Args:
        time_source: Supplies now(); defaults to the host clock.
        sleep: Coroutine used between ticks; defaults to asyncio.sleep.
        default_interval_ms: Interval used when subscribe() gets none.
        default_thresholds: Thresholds used when subscribe() gets none.
    """

    def __init__(
        self,
        time_source: Optional[TimeSource] = None,
        sleep: Optional[SleepFunc] = None,
        default_interval_ms: float = DEFAULT_INTERVAL_MS,
        default_thresholds: ThresholdsLike = None
    ):
        self.time_source = time_source or SystemTimeSource()
        self.sleep = sleep or asyncio.sleep
        self.default_interval_ms = validate_interval(default_interval_ms)
        self.default_thresholds = ThresholdPolicy.from_config(default_thresholds)
        self.logger = logging.getLogger(f"{__name__}.scheduler")

    @classmethod
    def from_settings(
        cls,
        settings,
        time_source: Optional[TimeSource] = None,
        sleep: Optional[SleepFunc] = None
    ) -> "CountdownScheduler":
        """Build a scheduler from CountdownSettings."""
        return cls(
            time_source=time_source,
            sleep=sleep,
            default_interval_ms=settings.interval_ms,
            default_thresholds=settings.thresholds,
        )

    async def subscribe(
        self,
        window: Union[SaleWindow, Mapping[str, Any]],
        interval_ms: Optional[float] = None,
        thresholds: ThresholdsLike = None,
        callbacks: Union[CountdownCallbacks, Mapping[str, Any], None] = None
    ) -> Subscription:
        """
        Start a live countdown.

        The first snapshot is computed and passed to on_tick before this
        returns. It only sets the baseline: edge callbacks first fire on the
        next tick, which reports every tier crossed so far. Ticking then
        continues every interval_ms until on_expire has fired or the
        subscription is cancelled.

        Args:
            window: SaleWindow, or a catalog schedule mapping.
            interval_ms: Re-evaluation period; defaults to the scheduler's.
            thresholds: ThresholdPolicy or mapping; defaults to the scheduler's.
            callbacks: CountdownCallbacks or a mapping of handler names.

        Returns:
            The running Subscription.

        Raises:
            ConfigError: On an invalid window, interval, thresholds or callbacks.
            InvalidInputError: If a schedule mapping holds unparsable dates.
        """
        if isinstance(window, Mapping):
            window = SaleWindow.from_schedule(window)
        elif not isinstance(window, SaleWindow):
            raise ConfigError(f"Unsupported window type: {type(window).__name__}")

        interval = validate_interval(
            self.default_interval_ms if interval_ms is None else interval_ms
        )
        policy = (
            self.default_thresholds if thresholds is None
            else ThresholdPolicy.from_config(thresholds)
        )

        subscription = Subscription(
            window=window,
            interval_ms=interval,
            thresholds=policy,
            callbacks=CountdownCallbacks.coerce(callbacks),
            time_source=self.time_source,
            sleep=self.sleep,
        )
        await subscription._start()

        self.logger.info(
            f"Subscribed to window ending {window.end_time} "
            f"(interval: {interval}ms, state: {subscription.get_snapshot().state.name})"
        )
        return subscription


def validate_interval(interval_ms: Any) -> float:
    """Return interval_ms if it is a positive number, else raise ConfigError."""
    if isinstance(interval_ms, bool) or not isinstance(interval_ms, Real):
        raise ConfigError(f"interval_ms must be a number, got {interval_ms!r}")
    if not interval_ms > 0:
        raise ConfigError(f"interval_ms must be positive, got {interval_ms}")
    return interval_ms


async def subscribe(
    window: Union[SaleWindow, Mapping[str, Any]],
    interval_ms: float = DEFAULT_INTERVAL_MS,
    thresholds: ThresholdsLike = None,
    callbacks: Union[CountdownCallbacks, Mapping[str, Any], None] = None,
    time_source: Optional[TimeSource] = None
) -> Subscription:
    """Subscribe with a one-off scheduler. See CountdownScheduler.subscribe()."""
    scheduler = CountdownScheduler(time_source=time_source)
    return await scheduler.subscribe(window, interval_ms, thresholds, callbacks)
