"""
Drives a service's Web UI once it has loaded: optional login, a settle
delay, then pasting the shared URL into the add dialog.

The automator only talks to a `ScriptHost`, so the same state machine runs
against a real browser (see `playwright_host`) or a scripted fake in tests.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol, Set

from shareconnect.models.profile import Profile

from .scripts import (
    INJECT_FILLED,
    INJECT_OPENED,
    STRATEGIES,
    SessionStrategy,
    StrategyKey,
)

log = logging.getLogger(__name__)


class SessionPhase(str, Enum):
    LOADING = "loading"
    LOADED = "loaded"
    AUTHENTICATING = "authenticating"
    SETTLING = "settling"
    INJECTING = "injecting"
    DONE = "done"
    FALLBACK = "fallback"


TERMINAL_PHASES = frozenset({SessionPhase.DONE, SessionPhase.FALLBACK})


class ScriptHost(Protocol):
    """Something that can run JavaScript in a loaded page and show a message."""

    async def evaluate(self, script: str) -> Any: ...

    def notify(self, message: str) -> None: ...


class WebSessionAutomator:
    """
    One-shot automation of a single Web UI page.

    `on_page_loaded` starts the sequence the first time it is called; later
    page loads (the redirect after a login, for instance) are ignored. All
    waits are `call_later` timers on the running loop, and `close` cancels
    whatever is still pending without touching the host again.
    """

    def __init__(
        self,
        profile: Profile,
        url: Optional[str],
        host: ScriptHost,
        *,
        retry_delay: float = 1.0,
        max_injection_attempts: Optional[int] = 30,
        strategies: Optional[Dict[StrategyKey, SessionStrategy]] = None,
    ):
        self.profile = profile
        self.url = url
        self.host = host
        self.retry_delay = retry_delay
        self.max_injection_attempts = max_injection_attempts
        self._strategies = strategies if strategies is not None else STRATEGIES

        self.phase = SessionPhase.LOADING
        self.attempted_auth = False
        self.injection_attempts = 0
        self.closed = False

        self._timers: List[asyncio.TimerHandle] = []
        self._tasks: Set[asyncio.Task] = set()
        self._finished = asyncio.Event()

    @property
    def strategy(self) -> Optional[SessionStrategy]:
        return self._strategies.get((self.profile.service_kind, self.profile.torrent_client))

    @property
    def finished(self) -> bool:
        return self.phase in TERMINAL_PHASES or self.closed

    def on_page_loaded(self) -> None:
        """Host callback for the page `load` event."""
        if self.attempted_auth or self.closed:
            log.debug("Page reloaded, automation already started.")
            return
        self.attempted_auth = True
        self.phase = SessionPhase.LOADED
        self._spawn(self._start())

    async def wait_finished(self) -> SessionPhase:
        """Waits until the session reaches a terminal phase or is closed."""
        await self._finished.wait()
        return self.phase

    def close(self) -> None:
        """Cancels pending timers and script evaluations."""
        if self.closed:
            return
        self.closed = True
        for handle in self._timers:
            handle.cancel()
        self._timers.clear()
        for task in list(self._tasks):
            task.cancel()
        self._finished.set()

    async def _start(self) -> None:
        strategy = self.strategy
        login = strategy.login if strategy else None

        if login is None or not self.profile.has_credentials:
            self._begin_injection()
            return

        self.phase = SessionPhase.AUTHENTICATING
        log.info(f"Logging in to {self.profile.service_label}...")
        result = await self.host.evaluate(
            login.script(self.profile.username, self.profile.password)
        )
        log.debug(f"Login script returned: {result!r}")

        # There is no reliable success signal, so wait for the UI to settle.
        self.phase = SessionPhase.SETTLING
        self._schedule(login.settle_delay, self._begin_injection)

    def _begin_injection(self) -> None:
        if not self.url:
            log.debug("No URL to share, leaving the Web UI open.")
            self._finish(SessionPhase.DONE)
            return

        strategy = self.strategy
        if strategy is None or strategy.injection is None:
            self._fall_back()
            return

        self.phase = SessionPhase.INJECTING
        self._spawn(self._inject())

    async def _inject(self) -> None:
        self.injection_attempts += 1
        result = await self.host.evaluate(self.strategy.injection.script(self.url))
        log.debug(f"Injection attempt {self.injection_attempts} returned: {result!r}")

        if result == INJECT_FILLED:
            self._notify(f"URL passed to {self.profile.service_label}: {self.url}")
            self._finish(SessionPhase.DONE)
            return

        if (
            self.max_injection_attempts is not None
            and self.injection_attempts >= self.max_injection_attempts
        ):
            log.warning(
                f"Could not find the add-URL field after {self.injection_attempts} attempts."
            )
            self._fall_back()
            return

        if result == INJECT_OPENED:
            log.debug("Opened the add dialog, waiting for the URL field.")
        self._schedule(self.retry_delay, lambda: self._spawn(self._inject()))

    def _fall_back(self) -> None:
        self._notify(f"URL to download: {self.url}")
        self._finish(SessionPhase.FALLBACK)

    def _finish(self, phase: SessionPhase) -> None:
        self.phase = phase
        self._finished.set()

    def _notify(self, message: str) -> None:
        if self.closed:
            return
        self.host.notify(message)

    def _schedule(self, delay: float, callback: Callable[[], None]) -> None:
        if self.closed:
            return
        loop = asyncio.get_running_loop()
        self._timers = [h for h in self._timers if not h.cancelled()]
        self._timers.append(loop.call_later(delay, callback))

    def _spawn(self, coro) -> None:
        if self.closed:
            coro.close()
            return
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None and not self.closed:
            log.error(f"Web UI automation failed: {error}")
            self._fall_back()
