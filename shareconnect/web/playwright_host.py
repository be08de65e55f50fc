"""
Opens a service's Web UI in a Playwright-controlled Chromium window and runs
the `WebSessionAutomator` against it.
"""

import asyncio
import json
import logging
from typing import Any, Callable, Optional, Set

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, async_playwright

from shareconnect.exceptions import TransportError
from shareconnect.models.config import AppSettings
from shareconnect.models.profile import Profile

from .session import SessionPhase, WebSessionAutomator

log = logging.getLogger(__name__)

_TOAST_SCRIPT = """(function(message) {
  var toast = document.createElement('div');
  toast.textContent = message;
  toast.style.cssText = 'position:fixed;bottom:16px;left:50%%;transform:translateX(-50%%);' +
    'background:#323232;color:#fff;padding:10px 16px;border-radius:4px;' +
    'font:14px sans-serif;z-index:2147483647;max-width:90%%;word-break:break-all;';
  document.body.appendChild(toast);
  setTimeout(function() { toast.remove(); }, 4000);
})(%s)"""


class PlaywrightHost:
    """`ScriptHost` backed by a Playwright page."""

    def __init__(self, page: Page, on_notify: Optional[Callable[[str], None]] = None):
        self.page = page
        self._on_notify = on_notify
        self._tasks: Set[asyncio.Task] = set()

    async def evaluate(self, script: str) -> Any:
        try:
            return await self.page.evaluate(script)
        except PlaywrightError as e:
            # Navigations destroy the execution context mid-script; treat as "not found".
            log.debug(f"Script evaluation failed: {e}")
            return None

    def notify(self, message: str) -> None:
        log.info(message)
        if self._on_notify:
            self._on_notify(message)
        task = asyncio.ensure_future(self._show_toast(message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _show_toast(self, message: str) -> None:
        try:
            await self.page.evaluate(_TOAST_SCRIPT % json.dumps(message))
        except PlaywrightError as e:
            log.debug(f"Could not show toast: {e}")


async def open_interactive_session(
    profile: Profile,
    url: Optional[str],
    settings: Optional[AppSettings] = None,
    on_notify: Optional[Callable[[str], None]] = None,
) -> SessionPhase:
    """
    Opens `{base_url}:{port}` in a browser window, automates login and URL
    injection, then keeps the window open until the user closes it.

    Returns the phase the automation ended in.
    """
    settings = settings or AppSettings()
    http_credentials = None
    if profile.has_credentials:
        http_credentials = {"username": profile.username, "password": profile.password}

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=settings.browser_headless)
        try:
            context = await browser.new_context(http_credentials=http_credentials)
            page = await context.new_page()

            host = PlaywrightHost(page, on_notify=on_notify)
            automator = WebSessionAutomator(
                profile,
                url,
                host,
                retry_delay=settings.injection_retry_delay,
                max_injection_attempts=settings.max_injection_attempts,
            )
            closed = asyncio.Event()
            page.on("load", lambda _: automator.on_page_loaded())
            page.on("close", lambda _: closed.set())

            log.info(f"Opening {profile.root_url} for [bold]{profile.name}[/]")
            try:
                await page.goto(profile.root_url)
            except PlaywrightError as e:
                automator.close()
                raise TransportError(f"Error loading page: {e}") from e

            closed_wait = asyncio.ensure_future(closed.wait())
            finished_wait = asyncio.ensure_future(automator.wait_finished())
            await asyncio.wait(
                {closed_wait, finished_wait}, return_when=asyncio.FIRST_COMPLETED
            )
            finished_wait.cancel()
            phase = automator.phase
            automator.close()

            if not settings.browser_headless:
                log.info("Close the browser window when you are done.")
                await closed_wait
            else:
                closed_wait.cancel()
            return phase
        finally:
            await browser.close()
