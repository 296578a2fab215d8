# parity/browser.py
from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Optional

from playwright.async_api import async_playwright, Page, Browser, BrowserContext
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .dom import PageSnapshot
from .exceptions import AuthError, RowNotFound

logger = logging.getLogger(__name__)

SESSION_COOKIE = "__Secure-authjs.session-token"

# Copy each input's live value into its value attribute so it survives page.content().
_SYNC_INPUT_VALUES_JS = """
() => {
  for (const input of document.querySelectorAll('input')) {
    input.setAttribute('value', input.value ?? '');
  }
}
"""

_SHOW_YEAR_2_STATE_JS = """
(label) => {
  for (const el of document.querySelectorAll('*')) {
    const text = el.textContent || '';
    if (text.trim() !== label && !(text.includes(label) && el.children.length < 3)) continue;
    const parent = el.closest('label, div, span');
    if (!parent) continue;
    const btn = parent.querySelector('button[role="checkbox"]') ||
                parent.parentElement?.querySelector('button[role="checkbox"]');
    if (btn) return btn.getAttribute('data-state');
    const input = parent.querySelector('input[type="checkbox"]');
    if (input) return input.checked ? 'checked' : 'unchecked';
    const stateEl = parent.querySelector('[data-state]');
    if (stateEl) return stateEl.getAttribute('data-state');
  }
  return null;
}
"""

_YEAR_ROWS_READY_JS = """
(label) => {
  let count = 0;
  for (const row of document.querySelectorAll('tr')) {
    const text = row.textContent || '';
    if (text.includes(label) && /\\[\\d{4}[-–]\\d{4}\\]/.test(text) &&
        !text.includes('(LY)') && !text.includes('(LLY)')) {
      count++;
    }
  }
  return count >= 2;
}
"""


def verify_storage_state(path: Path, now: Optional[float] = None) -> None:
    """
    Check the saved browser session before any unit runs.

    Raises AuthError when the file is missing, has no session cookie, or the
    cookie has expired.
    """
    if not path.exists():
        raise AuthError(
            f"Auth storage state not found at {path}. "
            f"Run tools/auth_bootstrap.py first."
        )

    try:
        auth_data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise AuthError(f"Invalid auth file {path}: {e}. Re-run tools/auth_bootstrap.py") from e

    cookie = next((c for c in auth_data.get("cookies") or [] if c.get("name") == SESSION_COOKIE), None)
    if cookie is None:
        raise AuthError("Invalid auth file. Re-run tools/auth_bootstrap.py")

    now = time.time() if now is None else now
    expires = cookie.get("expires")
    if expires and 0 < expires < now:
        raise AuthError("Session expired. Re-run tools/auth_bootstrap.py")

    logger.info("Authentication verified. Session is valid.")


class PlaywrightPageDriver:
    """One page in its own browser context; the only place that talks to Playwright."""

    def __init__(self, context: BrowserContext, page: Page, navigation_timeout_ms: int = 30000):
        self.context = context
        self.page = page
        self.navigation_timeout_ms = navigation_timeout_ms

    async def goto(self, url: str):
        await self.page.goto(url, timeout=self.navigation_timeout_ms)
        await self.page.wait_for_load_state('load')

    async def settle(self, ms: int):
        await self.page.wait_for_timeout(ms)

    async def snapshot(self) -> PageSnapshot:
        await self.page.evaluate(_SYNC_INPUT_VALUES_JS)
        return PageSnapshot.from_html(await self.page.content())

    async def wait_for_text(self, text: str, timeout_ms: int) -> bool:
        """True once `text` is on the page; False on timeout."""
        try:
            await self.page.wait_for_selector(f'text={text}', timeout=timeout_ms)
            return True
        except PlaywrightTimeoutError:
            logger.warning(f"Timed out after {timeout_ms}ms waiting for '{text}'")
            return False

    async def click_link(self, name: str, timeout_ms: int = 10000):
        """Click the named link; RowNotFound when it never becomes clickable."""
        try:
            await self.page.get_by_role('link', name=name, exact=True).click(timeout=timeout_ms)
        except PlaywrightTimeoutError:
            raise RowNotFound(f"'{name}' link not clickable within {timeout_ms}ms") from None
        await self.page.wait_for_load_state('load')

    async def click_text(self, text: str, timeout_ms: int = 10000):
        try:
            await self.page.locator(f'text={text}').first.click(timeout=timeout_ms)
        except PlaywrightTimeoutError:
            raise RowNotFound(f"'{text}' not clickable within {timeout_ms}ms") from None
        await self.page.wait_for_timeout(500)

    async def click_button_if_present(self, name: str) -> bool:
        button = self.page.get_by_role('button', name=name)
        if await button.count() == 0:
            logger.info(f"No '{name}' button; nothing to click")
            return False
        logger.info(f"Clicking '{name}' button...")
        await button.first.click()
        return True

    async def reveal_year_rows(self, row_label: str, settle_ms: int = 500):
        """
        Bring the "Stats by Year" rows on screen and tick "Show year 2" so the
        next year's row is rendered too.
        """
        try:
            await self.page.locator('text=Loading Data').wait_for(state='hidden', timeout=10000)
        except PlaywrightTimeoutError:
            logger.warning("Loading overlay still visible after 10s")

        stats_header = self.page.locator('text=Stats by Year').first
        if await stats_header.count() > 0:
            await stats_header.scroll_into_view_if_needed()
        await self.page.wait_for_timeout(500)

        state = await self.page.evaluate(_SHOW_YEAR_2_STATE_JS, "Show year 2")
        if state == 'checked':
            return
        toggle = self.page.locator('text=Show year 2').first
        if await toggle.count() == 0:
            logger.info("No 'Show year 2' toggle on page")
            return

        await toggle.click()
        await self.page.wait_for_timeout(settle_ms)
        if state == 'unchecked':
            try:
                await self.page.wait_for_function(_YEAR_ROWS_READY_JS, arg=row_label, timeout=5000)
            except PlaywrightTimeoutError:
                logger.warning(f"Second '{row_label}' year row did not appear")

    async def close(self):
        await self.context.close()


class PlaywrightSession:
    """Launch chromium once and hand out an isolated context per comparison unit"""

    def __init__(self, storage_state_path: Path, headless: bool = True, navigation_timeout_ms: int = 30000):
        """
        Args:
            storage_state_path: Path to Playwright storage state JSON file for authentication
            headless: Run browser in headless mode
            navigation_timeout_ms: Timeout for each page navigation
        """
        self.storage_state_path = storage_state_path
        self.headless = headless
        self.navigation_timeout_ms = navigation_timeout_ms
        self.browser: Optional[Browser] = None
        self.playwright = None

    async def __aenter__(self):
        """Context manager entry - launch browser"""
        verify_storage_state(self.storage_state_path)
        self.playwright = await async_playwright().start()
        self.browser = await self.playwright.chromium.launch(headless=self.headless)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - close browser"""
        if self.browser:
            await self.browser.close()
        if self.playwright:
            await self.playwright.stop()

    async def new_driver(self) -> PlaywrightPageDriver:
        context = await self.browser.new_context(storage_state=str(self.storage_state_path))
        page = await context.new_page()
        return PlaywrightPageDriver(context, page, self.navigation_timeout_ms)
