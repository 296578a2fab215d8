# tools/auth_bootstrap.py
from __future__ import annotations
import asyncio
import sys
from pathlib import Path
from playwright.async_api import async_playwright

sys.path.insert(0, str(Path(__file__).parent.parent))

from parity.browser import SESSION_COOKIE
from parity.config_service import ConfigManager


async def main(domain: str, state_path: Path) -> int:
    """
    Log in interactively and save the browser session for the parity checks.

    Usage:
        python tools/auth_bootstrap.py            # staging
        python tools/auth_bootstrap.py production

    The session is written to the run.storage_state path from config.json.
    """
    state_path.parent.mkdir(parents=True, exist_ok=True)
    start_url = f"https://{domain}/"

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=False)  # show the window for OAuth
        ctx = await browser.new_context()
        page = await ctx.new_page()
        await page.goto(start_url)
        print(f">>> Log in to {domain} in the opened window (Google OAuth).")
        print(">>> Waiting for the session cookie...")

        for _ in range(300):
            cookies = await ctx.cookies()
            if any(c["name"] == SESSION_COOKIE for c in cookies):
                break
            await page.wait_for_timeout(1000)
        else:
            print("Timed out waiting for login. Please try again.")
            await browser.close()
            return 1

        await ctx.storage_state(path=str(state_path))
        print(f"\n✓ Saved auth state to: {state_path.resolve()}")
        await browser.close()
    return 0


if __name__ == "__main__":
    cm = ConfigManager()
    domain_key = sys.argv[1] if len(sys.argv) > 1 else "staging"
    domain = cm.get("domains", domain_key)
    if not domain:
        print(f"Unknown domain '{domain_key}'. Use one of: {', '.join(cm.get('domains', default={}))}")
        sys.exit(2)
    state_path = Path(cm.resolve(cm.get("run.storage_state", default="playwright/.auth/user.json")))
    sys.exit(asyncio.run(main(domain, state_path)))
