from contextlib import contextmanager
from typing import Any, Dict, Iterator

from playwright.sync_api import Page, sync_playwright

from utils.logger import log_info


def _launch_options(config: Dict[str, Any]) -> Dict[str, Any]:
    options: Dict[str, Any] = {"headless": bool(config.get("browser_headless", False))}
    executable_path = str(config.get("browser_executable_path", "")).strip()
    if executable_path:
        options["executable_path"] = executable_path
    return options


@contextmanager
def open_browser(config: Dict[str, Any]) -> Iterator[Page]:
    """Launch Chromium and yield the single page shared by scraping and login."""

    config = config or {}
    with sync_playwright() as p:
        browser = p.chromium.launch(**_launch_options(config))
        try:
            context_options: Dict[str, Any] = {}
            user_agent = str(config.get("browser_user_agent", "")).strip()
            if user_agent:
                context_options["user_agent"] = user_agent

            context = browser.new_context(**context_options)
            page = context.new_page()
            # 0 disables Playwright's default 30s limit
            page.set_default_timeout(int(config.get("browser_timeout_ms", 0)))
            yield page
        finally:
            log_info("Closing browser")
            browser.close()
