"""Drive Spotify's accounts pages with a Playwright page."""

from typing import Any

from constants import (
    AUTH_ACCEPT_SELECTOR,
    LOGIN_BUTTON_SELECTOR,
    LOGIN_PASSWORD_SELECTOR,
    LOGIN_USERNAME_SELECTOR,
)


def is_login_page(url: str) -> bool:
    return "login" in (url or "")


def is_consent_page(url: str) -> bool:
    return "authorize" in (url or "")


def fill_login_form(page: Any, username: str, password: str) -> None:
    """Submit the accounts login form and wait until the browser leaves it."""

    page.fill(LOGIN_USERNAME_SELECTOR, username)
    page.fill(LOGIN_PASSWORD_SELECTOR, password)
    page.click(LOGIN_BUTTON_SELECTOR)
    page.wait_for_url(lambda url: not is_login_page(url))


def accept_consent(page: Any) -> None:
    page.wait_for_selector(AUTH_ACCEPT_SELECTOR)
    page.click(AUTH_ACCEPT_SELECTOR)
