"""Local OAuth redirect listener and the authorization-code capture flow.

The flow is an explicit state machine:

    IDLE -> LISTENER_STARTED -> BROWSER_NAVIGATED -> [LOGIN_FORM_FILLED]
         -> [CONSENT_ACCEPTED] -> CODE_RECEIVED | ERROR_RECEIVED

`close()` moves any state to CLOSED and shuts the listener down exactly once.
"""

import enum
import logging
import socket
import threading
import urllib.parse
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, List, Optional

from .auth import AuthorizationRequest, extract_code_from_redirect_url
from .browser_login import accept_consent, fill_login_form, is_consent_page, is_login_page

logger = logging.getLogger(__name__)

CALLBACK_PAGE = b"""<!DOCTYPE html>
<html>
  <head><meta charset="utf-8"><title>Spotify login</title></head>
  <body>
    <h1>Spotify login finished</h1>
    <p>You can close this window and return to the terminal.</p>
  </body>
</html>
"""


class AuthorizationError(RuntimeError):
    """Spotify redirected back without a usable authorization code."""

    def __init__(self, error: str):
        super().__init__(error)
        self.error = error


@dataclass(frozen=True)
class CallbackResult:
    code: Optional[str] = None
    state: Optional[str] = None
    error: Optional[str] = None


class _CallbackHandler(BaseHTTPRequestHandler):
    server: "_CallbackServer"

    def do_GET(self):
        parsed = urllib.parse.urlparse(self.path)
        if parsed.path != self.server.listener.callback_path:
            self.send_error(404)
            return

        params = extract_code_from_redirect_url(self.path)
        self.send_response(200)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(CALLBACK_PAGE)))
        self.end_headers()
        self.wfile.write(CALLBACK_PAGE)

        self.server.listener.deliver(
            CallbackResult(code=params.get("code"), state=params.get("state"), error=params.get("error"))
        )

    def log_message(self, format, *args):
        logger.debug("callback listener: " + format, *args)


class _CallbackServer(HTTPServer):
    def __init__(self, address, listener: "CallbackListener"):
        if ":" in address[0]:
            self.address_family = socket.AF_INET6
        self.listener = listener
        super().__init__(address, _CallbackHandler)


class CallbackListener:
    """One-shot HTTP listener bound to the redirect URI's host and port."""

    def __init__(self, redirect_uri: str):
        parsed = urllib.parse.urlparse(redirect_uri)
        self.host = parsed.hostname or "127.0.0.1"
        self.requested_port = parsed.port if parsed.port is not None else 80
        self.callback_path = parsed.path or "/callback"

        self._server: Optional[_CallbackServer] = None
        self._thread: Optional[threading.Thread] = None
        self._received = threading.Event()
        self._lock = threading.Lock()
        self._result: Optional[CallbackResult] = None

    @property
    def port(self) -> int:
        if self._server is None:
            return self.requested_port
        return int(self._server.server_address[1])

    @property
    def callback_url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"http://{host}:{self.port}{self.callback_path}"

    @property
    def result(self) -> Optional[CallbackResult]:
        return self._result

    def start(self) -> None:
        """Bind the port and serve in a background thread; OSError if the port is taken."""

        if self._server is not None:
            raise RuntimeError("Callback listener already started")

        self._server = _CallbackServer((self.host, self.requested_port), self)
        self._thread = threading.Thread(target=self._server.serve_forever, name="oauth-callback", daemon=True)
        self._thread.start()
        logger.info(f"Listening for the Spotify redirect on {self.callback_url}")

    def deliver(self, result: CallbackResult) -> None:
        # First callback wins; later hits (reloads) are ignored.
        with self._lock:
            if self._result is not None:
                return
            self._result = result
        self._received.set()

    def wait(self, timeout: Optional[float] = None) -> Optional[CallbackResult]:
        self._received.wait(timeout)
        return self._result

    def close(self) -> None:
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join()
        self._server = None
        self._thread = None
        logger.info("Callback listener closed")


class CaptureState(enum.Enum):
    IDLE = "idle"
    LISTENER_STARTED = "listener_started"
    BROWSER_NAVIGATED = "browser_navigated"
    LOGIN_FORM_FILLED = "login_form_filled"
    CONSENT_ACCEPTED = "consent_accepted"
    CODE_RECEIVED = "code_received"
    ERROR_RECEIVED = "error_received"
    CLOSED = "closed"


class AuthCodeCapture:
    """Obtain an authorization code by logging in through a browser page."""

    def __init__(
        self,
        request: AuthorizationRequest,
        *,
        listener: Optional[Any] = None,
        timeout: Optional[float] = None,
    ):
        self.request = request
        self.listener = listener if listener is not None else CallbackListener(request.redirect_uri)
        self.timeout = timeout
        self.state = CaptureState.IDLE
        self.history: List[CaptureState] = [CaptureState.IDLE]
        self.code: Optional[str] = None
        self.error: Optional[str] = None
        self._closed = False

    def _transition(self, new_state: CaptureState) -> None:
        logger.debug(f"auth capture: {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)

    def _fail(self, error: str) -> AuthorizationError:
        self.error = error
        self._transition(CaptureState.ERROR_RECEIVED)
        return AuthorizationError(error)

    def start_listener(self) -> None:
        if self.state is not CaptureState.IDLE:
            raise RuntimeError(f"Cannot start listener from state {self.state.value}")
        self.listener.start()
        self._transition(CaptureState.LISTENER_STARTED)

    def drive_browser(self, page: Any, username: str, password: str) -> None:
        """Open the authorize URL; fill the login form and accept consent when shown."""

        if self.state is not CaptureState.LISTENER_STARTED:
            raise RuntimeError(f"Cannot navigate before the listener is bound (state {self.state.value})")

        page.goto(self.request.auth_url)
        self._transition(CaptureState.BROWSER_NAVIGATED)

        if is_login_page(page.url):
            fill_login_form(page, username, password)
            self._transition(CaptureState.LOGIN_FORM_FILLED)

        if is_consent_page(page.url):
            accept_consent(page)
            self._transition(CaptureState.CONSENT_ACCEPTED)

    def await_code(self) -> str:
        result = self.listener.wait(self.timeout)
        if result is None:
            raise self._fail("Timed out waiting for the Spotify redirect")

        if result.error:
            logger.error(f"Something went wrong. Error: {result.error}")
            raise self._fail(result.error)

        if not result.code:
            raise self._fail("No code found")

        if result.state and result.state != self.request.state:
            raise self._fail("state_mismatch")

        self.code = result.code
        self._transition(CaptureState.CODE_RECEIVED)
        return result.code

    def close(self) -> None:
        """Tear the listener down; safe to call from any state, acts once."""

        if self._closed:
            return
        self._closed = True
        try:
            self.listener.close()
        finally:
            self._transition(CaptureState.CLOSED)

    def __enter__(self) -> "AuthCodeCapture":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def run(self, page: Any, username: str, password: str) -> str:
        """Run the whole flow and return the authorization code."""

        with self:
            self.start_listener()
            try:
                self.drive_browser(page, username, password)
            except Exception as e:
                if self.listener.result is None:
                    logger.error(f"Error logging in: {e}")
                    raise self._fail(str(e)) from e
                logger.warning(f"Browser step failed after the redirect arrived: {e}")
            return self.await_code()
