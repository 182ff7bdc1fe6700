"""Secrets lookup through the 1Password command-line tool (`op`, v2+).

The 1Password desktop app must have "Connect with 1Password CLI" enabled so
`op item get` works without an explicit sign-in.
"""

import subprocess
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

OP_BINARY = "op"


class CredentialError(RuntimeError):
    """A requested secret could not be retrieved."""


@dataclass(frozen=True)
class SpotifyCredentials:
    client_id: str
    client_secret: str
    username: str
    password: str


def _op_item_get(item_name: str, fields: List[str]) -> str:
    cmd = [
        OP_BINARY,
        "item",
        "get",
        item_name,
        "--no-color",
        "--fields",
        ",".join(f"label={f}" for f in fields),
    ]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, encoding="utf-8", check=False)
    except FileNotFoundError as e:
        raise CredentialError(f"1Password CLI '{OP_BINARY}' is not installed or not on PATH") from e

    if result.returncode != 0:
        detail = (result.stderr or "").strip() or f"exit code {result.returncode}"
        raise CredentialError(f"Could not read {', '.join(fields)} for item \"{item_name}\": {detail}")

    return (result.stdout or "").strip()


def get_secret(item_name: str, label: str) -> str:
    """Return a single labeled field of a 1Password item."""
    value = _op_item_get(item_name, [label])
    if not value:
        raise CredentialError(f"Could not find {label} for item \"{item_name}\"")
    return value


def get_credentials(item_name: str) -> Tuple[str, str]:
    """Return (username, password) stored in a 1Password item."""
    output = _op_item_get(item_name, ["username", "password"]).split(",")
    if len(output) != 2:
        raise CredentialError(f"Could not find username and password for item \"{item_name}\"")
    return output[0], output[1]


def load_spotify_credentials(config: Dict[str, Any]) -> SpotifyCredentials:
    """Resolve Spotify app + account credentials.

    Values set directly in config.json win; anything left blank is read from
    the 1Password item named by `onepassword_item`.
    """

    config = config or {}
    item = str(config.get("onepassword_item", "spotify")).strip()

    client_id = str(config.get("spotify_client_id", "")).strip()
    if not client_id:
        client_id = get_secret(item, config.get("onepassword_client_id_label", "app-client-id"))

    client_secret = str(config.get("spotify_client_secret", "")).strip()
    if not client_secret:
        client_secret = get_secret(item, config.get("onepassword_client_secret_label", "app-client-secret"))

    username = str(config.get("spotify_username", "")).strip()
    password = str(config.get("spotify_password", ""))
    if not username or not password:
        username, password = get_credentials(item)

    return SpotifyCredentials(
        client_id=client_id,
        client_secret=client_secret,
        username=username,
        password=password,
    )
