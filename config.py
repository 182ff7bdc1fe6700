import json
import os
from typing import Any, Dict

from constants import DEFAULT_REDIRECT_URI, MEDIALINK_LOOKUP_URL, SPOTIFY_SCOPES

CONFIG_PATH = "config.json"

# Default configuration values
DEFAULT_CONFIG = {
    # Tracklist media-link lookup
    "lookup_url": MEDIALINK_LOOKUP_URL,
    "lookup_workers": 0,
    "lookup_isolate_failures": True,
    "http_timeout": 30,

    # Browser (Playwright / Chromium)
    "browser_headless": False,
    "browser_executable_path": "",
    "browser_user_agent": "",
    "browser_timeout_ms": 0,

    # 1Password item holding the Spotify app + account secrets
    "onepassword_item": "spotify",
    "onepassword_client_id_label": "app-client-id",
    "onepassword_client_secret_label": "app-client-secret",

    # Spotify Web API (Authorization Code)
    # NOTE: Leave blank to read these from 1Password.
    "spotify_client_id": "",
    "spotify_client_secret": "",
    "spotify_username": "",
    "spotify_password": "",
    "spotify_redirect_uri": DEFAULT_REDIRECT_URI,
    "spotify_scopes": list(SPOTIFY_SCOPES),
    "spotify_show_dialog": True,
    "spotify_auto_refresh": True,
    "spotify_max_retries": 0,
    "auth_timeout": 0,

    # Playlist creation
    "playlist_public": True,
    "playlist_batch_size": 100,

    "log_level": "INFO",
}

# Validation rules for config fields
CONFIG_SCHEMA = {
    "lookup_url": {"type": str, "required": True},
    "lookup_workers": {"type": int, "required": False, "min": 0, "max": 256},
    "lookup_isolate_failures": {"type": bool, "required": False},
    "http_timeout": {"type": (int, float), "required": False, "min": 1, "max": 600},

    "browser_headless": {"type": bool, "required": False},
    "browser_executable_path": {"type": str, "required": False},
    "browser_user_agent": {"type": str, "required": False},
    "browser_timeout_ms": {"type": int, "required": False, "min": 0},

    "onepassword_item": {"type": str, "required": False},
    "onepassword_client_id_label": {"type": str, "required": False},
    "onepassword_client_secret_label": {"type": str, "required": False},

    "spotify_client_id": {"type": str, "required": False},
    "spotify_client_secret": {"type": str, "required": False},
    "spotify_username": {"type": str, "required": False},
    "spotify_password": {"type": str, "required": False},
    "spotify_redirect_uri": {"type": str, "required": True},
    "spotify_scopes": {"type": list, "required": False, "element_type": str},
    "spotify_show_dialog": {"type": bool, "required": False},
    "spotify_auto_refresh": {"type": bool, "required": False},
    "spotify_max_retries": {"type": int, "required": False, "min": 0, "max": 10},
    "auth_timeout": {"type": (int, float), "required": False, "min": 0},

    "playlist_public": {"type": bool, "required": False},
    "playlist_batch_size": {"type": int, "required": False, "min": 1, "max": 100},

    "log_level": {"type": str, "required": False, "choices": ["DEBUG", "INFO", "WARNING", "ERROR"]},
}


def load_config(path: str = CONFIG_PATH) -> Dict[str, Any]:
    """Load configuration from file, applying defaults for missing fields.

    A missing config file is not an error: every key falls back to its default.
    """
    config: Dict[str, Any] = {}
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            config = json.load(f)
        if not isinstance(config, dict):
            raise ValueError(f"Config file {path} must contain a JSON object.")

    # Apply defaults for missing fields
    for key, value in DEFAULT_CONFIG.items():
        if key not in config:
            config[key] = list(value) if isinstance(value, list) else value

    return config


def save_config(config: Dict[str, Any], path: str = CONFIG_PATH) -> bool:
    """Save configuration to file."""
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        return True
    except Exception as e:
        raise IOError(f"Failed to save config: {e}")


def validate_config(config: Dict[str, Any]) -> tuple[bool, list[str]]:
    """
    Validate configuration against schema.
    Returns (is_valid, list_of_errors).
    """
    errors = []

    for key, rules in CONFIG_SCHEMA.items():
        # Check required fields
        if rules.get("required", False) and key not in config:
            errors.append(f"Missing required field: {key}")
            continue

        if key not in config:
            continue

        value = config[key]

        # bool is an int subclass; don't let True pass as a number
        expected_type = rules.get("type")
        if isinstance(value, bool) and expected_type is not bool:
            errors.append(f"Field '{key}' must not be a boolean")
            continue

        # Type check
        if expected_type and not isinstance(value, expected_type):
            type_names = expected_type.__name__ if not isinstance(expected_type, tuple) else "/".join(t.__name__ for t in expected_type)
            errors.append(f"Field '{key}' must be {type_names}, got {type(value).__name__}")
            continue

        # List element type check (when schema uses: {"type": list, "element_type": ...})
        if isinstance(value, list) and "element_type" in rules:
            elem_type = rules["element_type"]
            bad_elems = [v for v in value if not isinstance(v, elem_type)]
            if bad_elems:
                errors.append(
                    f"Field '{key}' must be a list of {elem_type.__name__}, got invalid elements: {bad_elems}"
                )
                continue

        # Choices check
        if "choices" in rules and value not in rules["choices"]:
            errors.append(f"Field '{key}' must be one of {rules['choices']}, got '{value}'")

        # Range check for numeric values
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if "min" in rules and value < rules["min"]:
                errors.append(f"Field '{key}' must be >= {rules['min']}, got {value}")
            if "max" in rules and value > rules["max"]:
                errors.append(f"Field '{key}' must be <= {rules['max']}, got {value}")

    return len(errors) == 0, errors
