from typing import Any, Dict

from config import DEFAULT_CONFIG, save_config, validate_config
from utils.logger import log_error, log_info, log_success

# Never echo these back to the terminal.
SECRET_KEYS = {"spotify_client_secret", "spotify_password"}


def view_config(config: Dict[str, Any]) -> None:
    """Display the current configuration in a readable format."""
    print("\n" + "=" * 50)
    print("📋 Current Configuration")
    print("=" * 50)
    for key in sorted(config):
        value = config[key]
        if key in SECRET_KEYS and value:
            value = "********"
        print(f"  {key}: {value}")
    print("=" * 50 + "\n")


def run_config(config: Dict[str, Any], path: str, *, init: bool = False) -> bool:
    """Validate (and optionally initialize) the config file. Returns validity."""
    if init:
        save_config(dict(DEFAULT_CONFIG), path)
        log_success(f"Wrote default configuration to {path}")
        config = dict(DEFAULT_CONFIG)

    view_config(config)

    is_valid, errors = validate_config(config)
    if is_valid:
        log_success("Configuration is valid! ✓")
    else:
        log_error("Configuration has errors:")
        for error in errors:
            log_info(f"  - {error}")
    return is_valid
