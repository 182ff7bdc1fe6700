import argparse
import json
import sys
from typing import List, Optional

from config import CONFIG_PATH, load_config
from utils.logger import setup_logging, log_error


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tracklist2spotify",
        description="Turn a 1001tracklists page into a Spotify playlist.",
    )
    config_help = f"path to the config file (default: {CONFIG_PATH})"
    parser.add_argument("--config", default=CONFIG_PATH, help=config_help)

    # Lets --config follow the subcommand too; SUPPRESS keeps a top-level value.
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=argparse.SUPPRESS, help=config_help)

    sub = parser.add_subparsers(dest="command", required=True)

    scrape = sub.add_parser("scrape", parents=[common], help="scrape 1001tracklists and create a playlist")
    scrape.add_argument("url", nargs="?", help="tracklist page URL (prompted for when omitted)")
    scrape.add_argument("--name", help="playlist name (default: the page title)")
    scrape.add_argument("--save-json", metavar="PATH", help="also write the resolved tracks to PATH")

    sub.add_parser("login", parents=[common], help="log in to Spotify and show the signed-in user")
    sub.add_parser("playlists", parents=[common], help="list the signed-in user's playlists")

    cfg = sub.add_parser("config", parents=[common], help="validate and show the configuration")
    cfg.add_argument("--init", action="store_true", help="write the default configuration file")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except json.JSONDecodeError as e:
        setup_logging()
        log_error(f"Config file contains invalid JSON: {e}")
        return 1
    except Exception as e:
        setup_logging()
        log_error(f"Error loading config: {e}")
        return 1

    setup_logging(config.get("log_level", "INFO"))

    from commands import run_config, run_list_playlists, run_login, run_scrape

    try:
        if args.command == "scrape":
            run_scrape(config, args.url, playlist_name=args.name, save_json=args.save_json)
        elif args.command == "login":
            run_login(config)
        elif args.command == "playlists":
            run_list_playlists(config)
        elif args.command == "config":
            return 0 if run_config(config, args.config, init=args.init) else 1
    except KeyboardInterrupt:
        log_error("Interrupted.")
        return 130
    except Exception as e:
        log_error(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
