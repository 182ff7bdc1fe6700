# Command handlers behind the CLI subcommands
from commands.config_command import run_config
from commands.scrape_command import run_scrape
from commands.spotify_command import run_list_playlists, run_login

__all__ = [
    "run_config",
    "run_scrape",
    "run_login",
    "run_list_playlists",
]
