import json
import os
import tempfile
import unittest
from unittest import mock

# Ensure local imports work when running this file directly.
THIS_DIR = os.path.dirname(os.path.abspath(__file__))
if THIS_DIR not in os.sys.path:
    os.sys.path.insert(0, THIS_DIR)

import main
from commands import scrape_command, spotify_command
from config import DEFAULT_CONFIG, load_config, validate_config
from scraper.models import ResolvedTrack, ScrapedTrack


class TestConfig(unittest.TestCase):
    def test_defaults_are_valid(self):
        ok, errors = validate_config(dict(DEFAULT_CONFIG))
        self.assertTrue(ok, errors)

    def test_missing_file_means_defaults(self):
        with tempfile.TemporaryDirectory() as td:
            config = load_config(os.path.join(td, "config.json"))
        self.assertEqual(config["spotify_redirect_uri"], "http://127.0.0.1:49494/callback")
        self.assertEqual(config["playlist_batch_size"], 100)

    def test_file_values_override_defaults(self):
        with tempfile.TemporaryDirectory() as td:
            path = os.path.join(td, "config.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"browser_headless": True, "lookup_workers": 8}, f)
            config = load_config(path)
        self.assertTrue(config["browser_headless"])
        self.assertEqual(config["lookup_workers"], 8)
        self.assertEqual(config["onepassword_item"], "spotify")

    def test_validation_errors(self):
        config = dict(DEFAULT_CONFIG)
        config.update(
            {
                "playlist_batch_size": 250,
                "spotify_scopes": ["playlist-modify-public", 3],
                "log_level": "LOUD",
                "lookup_workers": True,
            }
        )
        ok, errors = validate_config(config)
        self.assertFalse(ok)
        joined = "\n".join(errors)
        self.assertIn("playlist_batch_size", joined)
        self.assertIn("spotify_scopes", joined)
        self.assertIn("log_level", joined)
        self.assertIn("lookup_workers", joined)


class TestCli(unittest.TestCase):
    def test_config_init_writes_defaults(self):
        with tempfile.TemporaryDirectory() as td:
            path = os.path.join(td, "config.json")
            self.assertEqual(main.main(["--config", path, "config", "--init"]), 0)
            with open(path, "r", encoding="utf-8") as f:
                self.assertEqual(json.load(f)["lookup_isolate_failures"], True)

    def test_invalid_json_config_fails(self):
        with tempfile.TemporaryDirectory() as td:
            path = os.path.join(td, "config.json")
            with open(path, "w", encoding="utf-8") as f:
                f.write("{not json")
            self.assertEqual(main.main(["--config", path, "config"]), 1)

    def test_command_errors_give_exit_status_1(self):
        with tempfile.TemporaryDirectory() as td:
            with mock.patch("commands.run_scrape", side_effect=RuntimeError("boom")):
                code = main.main(["--config", os.path.join(td, "config.json"), "scrape", "https://example.test/set"])
        self.assertEqual(code, 1)

    def test_config_option_after_subcommand(self):
        with tempfile.TemporaryDirectory() as td:
            path = os.path.join(td, "custom.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"playlist_public": False}, f)
            with mock.patch("commands.run_scrape") as run_scrape:
                code = main.main(["scrape", "https://x.test/set", "--config", path, "--name", "Mine"])

        self.assertEqual(code, 0)
        config, url = run_scrape.call_args[0]
        self.assertEqual(url, "https://x.test/set")
        self.assertFalse(config["playlist_public"])
        self.assertEqual(run_scrape.call_args[1]["playlist_name"], "Mine")

    def test_config_option_position_defaults(self):
        parser = main.build_parser()
        self.assertEqual(parser.parse_args(["login"]).config, "config.json")
        self.assertEqual(parser.parse_args(["--config", "a.json", "login"]).config, "a.json")
        self.assertEqual(parser.parse_args(["login", "--config", "b.json"]).config, "b.json")


class TestRunScrape(unittest.TestCase):
    def setUp(self):
        self.order = []
        self.page = mock.MagicMock(name="page")
        self.client = mock.MagicMock(name="client")
        self.client.__enter__.return_value = self.client
        self.resolved = [
            ResolvedTrack(source_track_id="1", title="One", resolved_id="a"),
            ResolvedTrack(source_track_id="2", title="Two"),
        ]

        browser_cm = mock.MagicMock()
        browser_cm.__enter__.return_value = self.page

        patches = {
            "load_spotify_credentials": mock.Mock(side_effect=lambda cfg: self.order.append("credentials") or mock.Mock(username="dj")),
            "open_browser": mock.Mock(side_effect=lambda cfg: self.order.append("browser") or browser_cm),
            "scrape_tracklist": mock.Mock(return_value=("Page Title", [ScrapedTrack("1", "One"), ScrapedTrack("2", "Two")])),
            "resolve_tracks": mock.Mock(return_value=self.resolved),
            "get_spotify_client": mock.Mock(return_value=self.client),
            "create_playlist_from_tracks": mock.Mock(
                return_value={"id": "pl1", "uri": "spotify:playlist:pl1", "name": "Page Title", "added": 1, "batches": 1}
            ),
        }
        self.mocks = {}
        for name, value in patches.items():
            patcher = mock.patch.object(scrape_command, name, value)
            self.mocks[name] = patcher.start()
            self.addCleanup(patcher.stop)

    def test_pipeline_wiring(self):
        config = dict(DEFAULT_CONFIG)
        summary = scrape_command.run_scrape(config, "https://www.1001tracklists.com/tracklist/x.html")

        self.assertEqual(self.order, ["credentials", "browser"])
        self.mocks["scrape_tracklist"].assert_called_once_with(self.page, "https://www.1001tracklists.com/tracklist/x.html")
        self.mocks["get_spotify_client"].assert_called_once()
        self.assertIs(self.mocks["get_spotify_client"].call_args[0][0], self.page)

        args, kwargs = self.mocks["create_playlist_from_tracks"].call_args
        self.assertEqual(args, (self.client, "Page Title", self.resolved))
        self.assertTrue(kwargs["public"])
        self.assertEqual(kwargs["batch_size"], 100)
        self.assertEqual(summary["uri"], "spotify:playlist:pl1")

    def test_name_override_and_json_output(self):
        with tempfile.TemporaryDirectory() as td:
            out = os.path.join(td, "out", "tracks.json")
            scrape_command.run_scrape(dict(DEFAULT_CONFIG), "https://x.test/set", playlist_name="Custom", save_json=out)
            with open(out, "r", encoding="utf-8") as f:
                saved = json.load(f)

        self.assertEqual(self.mocks["create_playlist_from_tracks"].call_args[0][1], "Custom")
        self.assertEqual(saved[0], {"title": "One", "source_track_id": "1", "resolved_id": "a"})
        self.assertIsNone(saved[1]["resolved_id"])

    def test_prompts_for_url_when_missing(self):
        with mock.patch.object(scrape_command.questionary, "text") as text:
            text.return_value.ask.return_value = ""
            self.assertIsNone(scrape_command.run_scrape(dict(DEFAULT_CONFIG)))
        self.assertEqual(self.order, [])

    def test_credential_failure_stops_before_browser(self):
        self.mocks["load_spotify_credentials"].side_effect = RuntimeError("no secret")
        with self.assertRaises(RuntimeError):
            scrape_command.run_scrape(dict(DEFAULT_CONFIG), "https://x.test/set")
        self.mocks["open_browser"].assert_not_called()


class TestSpotifyCommands(unittest.TestCase):
    def setUp(self):
        self.client = mock.MagicMock(name="client")
        self.client.__enter__.return_value = self.client
        browser_cm = mock.MagicMock()
        browser_cm.__enter__.return_value = mock.MagicMock(name="page")

        for name, value in {
            "load_spotify_credentials": mock.Mock(return_value=mock.Mock(username="dj")),
            "open_browser": mock.Mock(return_value=browser_cm),
            "get_spotify_client": mock.Mock(return_value=self.client),
        }.items():
            patcher = mock.patch.object(spotify_command, name, value)
            patcher.start()
            self.addCleanup(patcher.stop)

    def test_login_reports_user(self):
        self.client.me.return_value = {"id": "dj", "display_name": "DJ Example"}
        with mock.patch.object(spotify_command, "log_success") as log_success:
            me = spotify_command.run_login(dict(DEFAULT_CONFIG))
        self.assertEqual(me["display_name"], "DJ Example")
        log_success.assert_called_once_with("Signed in as: DJ Example")
        self.client.__exit__.assert_called_once()

    def test_list_playlists(self):
        self.client.get_user_playlists.return_value = [{"name": "Set", "uri": "spotify:playlist:1"}]
        with mock.patch.object(spotify_command, "log_info") as log_info:
            playlists = spotify_command.run_list_playlists(dict(DEFAULT_CONFIG))
        self.assertEqual(len(playlists), 1)
        log_info.assert_any_call("[Set] spotify:playlist:1")


if __name__ == "__main__":
    unittest.main(verbosity=2)
