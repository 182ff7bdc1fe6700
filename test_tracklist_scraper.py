import os
import unittest
from unittest import mock

# Ensure local imports work when running this file directly.
THIS_DIR = os.path.dirname(os.path.abspath(__file__))
if THIS_DIR not in os.sys.path:
    os.sys.path.insert(0, THIS_DIR)

from scraper.models import ScrapedTrack
from scraper.tracklist import (
    extract_tracks,
    find_title_element,
    scrape_tracklist,
    source_track_id_from_handler,
)


def _row(title: str, track_id: str) -> str:
    return f"""
    <div class="tlpItem">
      <div class="bItm">
        <span class="trackValue">  {title}  </span>
        <div class="mediaRow">
          <span class="mAction" onclick="loadMedia(this, 'track', {track_id}, 'spotify');">
            <i class="fa fa-spotify"></i>
          </span>
        </div>
      </div>
    </div>
    """


TRACKLIST_HTML = f"""
<html><head><title>DJ Set @ Somewhere 2024</title></head>
<body>
  <div id="tlTab">
    {_row("Artist A - Track One", "1111")}
    {_row("Artist B - Track Two", "2222")}
    {_row("Artist C - Track Three", "3333")}
  </div>
</body></html>
"""


class FakeNode:
    """Minimal tree node: a parent pointer and canned `select` results."""

    def __init__(self, parent=None, matches=None):
        self.parent = parent
        self._matches = list(matches or [])

    def select(self, selector):
        return list(self._matches)


class TestFindTitleElement(unittest.TestCase):
    def test_returns_single_match_at_nearest_level(self):
        root = FakeNode(matches=["a", "b"])
        row = FakeNode(parent=root, matches=["title"])
        icon = FakeNode(parent=row)
        self.assertEqual(find_title_element(icon), "title")

    def test_ambiguous_level_is_skipped(self):
        root = FakeNode(matches=["only"])
        container = FakeNode(parent=root, matches=["a", "b"])
        icon = FakeNode(parent=container)
        # the container is ambiguous, so the walk moves on to the root
        self.assertEqual(find_title_element(icon), "only")

    def test_none_when_root_reached_without_isolating_one(self):
        root = FakeNode(matches=["a", "b"])
        icon = FakeNode(parent=FakeNode(parent=root))
        self.assertIsNone(find_title_element(icon))


class TestSourceTrackId(unittest.TestCase):
    def test_first_digit_run_wins(self):
        self.assertEqual(source_track_id_from_handler("loadMedia(this, 'track', 12345, 67);"), "12345")

    def test_handler_without_digits(self):
        self.assertIsNone(source_track_id_from_handler("openPlayer(this);"))
        self.assertIsNone(source_track_id_from_handler(None))


class TestExtractTracks(unittest.TestCase):
    def test_returns_one_entry_per_icon_in_document_order(self):
        tracks = extract_tracks(TRACKLIST_HTML)
        self.assertEqual(
            tracks,
            [
                ScrapedTrack(source_track_id="1111", title="Artist A - Track One"),
                ScrapedTrack(source_track_id="2222", title="Artist B - Track Two"),
                ScrapedTrack(source_track_id="3333", title="Artist C - Track Three"),
            ],
        )

    def test_duplicates_are_kept(self):
        html = f"<html><body>{_row('Same', '42')}{_row('Same', '42')}</body></html>"
        tracks = extract_tracks(html)
        self.assertEqual([t.source_track_id for t in tracks], ["42", "42"])

    def test_icons_without_digit_handler_are_skipped(self):
        html = f"""
        <html><body>
          {_row("Kept", "7")}
          <div class="bItm">
            <span class="trackValue">No digits</span>
            <span onclick="openPlayer(this);"><i class="fa fa-spotify"></i></span>
          </div>
          <div class="bItm">
            <span class="trackValue">No handler</span>
            <span><i class="fa fa-spotify"></i></span>
          </div>
        </body></html>
        """
        tracks = extract_tracks(html)
        self.assertEqual(tracks, [ScrapedTrack(source_track_id="7", title="Kept")])

    def test_title_is_none_when_never_isolated(self):
        html = f"""
        <html><body>
          <div id="tlTab">
            {_row("One", "1")}
            {_row("Two", "2")}
            <span onclick="loadMedia(this, 'track', 99);"><i class="fa fa-spotify"></i></span>
          </div>
        </body></html>
        """
        tracks = extract_tracks(html)
        self.assertEqual(len(tracks), 3)
        self.assertEqual(tracks[2].source_track_id, "99")
        self.assertIsNone(tracks[2].title)

    def test_icon_carrying_its_own_handler(self):
        html = """
        <div class="bItm"><span class="trackValue">Inline</span>
          <i class="fa fa-spotify" onclick="loadMedia(this, 5150);"></i>
        </div>
        """
        self.assertEqual(extract_tracks(html), [ScrapedTrack(source_track_id="5150", title="Inline")])

    def test_title_split_across_inline_tags(self):
        html = """
        <div class="bItm"><span class="trackValue">Art<b>ist</b> -
            Ti<i>tle</i></span>
          <i class="fa fa-spotify" onclick="loadMedia(this, 77);"></i>
        </div>
        """
        self.assertEqual(extract_tracks(html), [ScrapedTrack(source_track_id="77", title="Artist - Title")])

    def test_extraction_error_yields_empty_result(self):
        with mock.patch("scraper.tracklist.BeautifulSoup", side_effect=RuntimeError("boom")):
            self.assertEqual(extract_tracks(TRACKLIST_HTML), [])

    def test_page_without_markers(self):
        self.assertEqual(extract_tracks("<html><body><p>nothing here</p></body></html>"), [])


class FakePage:
    def __init__(self, html: str, title: str):
        self._html = html
        self._title = title
        self.visited = []

    def goto(self, url):
        self.visited.append(url)

    def title(self):
        return self._title

    def content(self):
        return self._html


class TestScrapeTracklist(unittest.TestCase):
    def test_navigates_and_returns_title_and_tracks(self):
        page = FakePage(TRACKLIST_HTML, "DJ Set @ Somewhere 2024")
        title, tracks = scrape_tracklist(page, "https://www.1001tracklists.com/tracklist/abc/set.html")

        self.assertEqual(page.visited, ["https://www.1001tracklists.com/tracklist/abc/set.html"])
        self.assertEqual(title, "DJ Set @ Somewhere 2024")
        self.assertEqual([t.source_track_id for t in tracks], ["1111", "2222", "3333"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
