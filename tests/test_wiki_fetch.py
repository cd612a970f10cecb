import pytest
import requests

import wiki_fetch
from wiki_fetch import (
    Episode,
    EpisodeNumberError,
    episode_page_url,
    parse_episode_number,
    parse_season_index,
    season_index_url,
    transcript_url,
)

BASE = "https://mlp.example.org"

SEASON_INDEX = """
<div class="category-page__members">
  <a href="/wiki/Transcripts/Friendship_is_Magic,_part_1">Transcripts/Friendship is Magic, part 1</a>
  <a href="/wiki/Transcripts/Applebuck_Season">Transcripts/Applebuck Season</a>
  <a href="/wiki/Applejack">Applejack</a>
  <a href="/wiki/Transcripts/Hidden"><img src="x.png"/>Transcripts/Hidden</a>
  <a>Transcripts/No link</a>
</div>
"""


class FakeResponse:
    def __init__(self, text: str, status: int = 200):
        self.text = text
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class TestParseSeasonIndex:
    def test_transcript_links_only(self):
        episodes = parse_season_index(SEASON_INDEX)
        assert episodes == [
            Episode("Friendship is Magic, part 1", "/wiki/Transcripts/Friendship_is_Magic,_part_1"),
            Episode("Applebuck Season", "/wiki/Transcripts/Applebuck_Season"),
        ]

    def test_empty_page(self):
        assert parse_season_index("") == []


class TestParseEpisodeNumber:
    def test_number_after_label(self):
        markup = "<table><tr><th>Season episode №:</th><td>12</td></tr></table>"
        assert parse_episode_number(markup) == 12

    def test_number_is_trimmed(self):
        markup = "<table><tr><th> Season episode №: </th><td>\n 4\t</td></tr></table>"
        assert parse_episode_number(markup) == 4

    def test_not_a_number(self):
        markup = "<table><tr><th>Season episode №:</th><td>twelve</td></tr></table>"
        with pytest.raises(EpisodeNumberError, match="Bad episode number"):
            parse_episode_number(markup, "Boast Busters")

    def test_label_missing(self):
        with pytest.raises(EpisodeNumberError, match="Could not find"):
            parse_episode_number("<p>Nothing</p>", "Boast Busters")


class TestUrls:
    def test_season_index_url(self):
        assert season_index_url(3, BASE) == f"{BASE}/wiki/Category:Season_3_transcripts"

    def test_transcript_url_relative(self):
        ep = Episode("Applebuck Season", "/wiki/Transcripts/Applebuck_Season")
        assert transcript_url(ep, BASE) == f"{BASE}/wiki/Transcripts/Applebuck_Season"

    def test_transcript_url_absolute(self):
        ep = Episode("Applebuck Season", "https://other.example.org/wiki/Transcripts/Applebuck_Season")
        assert transcript_url(ep, BASE) == ep.url

    def test_episode_page_url(self):
        ep = Episode("Applebuck Season", "/wiki/Transcripts/Applebuck_Season")
        assert episode_page_url(ep, BASE) == f"{BASE}/wiki/Applebuck_Season"

    def test_episode_page_url_from_absolute_href(self):
        ep = Episode("Applebuck Season", "https://mlp.fandom.com/wiki/Transcripts/Applebuck_Season")
        assert episode_page_url(ep, BASE) == f"{BASE}/wiki/Applebuck_Season"

    def test_episode_page_url_rejects_other_links(self):
        with pytest.raises(EpisodeNumberError):
            episode_page_url(Episode("Applejack", "/wiki/Applejack"), BASE)


class TestFetching:
    def test_fetch_text_returns_body(self, monkeypatch):
        calls = []

        def fake_get(url, timeout):
            calls.append((url, timeout))
            return FakeResponse("<p>ok</p>")

        monkeypatch.setattr(wiki_fetch.SESSION, "get", fake_get)
        assert wiki_fetch.fetch_text("https://x", timeout=5) == "<p>ok</p>"
        assert calls == [("https://x", 5)]

    def test_fetch_text_raises_on_http_error(self, monkeypatch):
        monkeypatch.setattr(wiki_fetch.SESSION, "get", lambda url, timeout: FakeResponse("", 404))
        with pytest.raises(requests.HTTPError):
            wiki_fetch.fetch_text("https://x")

    def test_list_episodes(self, monkeypatch):
        monkeypatch.setattr(wiki_fetch, "fetch_text", lambda url: SEASON_INDEX)
        assert len(wiki_fetch.list_episodes(1)) == 2

    def test_fetch_episode_number(self, monkeypatch):
        seen = []

        def fake_fetch(url):
            seen.append(url)
            return "<th>Season episode №:</th><td>7</td>"

        monkeypatch.setattr(wiki_fetch, "fetch_text", fake_fetch)
        ep = Episode("Dragonshy", "/wiki/Transcripts/Dragonshy")
        assert wiki_fetch.fetch_episode_number(ep) == 7
        assert seen[0].endswith("/wiki/Dragonshy")
