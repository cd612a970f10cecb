"""Fetch season indexes, episode numbers and transcript pages from the wiki."""

import urllib.parse
from dataclasses import dataclass
from typing import List

import requests
from bs4 import BeautifulSoup
from bs4.element import NavigableString

import packer_config
from markup_tokens import TokenKind, iter_tokens

SESSION = requests.Session()
SESSION.headers.update({"User-Agent": packer_config.USER_AGENT})

TRANSCRIPT_LINK_PREFIX = "Transcripts/"
TRANSCRIPT_PATH_PREFIX = "/wiki/Transcripts"
EPISODE_NUMBER_LABEL = "Season episode №:"


class EpisodeNumberError(Exception):
    pass


@dataclass
class Episode:
    name: str
    url: str  # href from the season index, usually /wiki/Transcripts/<title>


def fetch_text(url: str, timeout: float = packer_config.REQUEST_TIMEOUT) -> str:
    r = SESSION.get(url, timeout=timeout)
    r.raise_for_status()
    return r.text


def season_index_url(season: int, base_url: str = packer_config.BASE_URL) -> str:
    return f"{base_url}/wiki/Category:Season_{season}_transcripts"


def transcript_url(episode: Episode, base_url: str = packer_config.BASE_URL) -> str:
    return urllib.parse.urljoin(base_url, episode.url)


def episode_page_url(episode: Episode, base_url: str = packer_config.BASE_URL) -> str:
    """The episode's own article, which carries the infobox with its number."""
    path = urllib.parse.urlsplit(episode.url).path
    if not path.startswith(TRANSCRIPT_PATH_PREFIX):
        raise EpisodeNumberError(f"Not a transcript link for {episode.name}: {episode.url}")
    return f"{base_url}/wiki{path[len(TRANSCRIPT_PATH_PREFIX):]}"


def parse_season_index(markup) -> List[Episode]:
    """Every link whose text starts with "Transcripts/" is one episode."""
    soup = BeautifulSoup(markup, "html.parser")
    episodes: List[Episode] = []
    for a in soup.find_all("a"):
        first = a.contents[0] if a.contents else None
        if not isinstance(first, NavigableString):
            continue
        label = str(first)
        href = a.get("href")
        if not label.startswith(TRANSCRIPT_LINK_PREFIX) or not href:
            continue
        episodes.append(Episode(name=label[len(TRANSCRIPT_LINK_PREFIX):], url=href))
    return episodes


def parse_episode_number(markup, episode_name: str = "") -> int:
    """Read the number from the text node right after the infobox label."""
    found = False
    for token in iter_tokens(markup):
        if token.kind is not TokenKind.TEXT:
            continue
        if found:
            value = token.data.strip(" \n\r\t\v")
            try:
                return int(value)
            except ValueError as ex:
                raise EpisodeNumberError(f"Bad episode number {value!r} for {episode_name}") from ex
        found = token.data.strip() == EPISODE_NUMBER_LABEL
    raise EpisodeNumberError(f"Could not find episode number for {episode_name}")


def list_episodes(season: int) -> List[Episode]:
    return parse_season_index(fetch_text(season_index_url(season)))


def fetch_episode_number(episode: Episode) -> int:
    return parse_episode_number(fetch_text(episode_page_url(episode)), episode.name)


def fetch_transcript(episode: Episode) -> str:
    return fetch_text(transcript_url(episode))
