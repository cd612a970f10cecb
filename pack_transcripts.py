#!/usr/bin/env python3
"""
Pack wiki episode transcripts into one JSON document.

For each season in the requested range, list the transcript pages from the
season category, extract and attribute every line, and write:

  {"<season>": {"<episode name or number>": [{"character": ..., "text": ...}, ...]}}

Usage: pack_transcripts.py [--indexed] [max] | [min max]
With no bounds seasons 1-7 are packed.
"""

import argparse
import concurrent.futures as cf
import json
import logging
import os
import sys
from typing import Dict, List, Optional, Tuple

import requests

import packer_config
import wiki_fetch
from extract_lines import TranscriptParseError, extract_transcript
from markup_tokens import TokenStream
from normalize_speaker import SpeakerNormalizer
from resolve_speakers import FinalizedLine, resolve_lines

logger = logging.getLogger(__name__)

Season = Dict[str, List[Dict[str, str]]]


def parse_transcript(markup) -> List[FinalizedLine]:
    """Extract and attribute every line of one transcript page."""
    return resolve_lines(extract_transcript(TokenStream.from_markup(markup)))


def pack_episode(
    episode: wiki_fetch.Episode,
    indexed: bool = False,
    normalizer: Optional[SpeakerNormalizer] = None,
) -> Optional[Tuple[str, List[FinalizedLine]]]:
    """Return (key, lines) for one episode, or None if it has to be skipped."""
    key = episode.name
    if indexed:
        try:
            key = str(wiki_fetch.fetch_episode_number(episode))
        except (wiki_fetch.EpisodeNumberError, requests.RequestException) as ex:
            logger.error("Skipping %s: %s", episode.name, ex)
            return None

    try:
        lines = parse_transcript(wiki_fetch.fetch_transcript(episode))
    except requests.RequestException as ex:
        logger.error("Error downloading transcript for %s: %s", episode.name, ex)
        return key, []
    except TranscriptParseError as ex:
        logger.error("Discarding transcript for %s: %s", episode.name, ex)
        return key, []

    if normalizer is not None:
        lines = normalizer.apply(lines)
    return key, lines


def pack_season(
    season: int,
    indexed: bool = False,
    max_workers: int = 1,
    normalizer: Optional[SpeakerNormalizer] = None,
) -> Season:
    logger.info("Processing season %d", season)
    try:
        episodes = wiki_fetch.list_episodes(season)
    except requests.RequestException as ex:
        logger.error("Error downloading episode list for season %d: %s", season, ex)
        return {}

    def work(episode: wiki_fetch.Episode):
        logger.info("Processing %d: %s", season, episode.name)
        return pack_episode(episode, indexed, normalizer)

    if max_workers > 1:
        with cf.ThreadPoolExecutor(max_workers=max_workers) as ex:
            results = list(ex.map(work, episodes))
    else:
        results = [work(ep) for ep in episodes]

    packed: Season = {}
    for result in results:
        if result is None:
            continue
        key, lines = result
        packed[key] = [ln.to_dict() for ln in lines]
    return packed


def pack_seasons(
    min_season: int,
    max_season: int,
    indexed: bool = False,
    max_workers: int = 1,
    normalizer: Optional[SpeakerNormalizer] = None,
) -> Dict[int, Season]:
    return {
        s: pack_season(s, indexed, max_workers, normalizer)
        for s in range(min_season, max_season + 1)
    }


def write_json(seasons: Dict[int, Season], out_path: str) -> None:
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(seasons, f, ensure_ascii=False)


def season_bounds(values: List[int]) -> Tuple[int, int]:
    """No bounds -> defaults, one -> max, two -> min and max."""
    if not values:
        return packer_config.DEFAULT_MIN_SEASON, packer_config.DEFAULT_MAX_SEASON
    if len(values) == 1:
        return packer_config.DEFAULT_MIN_SEASON, values[0]
    return values[0], values[1]


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Pack wiki transcripts into JSON.")
    ap.add_argument("bounds", nargs="*", type=int, metavar="SEASON", help="[max] or [min max]")
    ap.add_argument("--indexed", action="store_true", help="index episodes by number instead of by name")
    ap.add_argument("--out", default=packer_config.DEFAULT_OUT)
    ap.add_argument("--max-workers", type=int, default=1, help="episodes fetched in parallel per season")
    ap.add_argument("--speaker-map", help="CSV of canonical speaker names and aliases")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    if len(args.bounds) > 2:
        ap.error("expected at most two season bounds")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    normalizer = None
    if args.speaker_map:
        if not os.path.isfile(args.speaker_map):
            ap.error(f"speaker map not found: {args.speaker_map}")
        normalizer = SpeakerNormalizer(args.speaker_map)

    min_season, max_season = season_bounds(args.bounds)
    seasons = pack_seasons(min_season, max_season, args.indexed, args.max_workers, normalizer)

    try:
        write_json(seasons, args.out)
    except OSError as ex:
        logger.error("Error writing JSON: %s", ex)
        return 1

    logger.info("Wrote %s (%d seasons)", args.out, len(seasons))
    return 0


if __name__ == "__main__":
    sys.exit(main())
