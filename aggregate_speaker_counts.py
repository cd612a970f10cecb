#!/usr/bin/env python3
import argparse
import csv
import json
import os
from collections import defaultdict
from typing import Dict, Tuple


def count_lines(seasons: Dict) -> Dict[Tuple[int, str, str], int]:
    counts: Dict[Tuple[int, str, str], int] = defaultdict(int)
    for season, episodes in seasons.items():
        for episode, lines in episodes.items():
            for obj in lines:
                character = (obj.get("character") or "").strip()
                if not character:
                    continue
                counts[(int(season), str(episode), character)] += 1
    return counts


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--transcripts", default="transcripts.json")
    ap.add_argument("--out", default="speaker_counts.csv")
    args = ap.parse_args()

    with open(args.transcripts, "r", encoding="utf-8") as f:
        seasons = json.load(f)

    counts = count_lines(seasons)

    os.makedirs(os.path.dirname(args.out) or ".", exist_ok=True)
    with open(args.out, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["season", "episode", "character", "line_count"])
        for (season, episode, character), cnt in sorted(counts.items()):
            w.writerow([season, episode, character, cnt])

    print(f"Wrote {args.out} ({len(counts)} rows)")


if __name__ == "__main__":
    main()
