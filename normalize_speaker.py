#!/usr/bin/env python3
import csv
import os
import re
from typing import Dict, List

from resolve_speakers import FinalizedLine


class SpeakerNormalizer:
    """Map wiki spellings of a character onto one canonical name.

    The mapping CSV has a `canonical` column and an optional `aliases` column
    (separated by ; or ,). Lookups ignore case; unknown names pass through.
    """

    def __init__(self, mapping_path: str):
        self.alias_to_canonical: Dict[str, str] = {}
        self._load(mapping_path)

    def _load(self, path: str) -> None:
        if not os.path.isfile(path):
            return
        with open(path, "r", encoding="utf-8") as f:
            rdr = csv.DictReader(f)
            for r in rdr:
                canonical = (r.get("canonical") or "").strip()
                if not canonical:
                    continue
                self.alias_to_canonical[canonical.upper()] = canonical
                aliases = (r.get("aliases") or "").strip()
                if aliases:
                    for a in re.split(r"[;,]\s*", aliases):
                        a = a.strip().upper()
                        if a:
                            self.alias_to_canonical[a] = canonical

    def normalize(self, raw: str) -> str:
        key = (raw or "").strip().upper()
        if not key:
            return ""
        return self.alias_to_canonical.get(key, raw.strip())

    def apply(self, lines: List[FinalizedLine]) -> List[FinalizedLine]:
        return [FinalizedLine(self.normalize(ln.character), ln.text) for ln in lines]
