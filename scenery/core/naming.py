# scenery/core/naming.py
"""
Name-matching policy for scanned variations.

Files next to the default image whose name contains the default image's stem
are variations of it: for "room.png", "room-night.png" becomes a variation
named "night".
"""
from __future__ import annotations

import logging
import re
from pathlib import PurePosixPath
from typing import Iterable, List

from scenery.core.models import Variation

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[-_]")


def file_stem(path: str) -> str:
    """Filename without directory and last extension ("a/b.c.png" -> "b.c")."""
    return PurePosixPath(path.replace("\\", "/")).stem


def derive_variation_name(stem: str, candidate_stem: str) -> str:
    # only the first occurrence of the stem is removed
    name = candidate_stem.replace(stem, "", 1)
    return _SEPARATORS.sub(" ", name).strip()


def is_candidate(base_path: str, stem: str, path: str) -> bool:
    return bool(stem) and path != base_path and stem in file_stem(path)


def match_variations(base_path: str, siblings: Iterable[str]) -> List[Variation]:
    """
    Candidates among `siblings`, kept in listing order.
    """
    stem = file_stem(base_path)
    if not stem:
        logger.debug("match_variations: no stem in %r", base_path)
        return []
    return [
        Variation(name=derive_variation_name(stem, file_stem(p)), file=p)
        for p in siblings
        if is_candidate(base_path, stem, p)
    ]
