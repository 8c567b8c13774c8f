"""Fuzzy + recency ranking for try directories.

``score_entries`` is a pure function of the entry snapshot, the query, and the
caller-supplied clock value. It also hosts the query-to-directory-name transform.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from .entries import DirectoryEntry

FUZZY_WEIGHT = 0.7
TIME_WEIGHT = 0.3
DECAY_HOURS = 24.0

MATCH_POINTS = 20
RUN_BONUS_STEP = 4
RUN_BONUS_CAP = 16
GAP_PENALTY_STEP = 2
GAP_PENALTY_CAP = 40
BOUNDARY_BONUS = 35
LENGTH_PENALTY_DIVISOR = 5
BOUNDARY_CHARS = frozenset("/_- .")

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class RankedEntry:
    """A directory entry annotated with its ranking for the current query."""

    entry: DirectoryEntry
    score: float
    fuzzy_score: float
    time_score: float
    matched_positions: tuple[int, ...] = ()

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def path(self) -> Path:
        return self.entry.path

    @property
    def base_name(self) -> str:
        return self.entry.base_name


def recency_score(modified_at: float, now: float) -> float:
    """Exponential decay over hours since ``modified_at`` (1.0 now, ~0.37 after a day)."""
    hours = max(0.0, now - modified_at) / 3600.0
    return math.exp(-hours / DECAY_HOURS)


def _find(chars: Sequence[str], needle: str, start: int) -> int:
    for idx in range(start, len(chars)):
        if chars[idx] == needle:
            return idx
    return -1


def _match_from(query_chars: Sequence[str], chars: Sequence[str], anchor: int) -> tuple[int, list[int]] | None:
    """Greedy subsequence match with the first query char pinned to ``anchor``."""
    score = 0
    run = 0
    prev_idx = -1
    positions: list[int] = []
    for pos, needle in enumerate(query_chars):
        idx = anchor if pos == 0 else _find(chars, needle, prev_idx + 1)
        if idx < 0:
            return None
        if pos == 0:
            run = 1
            score += MATCH_POINTS + RUN_BONUS_STEP
        elif idx == prev_idx + 1:
            run += 1
            score += MATCH_POINTS + min(RUN_BONUS_CAP, run * RUN_BONUS_STEP)
        else:
            run = 0
            score -= min(GAP_PENALTY_CAP, (idx - prev_idx - 1) * GAP_PENALTY_STEP)
        if idx == 0 or chars[idx - 1] in BOUNDARY_CHARS:
            score += BOUNDARY_BONUS
        positions.append(idx)
        prev_idx = idx
    score -= len(chars) // LENGTH_PENALTY_DIVISOR
    return score, positions


def best_possible_score(query_length: int) -> int:
    """Raw score of a fully contiguous match starting on a word boundary."""
    if query_length <= 0:
        return 0
    total = BOUNDARY_BONUS
    for run in range(1, query_length + 1):
        total += MATCH_POINTS + min(RUN_BONUS_CAP, run * RUN_BONUS_STEP)
    return total


def fuzzy_match(query: str, candidate: str) -> tuple[float, tuple[int, ...]] | None:
    """Match ``query`` as a case-insensitive subsequence of ``candidate``.

    Returns ``(normalized_score, positions)`` or ``None`` when some query
    character cannot be placed. Every occurrence of the first query character
    is tried as an anchor and the best-scoring placement wins (earliest on
    ties). Every query character, spaces included, must appear literally.
    """
    query_chars = [ch.casefold() for ch in query]
    if not query_chars:
        return 1.0, ()
    chars = [ch.casefold() for ch in candidate]

    best: tuple[int, list[int]] | None = None
    for anchor, ch in enumerate(chars):
        if ch != query_chars[0]:
            continue
        matched = _match_from(query_chars, chars, anchor)
        if matched is None:
            # Later anchors leave even less room for the remaining characters.
            break
        if best is None or matched[0] > best[0]:
            best = matched
    if best is None:
        return None

    raw, positions = best
    normalized = raw / best_possible_score(len(query_chars))
    return max(0.0, min(1.0, normalized)), tuple(positions)


def score_entries(entries: Iterable[DirectoryEntry], query: str, now: float) -> list[RankedEntry]:
    """Rank ``entries`` for ``query`` at time ``now``, best first.

    A blank query ranks purely by recency. Otherwise non-matching entries are
    dropped and the rest are ranked by ``0.7 * fuzzy + 0.3 * recency``. The
    sort is stable, so ties keep input order.
    """
    needle = query.strip()
    ranked: list[RankedEntry] = []
    for entry in entries:
        time_score = recency_score(entry.modified_at, now)
        if not needle:
            ranked.append(RankedEntry(entry, time_score, 1.0, time_score))
            continue
        matched = fuzzy_match(needle, entry.name)
        if matched is None:
            continue
        fuzzy, positions = matched
        combined = FUZZY_WEIGHT * fuzzy + TIME_WEIGHT * time_score
        ranked.append(RankedEntry(entry, combined, fuzzy, time_score, positions))
    ranked.sort(key=lambda item: -item.score)
    return ranked


def normalize_name(text: str) -> str:
    """Kebab-case ``text``: lower-case, collapse non-alphanumerics to ``-``, trim hyphens."""
    return _NON_ALNUM_RE.sub("-", text.lower()).strip("-")


def today_prefix(today: date | None = None) -> str:
    return (today or date.today()).strftime("%Y-%m-%d")


def create_dir_name(query: str, today: date | None = None) -> str:
    """Build a date-prefixed directory name from free text.

    ``"My Cool Project!"`` becomes ``"YYYY-MM-DD-my-cool-project"``; text with
    no usable characters becomes the bare date.
    """
    normalized = normalize_name(query)
    prefix = today_prefix(today)
    return f"{prefix}-{normalized}" if normalized else prefix
