"""
Fuzzy string matching for TaskFlow

Scores how well a short search string matches a candidate such as a
project name. Scores run from 0 (no match) to 100 (case-insensitive
equality).
"""

from dataclasses import dataclass
from typing import List

from rapidfuzz import fuzz, process

MAX_SCORE = 100


@dataclass
class MatchResult:
    """A candidate that met the threshold, with its position in the input."""

    text: str
    score: int
    index: int


def match(query: str, candidate: str) -> int:
    """
    Score how well ``query`` matches ``candidate``.

    Matching is case-insensitive and based on ``fuzz.ratio``. Equality
    scores 100; every other match is capped at 99 so an exact name always
    outranks names that merely start with it. A candidate that starts with
    the query gets half of its remaining distance to 100, so prefixes
    outrank scattered matches of the same length.

    Args:
        query: Search string typed by the user
        candidate: String to score against

    Returns:
        Integer score between 0 and 100
    """
    if not query or not candidate:
        return 0

    pattern = query.lower()
    text = candidate.lower()

    if pattern == text:
        return MAX_SCORE

    score = fuzz.ratio(pattern, text)
    if text.startswith(pattern):
        score += (MAX_SCORE - score) / 2

    return max(0, min(MAX_SCORE - 1, round(score)))


def _scorer(query: str, candidate: str, **kwargs) -> int:
    return match(query, candidate)


def match_many(query: str, candidates: List[str], threshold: int) -> List[MatchResult]:
    """
    Score every candidate and keep those at or above ``threshold``.

    Returns:
        Matches sorted by score descending; equal scores keep input order
    """
    found = process.extract(
        query, candidates, scorer=_scorer, processor=None, limit=None, score_cutoff=threshold
    )

    results = [MatchResult(text=text, score=int(score), index=index) for text, score, index in found]
    results.sort(key=lambda result: (-result.score, result.index))
    return results
