"""
Fuzzy name search over a planning tree.
"""

from dataclasses import dataclass
from typing import List

from fddtree.constants import (
    SEARCH_CONTAINS_SCORE,
    SEARCH_EXACT_SCORE,
    SEARCH_FUZZY_THRESHOLD,
    SEARCH_FUZZY_WEIGHT,
    SEARCH_PREFIX_SCORE,
)
from fddtree.models.base import BaseNode


@dataclass
class SearchMatch:
    """A node matching a query, with its relevance score in (0, 1]."""
    node: BaseNode
    score: float

    @property
    def name(self) -> str:
        return self.node.name


def sequence_score(text: str, query: str) -> float:
    """Score how much of query appears in text as an ordered subsequence.

    The ratio of matched query characters is scaled down for texts longer
    than the query.
    """
    if not text or not query:
        return 0.0
    matched = 0
    for char in text:
        if matched < len(query) and char == query[matched]:
            matched += 1
    ratio = matched / len(query)
    length_factor = min(1.0, len(query) / len(text))
    return ratio * length_factor


def fuzzy_score(name: str, query: str) -> float:
    """Score a node name against a query (case-insensitive).

    Exact 1.0, prefix 0.9, substring 0.7, otherwise a weighted
    subsequence score, or 0 when that is too weak.
    """
    name = name.lower()
    query = query.lower()
    if name == query:
        return SEARCH_EXACT_SCORE
    if name.startswith(query):
        return SEARCH_PREFIX_SCORE
    if query in name:
        return SEARCH_CONTAINS_SCORE
    score = sequence_score(name, query)
    return score * SEARCH_FUZZY_WEIGHT if score > SEARCH_FUZZY_THRESHOLD else 0.0


def search(root: BaseNode, query: str) -> List[SearchMatch]:
    """Find nodes below and including root whose names match query.

    Returns:
        Matches sorted by descending score; ties keep tree order.
    """
    if not query or not query.strip():
        return []
    query = query.strip()
    matches = []
    for node in root.walk():
        score = fuzzy_score(node.name, query)
        if score > 0:
            matches.append(SearchMatch(node=node, score=score))
    matches.sort(key=lambda match: match.score, reverse=True)
    return matches
