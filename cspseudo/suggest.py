"""Completion suggestions for pseudocode being edited.

Given the source text and a caret offset, the word immediately before the
caret is scored against every keyword, operator alias and word already in
the source. Candidates are ranked by a normalized Levenshtein similarity
with a bonus for prefix matches.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Tuple

MAX_OPTIONS = 20

# (what the user types, what gets inserted)
WORDS: List[Tuple[str, str]] = [
    ('PROCEDURE', 'PROCEDURE'),
    ('FOR', 'FOR'),
    ('EACH', 'EACH'),
    ('IN', 'IN'),
    ('IF', 'IF'),
    ('ELSE', 'ELSE'),
    ('RETURN', 'RETURN'),
    ('MOD', 'MOD'),
    ('NOT', 'NOT'),
    ('AND', 'AND'),
    ('OR', 'OR'),
    ('REPEAT', 'REPEAT'),
    ('TIMES', 'TIMES'),
    ('UNTIL', 'UNTIL'),
    ('ass', '←'),
    ('neq', '≠'),
    ('lteq', '≤'),
    ('gteq', '≥'),
]

_TRAILING_WORD = re.compile(r'[A-Za-z0-9_]+$')
_WORD = re.compile(r'\b[A-Za-z0-9_]+\b')
_NOT_ALNUM = re.compile(r'[^a-z0-9]')


@dataclass(frozen=True)
class Suggestion:
    key: str
    display: str
    score: float


def _sanitize(text: str) -> str:
    return _NOT_ALNUM.sub('', text.lower())


def levenshtein(a: str, b: str) -> int:
    prev = list(range(len(b) + 1))
    for i in range(1, len(a) + 1):
        curr = [i] + [0] * len(b)
        for j in range(1, len(b) + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            curr[j] = min(prev[j] + 1, curr[j - 1] + 1, prev[j - 1] + cost)
        prev = curr
    return prev[len(b)]


def score(candidate: str, query: str) -> float:
    """Similarity of ``candidate`` to ``query``.

    Both sides are lower-cased and stripped to ASCII letters and digits.
    An exact match scores 1.5 and an empty side scores 0. Otherwise the
    score is ``1 - distance / longest``, plus 0.5 when the candidate
    starts with the query.
    """
    a = _sanitize(candidate)
    b = _sanitize(query)
    if a == b:
        return 1.5
    if not a or not b:
        return 0.0
    similarity = 1 - levenshtein(a, b) / max(len(a), len(b))
    if a.startswith(b):
        similarity += 0.5
    return similarity


def rank(candidates: Iterable[Tuple[str, str]], query: str, limit: int = MAX_OPTIONS) -> List[Suggestion]:
    scored = [Suggestion(key, display, score(key, query)) for key, display in candidates]
    # sorted() is stable, so ties keep candidate order
    scored = sorted(scored, key=lambda s: s.score, reverse=True)
    return scored[:limit]


def query_at(source: str, caret: int) -> str:
    match = _TRAILING_WORD.search(source[:caret])
    return match.group(0).lower() if match else ''


def candidates_for(source: str, query: str) -> List[Tuple[str, str]]:
    candidates = list(WORDS)
    for word in _WORD.findall(source):
        if any(key == word for key, _ in candidates):
            continue
        if word.lower() in query:
            continue
        candidates.append((word, word))
    return candidates


def suggest(source: str, caret: int, limit: int = MAX_OPTIONS) -> List[Suggestion]:
    """Ranked completions for the word ending at ``caret``; empty when there is none."""
    query = query_at(source, caret)
    if not query:
        return []
    return rank(candidates_for(source, query), query, limit)


def apply_suggestion(source: str, caret: int, suggestion: Suggestion) -> Tuple[str, int]:
    """Replace the word before ``caret`` with the suggestion's display form.

    A space follows the inserted text. Returns the new source and the new
    caret offset.
    """
    before = source[:caret]
    after = source[caret:]
    replaced = _TRAILING_WORD.sub(lambda _: suggestion.display, before, count=1)
    return replaced + ' ' + after, len(replaced) + 1
