"""Text normalization utilities for search terms and event fields.

This module handles two concerns:

1. **Folding** -- lower-cases, trims, collapses whitespace and strips
   accents so that "Málaga", " malaga " and "MALAGA" compare equal.  Used
   for vocabulary lookups (ambiguous terms, known cities/countries) and
   for the in-memory full-text evaluator.

2. **Fuzzy token matching** -- Levenshtein distance via rapidfuzz, so a
   one-letter typo ("camaron" vs "camarón", "paco de lucai") still hits,
   mirroring the ``fuzzy.maxEdits`` behaviour of the Atlas Search index.
"""

import re
import unicodedata

from rapidfuzz.distance import Levenshtein

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


def fold_text(value: str | None) -> str:
    """Lower-case, trim, collapse whitespace and strip diacritics.

    Args:
        value: Raw text; ``None`` folds to the empty string.

    Returns:
        The folded string.
    """
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return re.sub(r"\s+", " ", stripped).strip().lower()


def tokenize(value: str | None) -> list[str]:
    """Split folded text into word tokens."""
    return _TOKEN_RE.findall(fold_text(value))


def tokens_match(query_token: str, candidate_token: str, max_edits: int = 1) -> bool:
    """Return ``True`` if two folded tokens are within *max_edits* edits."""
    if query_token == candidate_token:
        return True
    if max_edits <= 0:
        return False
    # Cheap length gate before computing the distance.
    if abs(len(query_token) - len(candidate_token)) > max_edits:
        return False
    return Levenshtein.distance(query_token, candidate_token, score_cutoff=max_edits) <= max_edits


def fuzzy_text_score(query: str, fields: list[str | None], max_edits: int = 1) -> int:
    """Count how many query tokens fuzzily occur in any of *fields*.

    A score of zero means no match.  Like a Lucene ``text`` query, any
    single matching term is enough for a hit; more matching terms rank
    higher.

    Args:
        query: The raw search text.
        fields: Field values to search (``None`` entries are skipped).
        max_edits: Maximum Levenshtein distance per token.

    Returns:
        Number of query tokens with at least one fuzzy match.
    """
    query_tokens = tokenize(query)
    if not query_tokens:
        return 0

    field_tokens: set[str] = set()
    for value in fields:
        field_tokens.update(tokenize(value))
    if not field_tokens:
        return 0

    score = 0
    for q in query_tokens:
        if any(tokens_match(q, t, max_edits) for t in field_tokens):
            score += 1
    return score


def find_matching_term(value: str, candidates: list[str]) -> str | None:
    """Return the first candidate that folds to the same string as *value*.

    The candidate is returned with its original spelling, so "malaga"
    resolves to "Málaga" when that is how the vocabulary lists it.
    """
    folded = fold_text(value)
    if not folded:
        return None
    return next((c for c in candidates if fold_text(c) == folded), None)
