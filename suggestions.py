""""Did you mean" suggestions for failed catalog searches.

Ranks names from a reference corpus against a possibly misspelled query.
Exact matches short-circuit, substring matches count as a perfect score and
everything else is scored the same way as `similarity.similarity` (edit
distance relative to the longer name).

Blank corpus entries are skipped. An empty name would otherwise be a
substring of every query and always rank first with a perfect score.
"""

from collections import namedtuple

from similarity import distance

# Candidates scoring below this percentage are never suggested
MIN_SCORE = 50

ScoredSuggestion = namedtuple('ScoredSuggestion', ['name', 'distance', 'score'])


def _normalize(s):
    return s.casefold().strip()


def score_candidates(query, corpus):
    """Return ranked ScoredSuggestion tuples for `query` (untruncated).

    An exact (normalized) match returns a single entry with score 100.
    Malformed input yields an empty list rather than an exception.
    """
    if not isinstance(query, str) or not corpus:
        return []
    q = _normalize(query)
    if not q:
        return []

    results = []
    for name in corpus:
        if not isinstance(name, str):
            continue
        candidate = _normalize(name)
        if not candidate:
            continue
        if candidate == q:
            return [ScoredSuggestion(name, 0, 100.0)]
        if q in candidate or candidate in q:
            results.append(ScoredSuggestion(name, 0, 100.0))
            continue
        d = distance(q, candidate)
        longest = max(len(q), len(candidate))
        score = max(0.0, 100.0 * (longest - d) / longest)
        if score >= MIN_SCORE:
            results.append(ScoredSuggestion(name, d, score))

    # stable sort: equal score and distance keep corpus order
    results.sort(key=lambda r: (-r.score, r.distance))
    return results


def suggest(query, corpus, limit=5):
    """Return at most `limit` corpus names similar to `query`.

    Names keep their original casing from the corpus. The corpus is not
    deduplicated here; pass a deduplicated one.
    """
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        return []
    if limit <= 0:
        return []
    return [r.name for r in score_candidates(query, corpus)[:limit]]
