"""
Ordering of the endpoint list shown to the user.

Selected endpoints always come first. Without a query the rest follows
document order; with a query every endpoint is scored by a fuzzy subsequence
match against its path and its description, non-matching endpoints are
hidden, and path matches weigh more than description matches.
"""
from apisnip.document import EndpointKey

PATH_WEIGHT = 3
DESCRIPTION_WEIGHT = 1

SCORE_MATCH = 16
BONUS_START = 10
BONUS_BOUNDARY = 8
BONUS_CAMEL = 7
BONUS_CONSECUTIVE = 6
BONUS_EXACT = 16
PENALTY_GAP_START = 3
PENALTY_GAP_EXTENSION = 1

SEPARATORS = set('/_-.{}:?&= \t')

NO_MATCH = float('-inf')


def _char_bonus(text, index):
    if index == 0:
        return BONUS_START
    previous, current = text[index - 1], text[index]
    if previous in SEPARATORS:
        return BONUS_BOUNDARY
    if previous.islower() and current.isupper():
        return BONUS_CAMEL
    return 0


def fuzzy_score(query, text):
    """
    Score ``query`` as a case-insensitive subsequence of ``text``.

    The best alignment is found by dynamic programming: every matched
    character earns a base score plus a bonus when it starts the text, starts
    a word, or directly follows the previous match; gaps between matches cost
    an affine penalty.

    Args:
        query (str): What the user typed
        text (str): Candidate text

    Returns:
        int | None: A positive score, or None when the query is not a
        subsequence of the text
    """
    if not query or not text:
        return None

    needle = query.lower()
    haystack = text.lower()
    if len(needle) > len(haystack):
        return None

    previous = None
    for i, char in enumerate(needle):
        current = [NO_MATCH] * len(haystack)
        # Best score over earlier matches, already charged for the gap up to here
        gapped = NO_MATCH
        for j, candidate in enumerate(haystack):
            if i > 0 and j >= 2:
                gapped = max(gapped - PENALTY_GAP_EXTENSION, previous[j - 2] - PENALTY_GAP_START)
            if candidate != char:
                continue
            bonus = _char_bonus(text, j)
            if i == 0:
                current[j] = SCORE_MATCH + bonus
                continue
            best = gapped + SCORE_MATCH + bonus
            if j >= 1 and previous[j - 1] != NO_MATCH:
                best = max(best, previous[j - 1] + SCORE_MATCH + max(bonus, BONUS_CONSECUTIVE))
            current[j] = best
        previous = current

    score = max(previous)
    if score == NO_MATCH:
        return None
    if needle == haystack:
        score += BONUS_EXACT
    return max(int(score), 1)


def score_endpoint(query, endpoint):
    """
    Weighted fuzzy score of an endpoint, or None when neither its path nor
    its description matches.
    """
    path_score = fuzzy_score(query, endpoint.path)
    description_score = fuzzy_score(query, endpoint.description)
    if path_score is None and description_score is None:
        return None
    return PATH_WEIGHT * (path_score or 0) + DESCRIPTION_WEIGHT * (description_score or 0)


def _selected_keys(selection):
    keys = set()
    for item in selection or ():
        path, method = item
        keys.add(EndpointKey.of(path, method))
    return frozenset(keys)


def display_list(document, selection, query=''):
    """
    The endpoints to show, in display order.

    Browse mode (empty query) orders by (unselected, document index). Search
    mode drops endpoints that do not match and orders by
    (unselected, -score, document index).

    Args:
        document (Document): The loaded document, not modified
        selection (iterable): Selected EndpointKeys or (path, method) pairs
        query (str): The search query

    Returns:
        list: Endpoint objects
    """
    selected = _selected_keys(selection)
    endpoints = document.endpoints()
    query = (query or '').strip()

    if not query:
        return sorted(endpoints, key=lambda e: (e.key not in selected, e.index))

    ranked = []
    for endpoint in endpoints:
        score = score_endpoint(query, endpoint)
        if score is None:
            continue
        ranked.append(((endpoint.key not in selected, -score, endpoint.index), endpoint))
    ranked.sort(key=lambda pair: pair[0])
    return [endpoint for _, endpoint in ranked]
