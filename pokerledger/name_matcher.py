"""Player name matching against the existing roster."""

import logging
from typing import Optional

from rapidfuzz.distance import Levenshtein

from .constants import MATCH_THRESHOLD, MAX_SUGGESTIONS, SUGGESTION_THRESHOLD
from .models import MatchedPlayer, MatchResult, ParsedEntry, RosterEntry, Suggestion, UnmatchedPlayer

logger = logging.getLogger('pokerledger.name_matcher')


def normalize_for_matching(name: Optional[str]) -> str:
    """Lowercase and trim a name for comparison."""
    return (name or '').strip().lower()


def calculate_similarity(name1: Optional[str], name2: Optional[str]) -> float:
    """
    Score how alike two names are, from 0.0 to 1.0.

    Names are compared case-insensitively after trimming. The score is
    1 - levenshtein / longer_length, so two empty names score 1.0 and an
    empty name against a non-empty one scores 0.0.

    Args:
        name1: First name
        name2: Second name

    Returns:
        Similarity score (1.0 for identical names)
    """
    normalized1 = normalize_for_matching(name1)
    normalized2 = normalize_for_matching(name2)

    if normalized1 == normalized2:
        return 1.0

    max_length = max(len(normalized1), len(normalized2))
    if max_length == 0:
        return 1.0

    distance = Levenshtein.distance(normalized1, normalized2)
    return 1 - distance / max_length


def find_best_match(
    target_name: str,
    roster: list[RosterEntry],
    threshold: float = MATCH_THRESHOLD,
) -> Optional[Suggestion]:
    """
    Find the roster entry most similar to a name.

    Only scores at or above the threshold count. On a tie the entry seen
    first in roster order is kept.

    Args:
        target_name: Name to look up
        roster: Existing players, in the order they should be considered
        threshold: Minimum similarity for a match

    Returns:
        Suggestion for the best entry, or None if nothing clears the threshold
    """
    if not target_name or not roster:
        return None

    best = None
    best_similarity = 0.0
    for entry in roster:
        similarity = calculate_similarity(target_name, entry.name)
        if similarity > best_similarity and similarity >= threshold:
            best = Suggestion(id=entry.id, name=entry.name, similarity=similarity)
            best_similarity = similarity

    return best


def suggest_matches(
    target_name: str,
    roster: list[RosterEntry],
    threshold: float = SUGGESTION_THRESHOLD,
    limit: int = MAX_SUGGESTIONS,
) -> list[Suggestion]:
    """Roster entries scoring above threshold, best first, at most `limit`."""
    scored = [
        Suggestion(id=entry.id, name=entry.name, similarity=calculate_similarity(target_name, entry.name))
        for entry in roster
    ]
    candidates = [s for s in scored if s.similarity > threshold]
    candidates.sort(key=lambda s: s.similarity, reverse=True)
    return candidates[:limit]


def match_players(
    entries: list[ParsedEntry],
    roster: list[RosterEntry],
    threshold: float = MATCH_THRESHOLD,
    suggestion_threshold: float = SUGGESTION_THRESHOLD,
    max_suggestions: int = MAX_SUGGESTIONS,
) -> MatchResult:
    """
    Match parsed entries to existing players.

    Every entry is matched on its own, so two entries may resolve to the same
    roster entry. Entries without a match carry up to `max_suggestions`
    near misses for the user to pick from.

    Args:
        entries: Parsed entries
        roster: Existing players
        threshold: Minimum similarity for a match
        suggestion_threshold: Suggestions must score strictly above this
        max_suggestions: Maximum suggestions per unmatched entry

    Returns:
        MatchResult with matched and unmatched lists, in entry order
    """
    result = MatchResult()

    for entry in entries:
        match = find_best_match(entry.name, roster, threshold=threshold)
        if match:
            result.matched.append(
                MatchedPlayer(
                    parsed_name=entry.name,
                    player_id=match.id,
                    player_name=match.name,
                    similarity=match.similarity,
                    profit=entry.profit,
                )
            )
            continue

        suggestions = suggest_matches(
            entry.name, roster, threshold=suggestion_threshold, limit=max_suggestions
        )
        result.unmatched.append(
            UnmatchedPlayer(parsed_name=entry.name, profit=entry.profit, suggestions=suggestions)
        )

    logger.debug(
        f'Matched {len(result.matched)} of {len(entries)} names against {len(roster)} players'
    )
    return result
