"""Fuzzy device-name resolution."""

from __future__ import annotations

from collections.abc import Sequence

from bluectl.core.model import DeviceRecord, Resolution, ScoredCandidate

SCORE_MATCH = 16
SCORE_GAP_START = -3
SCORE_GAP_EXTENSION = -1
BONUS_BOUNDARY = 8
BONUS_CONSECUTIVE = -(SCORE_GAP_START + SCORE_GAP_EXTENSION)
BONUS_FIRST_CHAR_MULTIPLIER = 2


def _boundary_bonus(choice: str, index: int) -> int:
    if not choice[index].isalnum():
        return 0
    if index == 0 or not choice[index - 1].isalnum():
        return BONUS_BOUNDARY
    return 0


def _gap_penalty(length: int) -> int:
    return SCORE_GAP_START + SCORE_GAP_EXTENSION * (length - 1)


def fuzzy_score(choice: str, pattern: str) -> int | None:
    """Score ``pattern`` as an in-order subsequence of ``choice``, ignoring case.

    Matched characters earn a base score, with extra credit for runs of
    consecutive matches and for hits on word boundaries (doubled for the first
    pattern character). Skipped characters between two matches cost a gap
    penalty. Returns None when there is no alignment or the best one does not
    score above zero.
    """
    choice = choice.lower()
    pattern = pattern.lower()
    if not pattern or len(pattern) > len(choice):
        return None

    # previous[j]: best score with the previous pattern char matched at choice[j]
    previous: list[int | None] = []
    for j, char in enumerate(choice):
        if char == pattern[0]:
            previous.append(SCORE_MATCH + _boundary_bonus(choice, j) * BONUS_FIRST_CHAR_MULTIPLIER)
        else:
            previous.append(None)

    for p_char in pattern[1:]:
        current: list[int | None] = [None] * len(choice)
        for j, char in enumerate(choice):
            if char != p_char:
                continue
            best: int | None = None
            for k in range(j):
                prior = previous[k]
                if prior is None:
                    continue
                gap = j - k - 1
                step = BONUS_CONSECUTIVE if gap == 0 else _gap_penalty(gap)
                value = prior + step
                if best is None or value > best:
                    best = value
            if best is not None:
                current[j] = best + SCORE_MATCH + _boundary_bonus(choice, j)
        previous = current

    scores = [score for score in previous if score is not None]
    if not scores:
        return None
    top = max(scores)
    return top if top > 0 else None


def rank_candidates(query: str, devices: Sequence[DeviceRecord]) -> list[ScoredCandidate]:
    """Positive-score candidates, best first; equal scores keep input order."""
    scored: list[ScoredCandidate] = []
    for device in devices:
        score = fuzzy_score(device.name, query)
        if score is not None:
            scored.append(ScoredCandidate(device=device, score=score))
    return sorted(scored, key=lambda candidate: -candidate.score)


def resolve(query: str, devices: Sequence[DeviceRecord]) -> Resolution:
    """Pick the single device ``query`` refers to.

    With several candidates the full ranking is returned for display and the
    top-ranked one is selected without asking.
    """
    candidates = tuple(rank_candidates(query, devices))
    selected = candidates[0].device if candidates else None
    return Resolution(query=query, selected=selected, candidates=candidates)
