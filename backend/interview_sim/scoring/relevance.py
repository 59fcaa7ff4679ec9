from typing import Iterable

from interview_sim.scoring.rounding import clamp, round_half_up

MAX_COUNTED_PHRASES = 5


def count_phrase_matches(text: str, key_phrases: Iterable[str]) -> int:
    lowered = str(text or "").lower()
    matched = 0
    for phrase in key_phrases:
        needle = str(phrase or "").lower()
        if needle and needle in lowered:
            matched += 1
    return matched


def score_relevance(text: str, key_phrases: Iterable[str]) -> int:
    """
    Share of the question's key phrases mentioned in the answer, 0-100.

    Each phrase counts once however often it appears; covering five
    phrases is already a full score.
    """
    phrases = [p for p in (key_phrases or []) if str(p or "").strip()]
    if not str(text or "").strip() or not phrases:
        return 0

    matched = count_phrase_matches(text, phrases)
    denominator = min(MAX_COUNTED_PHRASES, len(phrases))
    return clamp(round_half_up(100 * matched / denominator), 0, 100)
