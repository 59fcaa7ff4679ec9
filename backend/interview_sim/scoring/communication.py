import re
from dataclasses import dataclass

from interview_sim.scoring.rounding import clamp

BASE_SCORE = 70
SHORT_ANSWER_CHARS = 50
SHORT_ANSWER_CAP = 40

# word semantics are ASCII only: accented letters are not word characters
_WORD_FLAGS = re.ASCII
_TERMINATOR = re.compile(r"[.!?]")
_NOT_WORD_OR_SPACE = re.compile(r"[^\w\s]", _WORD_FLAGS)
_WORD = re.compile(r"\w+", _WORD_FLAGS)


@dataclass(frozen=True)
class WeightedPattern:
    name: str
    pattern: re.Pattern
    weight: int

    def count(self, text: str) -> int:
        return sum(1 for _ in self.pattern.finditer(text))


@dataclass(frozen=True)
class LongSentenceRule:
    """
    Counts runs of more than `max_words` words, separated only by
    whitespace, that end directly on a sentence terminator. Each stretch
    between terminators is scanned once, so unpunctuated text stays linear.
    """

    name: str
    max_words: int
    weight: int

    def count(self, text: str) -> int:
        found = 0
        start = 0
        for terminator in _TERMINATOR.finditer(text):
            run = _NOT_WORD_OR_SPACE.split(text[start:terminator.start()])[-1]
            start = terminator.end()
            if not run or run[-1].isspace():
                continue
            if len(_WORD.findall(run)) > self.max_words:
                found += 1
        return found


PENALTIES = (
    WeightedPattern("repeated_word", re.compile(r"\b(\w+)\s+\1\b", re.IGNORECASE | _WORD_FLAGS), 5),
    # capitalised word straight after another word: crude run-on proxy
    WeightedPattern("missing_sentence_break", re.compile(r"\w+\s+[A-Z]", _WORD_FLAGS), 3),
    LongSentenceRule("long_sentence", 40, 10),
    WeightedPattern(
        "filler_word",
        re.compile(r"\b(um|uh|like|you know|basically|actually|literally)\b", re.IGNORECASE | _WORD_FLAGS),
        2,
    ),
    WeightedPattern(
        "singular_agreement",
        re.compile(r"\b(he|she|it)\s+(are|were|have been)\b", re.IGNORECASE | _WORD_FLAGS),
        5,
    ),
    WeightedPattern(
        "plural_agreement",
        re.compile(r"\b(they|we|you)\s+(is|was|has been)\b", re.IGNORECASE | _WORD_FLAGS),
        5,
    ),
)

BONUSES = (
    WeightedPattern(
        "transition_word",
        re.compile(
            r"\b(first|second|third|finally|in conclusion|therefore|consequently|however|moreover|furthermore)\b",
            re.IGNORECASE | _WORD_FLAGS,
        ),
        5,
    ),
    WeightedPattern("complete_sentence", re.compile(r"[A-Z][^.!?]*[.!?]"), 3),
    WeightedPattern(
        "technical_term",
        re.compile(
            r"\b(algorithm|function|component|state|props|hook|api|interface|dependency|framework|library)\b",
            re.IGNORECASE | _WORD_FLAGS,
        ),
        2,
    ),
)


def communication_breakdown(text: str) -> dict:
    clean = str(text or "")
    penalties = {p.name: p.count(clean) * p.weight for p in PENALTIES}
    bonuses = {b.name: b.count(clean) * b.weight for b in BONUSES}
    return {
        "penalties": penalties,
        "bonuses": bonuses,
        "total_penalty": sum(penalties.values()),
        "total_bonus": sum(bonuses.values()),
    }


def score_communication(text: str) -> int:
    clean = str(text or "")
    if not clean:
        return 0

    breakdown = communication_breakdown(clean)
    score = BASE_SCORE - breakdown["total_penalty"] + breakdown["total_bonus"]

    if len(clean) < SHORT_ANSWER_CHARS:
        score = min(score, SHORT_ANSWER_CAP)

    return clamp(score, 0, 100)
