from dataclasses import dataclass, field


@dataclass(frozen=True)
class Question:
    id: int
    text: str
    expected_topics: frozenset = field(default_factory=frozenset)
    key_phrases: tuple = ()

    @classmethod
    def from_dict(cls, data: dict, default_id: int = 0) -> "Question":
        text = str(data.get("question") or data.get("text") or "").strip()
        if not text:
            raise ValueError("question text is required")
        try:
            question_id = int(data.get("id") or default_id)
        except (TypeError, ValueError):
            question_id = default_id
        topics = data.get("expectedTopics") or data.get("expected_topics") or []
        phrases = data.get("keyPhrases") or data.get("key_phrases") or []
        return cls(
            id=question_id,
            text=text,
            expected_topics=frozenset(str(t).strip() for t in topics if str(t or "").strip()),
            key_phrases=tuple(str(p).strip() for p in phrases if str(p or "").strip()),
        )

    def with_id(self, question_id: int) -> "Question":
        return Question(
            id=question_id,
            text=self.text,
            expected_topics=self.expected_topics,
            key_phrases=self.key_phrases,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "question": self.text,
            "expectedTopics": sorted(self.expected_topics),
            "keyPhrases": list(self.key_phrases),
        }
