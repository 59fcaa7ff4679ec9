from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_POSITION = "Frontend Developer"
DEFAULT_EXPERIENCE = "mid"
DEFAULT_DURATION_MINUTES = 30
DEFAULT_QUESTION_COUNT = 4
DEFAULT_SKILLS = ["React", "JavaScript"]

EXPERIENCE_LEVELS = {"junior", "mid", "senior"}
MIN_DURATION_MINUTES, MAX_DURATION_MINUTES = 1, 120
MIN_QUESTION_COUNT, MAX_QUESTION_COUNT = 1, 10


def _bounded_int(value, default: int, low: int, high: int) -> int:
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return max(low, min(high, parsed))


class SessionSettings(BaseModel):
    """
    Free-form session config. Numbers may arrive as strings ("15");
    anything unparseable falls back to the default, and out-of-range
    values are clamped rather than rejected.
    """

    model_config = ConfigDict(populate_by_name=True)

    position: str = DEFAULT_POSITION
    experience: str = DEFAULT_EXPERIENCE
    duration: int = DEFAULT_DURATION_MINUTES
    question_count: int = Field(default=DEFAULT_QUESTION_COUNT, alias="questionCount")
    skills: list[str] = Field(default_factory=lambda: list(DEFAULT_SKILLS))

    @field_validator("position", mode="before")
    @classmethod
    def _position(cls, value):
        text = str(value or "").strip()
        return text or DEFAULT_POSITION

    @field_validator("experience", mode="before")
    @classmethod
    def _experience(cls, value):
        level = str(value or "").strip().lower()
        return level if level in EXPERIENCE_LEVELS else DEFAULT_EXPERIENCE

    @field_validator("duration", mode="before")
    @classmethod
    def _duration(cls, value):
        return _bounded_int(value, DEFAULT_DURATION_MINUTES, MIN_DURATION_MINUTES, MAX_DURATION_MINUTES)

    @field_validator("question_count", mode="before")
    @classmethod
    def _question_count(cls, value):
        return _bounded_int(value, DEFAULT_QUESTION_COUNT, MIN_QUESTION_COUNT, MAX_QUESTION_COUNT)

    @field_validator("skills", mode="before")
    @classmethod
    def _skills(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        cleaned = [str(s).strip() for s in (value or []) if str(s or "").strip()]
        return cleaned or list(DEFAULT_SKILLS)

    @property
    def duration_seconds(self) -> int:
        return self.duration * 60

    @classmethod
    def coerce(cls, value) -> "SessionSettings":
        if isinstance(value, SessionSettings):
            return value
        return cls.model_validate(dict(value or {}))
