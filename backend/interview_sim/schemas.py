from pydantic import BaseModel, ConfigDict, Field


class StartSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    position: str | None = None
    experience: str | None = None
    duration: int | str | None = None
    question_count: int | str | None = Field(default=None, alias="questionCount")
    skills: list[str] | str | None = None
    camera: bool = False

    def settings_payload(self) -> dict:
        data = self.model_dump(exclude={"camera"})
        return {key: value for key, value in data.items() if value is not None}


ANSWER_TEXT_MAX_CHARS = 20000


class AnswerTextRequest(BaseModel):
    text: str = Field(default="", max_length=ANSWER_TEXT_MAX_CHARS)


class TranscriptRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(max_length=ANSWER_TEXT_MAX_CHARS)
    is_final: bool = Field(default=True, alias="isFinal")


class FaceReadingPayload(BaseModel):
    expressions: dict[str, float] = Field(default_factory=dict)


class FrameRequest(BaseModel):
    width: int = 0
    height: int = 0
    faces: list[FaceReadingPayload] = Field(default_factory=list)


class ToggleRequest(BaseModel):
    enabled: bool


class EndSessionRequest(BaseModel):
    reason: str = "user"
