import asyncio
import json
import logging
import random
import re
from typing import Protocol

from openai import AsyncOpenAI

from core import config
from interview_sim.questions.bank import default_questions, questions_for_skills
from interview_sim.questions.models import Question

logger = logging.getLogger("interview_sim.questions")


class QuestionProviderError(RuntimeError):
    pass


class QuestionProvider(Protocol):
    async def generate(self, skills: list[str], experience_level: str, count: int) -> list[Question]:
        ...


class BankQuestionProvider:

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    async def generate(self, skills: list[str], experience_level: str, count: int) -> list[Question]:
        return questions_for_skills(skills, count, rng=self.rng)


def _extract_json_payload(text: str):
    text = (text or "").strip()
    if not text:
        return None

    try:
        return json.loads(text)
    except ValueError:
        pass

    fenced = re.search(r"```(?:json)?\s*([\[{][\s\S]*?[\]}])\s*```", text, re.IGNORECASE)
    if fenced:
        try:
            return json.loads(fenced.group(1))
        except ValueError:
            pass

    for opener, closer in (("[", "]"), ("{", "}")):
        start = text.find(opener)
        end = text.rfind(closer)
        if start != -1 and end != -1 and end > start:
            try:
                return json.loads(text[start:end + 1])
            except ValueError:
                continue

    return None


def parse_generated_questions(text: str) -> list[Question]:
    payload = _extract_json_payload(text)
    if isinstance(payload, dict):
        payload = payload.get("questions")
    if not isinstance(payload, list):
        raise QuestionProviderError("model output did not contain a question list")

    questions = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            continue
        try:
            questions.append(Question.from_dict(item).with_id(len(questions) + 1))
        except ValueError:
            logger.warning("skipping malformed generated question | index=%s", index)
    return questions


class OpenAIQuestionProvider:
    """Generates questions with the chat completions API, JSON output."""

    def __init__(self, client=None, model: str | None = None):
        if client is None:
            client = AsyncOpenAI(api_key=config.OPENAI_API_KEY)
        self.client = client
        self.model = model or config.MODEL_NAME

    @staticmethod
    def build_prompt(skills: list[str], experience_level: str, count: int) -> str:
        return f"""
Generate {count} technical interview questions for a {experience_level}-level developer with the following skills: {", ".join(skills)}.

For each question, provide:
1. The main question text
2. Key topics the candidate should cover in their answer
3. Key phrases that indicate the candidate understands the topic

Return JSON only:
{{
  "questions": [
    {{"question": "...", "expectedTopics": ["..."], "keyPhrases": ["..."]}}
  ]
}}
"""

    async def generate(self, skills: list[str], experience_level: str, count: int) -> list[Question]:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {
                    "role": "system",
                    "content": "You are a professional technical interviewer. Output JSON only.",
                },
                {
                    "role": "user",
                    "content": self.build_prompt(skills, experience_level, count),
                },
            ],
            temperature=0.4,
        )
        content = str(response.choices[0].message.content or "")
        questions = parse_generated_questions(content)

        # short answers from the model are topped up from the fixed set
        if 0 < len(questions) < count:
            for extra in default_questions(count)[len(questions):]:
                questions.append(extra.with_id(len(questions) + 1))
        return questions[:count]


def build_question_provider(name: str | None = None) -> QuestionProvider:
    selected = str(name or config.QUESTION_PROVIDER or "bank").strip().lower()
    if selected == "openai":
        return OpenAIQuestionProvider()
    return BankQuestionProvider()


async def load_question_set(
    provider: QuestionProvider,
    skills: list[str],
    experience_level: str,
    count: int,
    timeout_sec: float = config.QUESTION_TIMEOUT_SEC,
) -> tuple[tuple[Question, ...], bool]:
    """
    Ask the provider for `count` questions within timeout_sec.

    Returns (questions, used_fallback). Any failure, timeout or empty
    result falls back to the fixed default set sized to `count`.
    """
    try:
        questions = await asyncio.wait_for(
            provider.generate(list(skills), experience_level, count),
            timeout=timeout_sec,
        )
        questions = list(questions or [])[:count]
        if not questions:
            raise QuestionProviderError("provider returned no questions")
        return tuple(questions), False
    except asyncio.TimeoutError:
        logger.warning("question provider timeout | after=%.1fs, using default questions", timeout_sec)
    except Exception as exc:
        logger.warning("question provider failure | err=%s, using default questions", exc)

    return tuple(default_questions(count)), True
