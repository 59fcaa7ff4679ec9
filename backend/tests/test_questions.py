import random
from types import SimpleNamespace

import pytest

from fakes import FakeQuestionProvider
from interview_sim.questions.bank import DEFAULT_QUESTIONS, default_questions, questions_for_skills
from interview_sim.questions.models import Question
from interview_sim.questions.providers import (
    BankQuestionProvider,
    OpenAIQuestionProvider,
    QuestionProviderError,
    build_question_provider,
    load_question_set,
    parse_generated_questions,
)


def test_question_from_dict_accepts_both_key_styles():
    camel = Question.from_dict({"question": "Why?", "expectedTopics": ["a"], "keyPhrases": ["b", " "]})
    snake = Question.from_dict({"text": "Why?", "expected_topics": ["a"], "key_phrases": ["b"]})
    assert camel.key_phrases == snake.key_phrases == ("b",)
    assert camel.expected_topics == frozenset({"a"})

    with pytest.raises(ValueError):
        Question.from_dict({"question": "  "})


def test_default_questions_are_truncated_or_cycled():
    assert [q.id for q in default_questions(3)] == [1, 2, 3]

    padded = default_questions(len(DEFAULT_QUESTIONS) + 2)
    assert len(padded) == len(DEFAULT_QUESTIONS) + 2
    assert padded[-1].text == padded[1].text
    assert padded[-1].id == len(DEFAULT_QUESTIONS) + 2


def test_questions_for_skills_pads_and_numbers():
    questions = questions_for_skills(["Node.js"], 4, rng=random.Random(3))
    assert len(questions) == 4
    assert [q.id for q in questions] == [1, 2, 3, 4]
    assert all(q.key_phrases for q in questions)
    assert any("Node.js" in q.text for q in questions)


def test_questions_for_unknown_skill_use_templates_and_generic():
    questions = questions_for_skills(["Elixir"], 10, rng=random.Random(1))
    assert len(questions) == 10
    assert sum("Elixir" in q.text for q in questions) == 10


def test_parse_generated_questions_from_fenced_json():
    text = (
        "Here you go:\n```json\n"
        '{"questions": [{"question": "What is a closure?", "keyPhrases": ["scope"]}, {"question": ""}]}\n'
        "```"
    )
    questions = parse_generated_questions(text)
    assert len(questions) == 1
    assert questions[0].id == 1
    assert questions[0].key_phrases == ("scope",)


def test_parse_generated_questions_rejects_prose():
    with pytest.raises(QuestionProviderError):
        parse_generated_questions("I cannot help with that.")


class _FakeCompletions:
    def __init__(self, content: str):
        self.content = content
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.mark.asyncio
async def test_openai_provider_pads_short_results():
    completions = _FakeCompletions('[{"question": "Explain the event loop.", "keyPhrases": ["event loop"]}]')
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    provider = OpenAIQuestionProvider(client=client, model="test-model")

    questions = await provider.generate(["Node.js"], "senior", 3)

    assert [q.id for q in questions] == [1, 2, 3]
    assert questions[0].text == "Explain the event loop."
    assert completions.kwargs["model"] == "test-model"
    assert "senior-level" in completions.kwargs["messages"][1]["content"]


@pytest.mark.asyncio
async def test_load_question_set_uses_provider():
    provider = FakeQuestionProvider()
    questions, used_fallback = await load_question_set(provider, ["React"], "mid", 4, timeout_sec=1.0)
    assert used_fallback is False
    assert len(questions) == 4
    assert provider.calls == [(["React"], "mid", 4)]


@pytest.mark.asyncio
async def test_load_question_set_falls_back_on_failure():
    provider = FakeQuestionProvider(error=RuntimeError("provider down"))
    questions, used_fallback = await load_question_set(provider, ["React"], "mid", 5, timeout_sec=1.0)
    assert used_fallback is True
    assert [q.text for q in questions] == [q.text for q in default_questions(5)]


@pytest.mark.asyncio
async def test_load_question_set_falls_back_on_timeout():
    provider = FakeQuestionProvider(delay=1.0)
    questions, used_fallback = await load_question_set(provider, ["React"], "mid", 2, timeout_sec=0.05)
    assert used_fallback is True
    assert len(questions) == 2


@pytest.mark.asyncio
async def test_bank_provider_is_default():
    provider = build_question_provider("bank")
    assert isinstance(provider, BankQuestionProvider)
    questions = await provider.generate(["React", "JavaScript"], "mid", 4)
    assert len(questions) == 4
