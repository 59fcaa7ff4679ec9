from interview_sim.questions.bank import default_questions, questions_for_skills
from interview_sim.questions.models import Question
from interview_sim.questions.providers import (
    BankQuestionProvider,
    OpenAIQuestionProvider,
    QuestionProvider,
    QuestionProviderError,
    build_question_provider,
    load_question_set,
)

__all__ = [
    "BankQuestionProvider",
    "OpenAIQuestionProvider",
    "Question",
    "QuestionProvider",
    "QuestionProviderError",
    "build_question_provider",
    "default_questions",
    "load_question_set",
    "questions_for_skills",
]
