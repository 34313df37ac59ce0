from .errors import (
    GenerationError,
    InvalidTransitionError,
    QuizValidationError,
    TriviaQuizError,
)
from .gateway import (
    CompletionClient,
    OpenAICompletionClient,
    QuestionGateway,
    build_generation_prompt,
    parse_questions_payload,
)
from .models import (
    AnswerRecord,
    Difficulty,
    GameRules,
    Question,
    SessionConfig,
    SessionPhase,
)
from .results import (
    CategorySummary,
    Grade,
    QuestionReview,
    QuizResults,
    build_results,
    percentage_of,
)
from .scoring import evaluate_answer, tally_score
from .session import SessionView, TriviaSession, option_marks
from .state import SessionState
from .view import parse_command, run_trivia_session

__all__ = [
    "TriviaQuizError",
    "QuizValidationError",
    "GenerationError",
    "InvalidTransitionError",
    "CompletionClient",
    "OpenAICompletionClient",
    "QuestionGateway",
    "build_generation_prompt",
    "parse_questions_payload",
    "AnswerRecord",
    "Difficulty",
    "GameRules",
    "Question",
    "SessionConfig",
    "SessionPhase",
    "CategorySummary",
    "Grade",
    "QuestionReview",
    "QuizResults",
    "build_results",
    "percentage_of",
    "evaluate_answer",
    "tally_score",
    "SessionState",
    "SessionView",
    "TriviaSession",
    "option_marks",
    "parse_command",
    "run_trivia_session",
]
