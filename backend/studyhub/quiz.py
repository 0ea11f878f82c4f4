import logging
import time
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from . import crud, models
from .errors import (
    AnswerCountMismatchError,
    GenerationFailedError,
    QuizNotReadyError,
    QuotaExceededError,
)
from .llm import generate_text
from .parsing import parse_question_candidates
from .prompts import CONTENT_QUESTIONS_PROMPT, GENERAL_QUESTIONS_PROMPT, personalization_clause
from .topics import get_topic, is_personalized
from .validator import validate_candidate

logger = logging.getLogger(__name__)

QUESTIONS_PER_QUIZ = 5
MAX_ATTEMPTS = 5
BACKOFF_SECONDS = 1.0
MAX_CONTENT_CHARS = 8000


class QuestionGenerator:
    """Builds a fresh batch of validated questions for a subcategory."""

    def __init__(
        self,
        backend,
        sleep: Callable[[float], None] = time.sleep,
        max_attempts: int = MAX_ATTEMPTS,
    ):
        self.backend = backend
        self.sleep = sleep
        self.max_attempts = max_attempts

    def generate(self, session: Session, subcategory_id: str, user_id: str) -> List[models.QuizQuestion]:
        university = None
        if is_personalized(subcategory_id):
            university = crud.get_user_university(session, user_id)
            if university:
                # Drop the old access record so a passage read before the university
                # was set does not ground the questions.
                crud.delete_access(session, user_id, subcategory_id)

        studied = crud.get_studied_content(session, user_id, subcategory_id)
        prompt = self._build_prompt(subcategory_id, studied, university)

        questions = self._generate_validated(prompt, subcategory_id)
        return crud.replace_questions(
            session, subcategory_id, studied.id if studied else None, questions
        )

    @staticmethod
    def _build_prompt(subcategory_id: str, studied: Optional[models.LearningContent], university) -> str:
        if studied is not None:
            return CONTENT_QUESTIONS_PROMPT.format(
                content=studied.content[:MAX_CONTENT_CHARS],
                count=QUESTIONS_PER_QUIZ,
            )
        return GENERAL_QUESTIONS_PROMPT.format(
            topic=get_topic(subcategory_id).name,
            personalization=personalization_clause(university),
            count=QUESTIONS_PER_QUIZ,
        )

    def _generate_validated(self, prompt: str, subcategory_id: str) -> List[Dict[str, Any]]:
        """Run the bounded retry loop; each attempt is judged on its own output."""
        for attempt in range(1, self.max_attempts + 1):
            try:
                valid = self._attempt(prompt)
            except QuotaExceededError:
                logger.warning("Quota exceeded on attempt %d for %s; aborting", attempt, subcategory_id)
                raise
            except Exception as e:
                logger.warning("Attempt %d for %s failed: %s", attempt, subcategory_id, e)
                valid = []

            logger.info(
                "Attempt %d for %s produced %d valid questions", attempt, subcategory_id, len(valid)
            )
            if len(valid) >= QUESTIONS_PER_QUIZ:
                return valid[:QUESTIONS_PER_QUIZ]

            if attempt < self.max_attempts:
                self.sleep(BACKOFF_SECONDS * attempt)

        raise GenerationFailedError(
            f"Could not generate enough valid questions after {self.max_attempts} attempts."
        )

    def _attempt(self, prompt: str) -> List[Dict[str, Any]]:
        text = generate_text(self.backend, prompt)
        valid = []
        for raw in parse_question_candidates(text):
            if isinstance(raw, dict):
                raw = _with_defaults(raw)
            cleaned = validate_candidate(raw)
            if cleaned is not None:
                valid.append(cleaned)
        return valid


def _with_defaults(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Fill optional fields and accept the answer under its common key spellings."""
    candidate = dict(raw)
    if "correctAnswer" not in candidate:
        for key in ("correct_answer", "answer"):
            if key in candidate:
                candidate["correctAnswer"] = candidate[key]
                break
    if not candidate.get("explanation"):
        candidate["explanation"] = ""
    if not candidate.get("difficulty"):
        candidate["difficulty"] = "Beginner"
    return candidate


def grade(session: Session, subcategory_id: str, user_id: str, answers: List[str]) -> Dict[str, Any]:
    """Score a submission against the current batch and log the attempt."""
    questions = crud.get_current_questions(session, subcategory_id, limit=QUESTIONS_PER_QUIZ)
    if not questions:
        raise QuizNotReadyError(f"No quiz has been generated for '{subcategory_id}'.")
    if len(answers) != len(questions):
        raise AnswerCountMismatchError(
            f"Expected {len(questions)} answers but received {len(answers)}."
        )

    score = 0
    results = []
    for question, answer in zip(questions, answers):
        is_correct = answer.strip() == question.correct_answer.strip()
        if is_correct:
            score += 1
        results.append(
            {
                "questionId": question.id,
                "userAnswer": answer,
                "correctAnswer": question.correct_answer,
                "isCorrect": is_correct,
                "explanation": question.explanation,
            }
        )

    total = len(questions)
    crud.create_attempt(session, user_id, subcategory_id, score, total, answers)
    return {
        "score": score,
        "totalQuestions": total,
        "percentage": round(score / total * 100),
        "results": results,
    }
