import json
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models

logger = logging.getLogger(__name__)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


# ---------------------------------------------------------------- users

def get_user_university(session: Session, user_id: str) -> Optional[str]:
    """Return the user's university, or None when unset or the user is unknown."""
    user = session.get(models.User, user_id)
    if user is None or not user.university or not user.university.strip():
        return None
    return user.university.strip()


# ---------------------------------------------------------------- learning content

def get_latest_content(
    session: Session, subcategory_id: str, owner_id: Optional[str]
) -> Optional[models.LearningContent]:
    """Newest passage for a subcategory; owner_id=None selects the shared one."""
    owner_filter = (
        models.LearningContent.owner_id.is_(None)
        if owner_id is None
        else models.LearningContent.owner_id == owner_id
    )
    return (
        session.query(models.LearningContent)
        .filter(models.LearningContent.subcategory_id == subcategory_id, owner_filter)
        .order_by(models.LearningContent.created_at.desc(), models.LearningContent.id.desc())
        .first()
    )


def create_content(
    session: Session,
    subcategory_id: str,
    owner_id: Optional[str],
    personalization_key: Optional[str],
    generated: Dict[str, str],
) -> models.LearningContent:
    """Create and save a new passage."""
    record = models.LearningContent(
        subcategory_id=subcategory_id,
        owner_id=owner_id,
        personalization_key=personalization_key,
        title=generated["title"][:500],
        content=generated["content"],
        difficulty=generated.get("difficulty") or "Beginner",
    )
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


def content_to_dict(record: models.LearningContent) -> Dict[str, Any]:
    return {
        "content_id": record.id,
        "title": record.title,
        "content": record.content,
        "difficulty": record.difficulty,
        "created_at": _iso(record.created_at),
    }


# ---------------------------------------------------------------- learning progress

def record_access(
    session: Session,
    user_id: str,
    subcategory_id: str,
    content_id: int,
    replace_existing: bool = False,
) -> models.UserLearningProgress:
    """Upsert the (user, content) access record.

    With replace_existing the user's record for the subcategory is re-pointed at
    content_id instead of adding another row.
    """
    Progress = models.UserLearningProgress
    existing = (
        session.query(Progress)
        .filter(Progress.user_id == user_id, Progress.content_id == content_id)
        .first()
    )
    if existing:
        return existing

    if replace_existing:
        previous = (
            session.query(Progress)
            .filter(Progress.user_id == user_id, Progress.subcategory_id == subcategory_id)
            .order_by(Progress.id.desc())
            .first()
        )
        if previous:
            previous.content_id = content_id
            session.commit()
            session.refresh(previous)
            return previous

    record = Progress(user_id=user_id, subcategory_id=subcategory_id, content_id=content_id)
    session.add(record)
    try:
        session.commit()
    except IntegrityError:
        # A concurrent request inserted the same (user, content) pair first.
        session.rollback()
        logger.debug("Access record for user %s content %s already exists", user_id, content_id)
        return (
            session.query(Progress)
            .filter(Progress.user_id == user_id, Progress.content_id == content_id)
            .one()
        )
    session.refresh(record)
    return record


def delete_access(session: Session, user_id: str, subcategory_id: str) -> int:
    """Remove the user's access records for a subcategory; returns rows deleted."""
    Progress = models.UserLearningProgress
    deleted = (
        session.query(Progress)
        .filter(Progress.user_id == user_id, Progress.subcategory_id == subcategory_id)
        .delete(synchronize_session=False)
    )
    session.commit()
    return deleted


def get_studied_content(
    session: Session, user_id: str, subcategory_id: str
) -> Optional[models.LearningContent]:
    """Passage the user accessed for a subcategory, limited to their own or shared passages."""
    Progress = models.UserLearningProgress
    Content = models.LearningContent
    return (
        session.query(Content)
        .join(Progress, Progress.content_id == Content.id)
        .filter(
            Progress.user_id == user_id,
            Progress.subcategory_id == subcategory_id,
            or_(Content.owner_id == user_id, Content.owner_id.is_(None)),
        )
        .order_by(Content.created_at.desc(), Content.id.desc())
        .first()
    )


# ---------------------------------------------------------------- quiz questions

def replace_questions(
    session: Session,
    subcategory_id: str,
    content_id: Optional[int],
    questions: List[Dict[str, Any]],
) -> List[models.QuizQuestion]:
    """Swap the subcategory's question batch for a new one in a single commit."""
    session.query(models.QuizQuestion).filter(
        models.QuizQuestion.subcategory_id == subcategory_id
    ).delete(synchronize_session=False)

    records = [
        models.QuizQuestion(
            subcategory_id=subcategory_id,
            content_id=content_id,
            question=q["question"].strip(),
            options_json=json.dumps(q["options"], ensure_ascii=False),
            correct_answer=q["correctAnswer"],
            explanation=q.get("explanation") or "",
            difficulty=q.get("difficulty") or "Beginner",
        )
        for q in questions
    ]
    session.add_all(records)
    session.commit()
    for record in records:
        session.refresh(record)
    return records


def get_current_questions(
    session: Session, subcategory_id: str, limit: int = 5
) -> List[models.QuizQuestion]:
    """Current batch for a subcategory, earliest first."""
    return (
        session.query(models.QuizQuestion)
        .filter(models.QuizQuestion.subcategory_id == subcategory_id)
        .order_by(models.QuizQuestion.created_at.asc(), models.QuizQuestion.id.asc())
        .limit(limit)
        .all()
    )


def question_to_dict(record: models.QuizQuestion) -> Dict[str, Any]:
    return {
        "question_id": record.id,
        "question": record.question,
        "options": json.loads(record.options_json or "[]"),
        "correct_answer": record.correct_answer,
        "explanation": record.explanation,
        "difficulty": record.difficulty,
    }


# ---------------------------------------------------------------- quiz attempts

def create_attempt(
    session: Session,
    user_id: str,
    subcategory_id: str,
    score: int,
    total_questions: int,
    answers: List[str],
) -> models.QuizAttempt:
    """Append a graded attempt."""
    record = models.QuizAttempt(
        user_id=user_id,
        subcategory_id=subcategory_id,
        score=score,
        total_questions=total_questions,
        answers_json=json.dumps(answers, ensure_ascii=False),
    )
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


def list_attempts(
    session: Session, user_id: str, limit: Optional[int] = None
) -> List[models.QuizAttempt]:
    """Return a user's attempts, newest first."""
    query = (
        session.query(models.QuizAttempt)
        .filter(models.QuizAttempt.user_id == user_id)
        .order_by(models.QuizAttempt.completed_at.desc(), models.QuizAttempt.id.desc())
    )
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def list_progress(session: Session, user_id: str) -> List[Dict[str, Any]]:
    """Return the passages a user opened, newest first."""
    Progress = models.UserLearningProgress
    rows = (
        session.query(Progress, models.LearningContent.title)
        .join(models.LearningContent, Progress.content_id == models.LearningContent.id)
        .filter(Progress.user_id == user_id)
        .order_by(Progress.completed_at.desc(), Progress.id.desc())
        .all()
    )
    return [
        {
            "subcategory_id": progress.subcategory_id,
            "title": title,
            "completed_at": _iso(progress.completed_at),
            "time_spent": progress.time_spent,
        }
        for progress, title in rows
    ]


def attempt_to_dict(record: models.QuizAttempt) -> Dict[str, Any]:
    return {
        "subcategory_id": record.subcategory_id,
        "score": record.score,
        "total_questions": record.total_questions,
        "completed_at": _iso(record.completed_at),
    }
