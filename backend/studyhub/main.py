import logging
import os
from contextlib import asynccontextmanager
from typing import List
from uuid import UUID

import dotenv
import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request  # type: ignore
from fastapi.middleware.cors import CORSMiddleware  # type: ignore
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from .database import Base, engine, get_db
from . import crud, models  # noqa: F401
from .content import ContentResolver
from .errors import (
    AnswerCountMismatchError,
    GenerationFailedError,
    QuizNotReadyError,
    QuotaExceededError,
)
from .llm import GeminiBackend
from .quiz import QuestionGenerator, grade
from .topics import get_topic

# Load environment variables from a .env file if present (for DATABASE_URL, GOOGLE_API_KEY)
dotenv.load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 5


class LearningRequest(BaseModel):
    """Request body naming a subcategory and the student asking for it."""

    model_config = ConfigDict(populate_by_name=True)

    subcategory_id: str = Field(..., min_length=1, alias="subcategoryId")
    user_id: UUID = Field(..., alias="userId")


class QuizSubmitRequest(LearningRequest):
    """Request body for grading a quiz."""

    answers: List[str]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create database tables on startup."""
    Base.metadata.create_all(bind=engine)
    logger.info("Learning API initialized")
    yield


app = FastAPI(title="StudyHub Learning API", lifespan=lifespan)

# Allow browser clients (frontend) to call the API
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_backend(request: Request):
    """Gemini backend, created on first use so LLM-free routes run without an API key."""
    backend = getattr(request.app.state, "backend", None)
    if backend is None:
        try:
            backend = request.app.state.backend = GeminiBackend()
        except RuntimeError as e:
            logger.error("Generative backend unavailable: %s", e)
            raise HTTPException(status_code=503, detail="The AI service is not configured.")
    return backend


def get_question_generator(backend=Depends(get_backend)) -> QuestionGenerator:
    return QuestionGenerator(backend)


QUOTA_DETAIL = "The AI service is over its usage quota. Please try again later."


@app.get("/health")
def health_check():
    return {"status": "healthy"}


@app.post("/api/learning/content")
def get_learning_content(
    payload: LearningRequest,
    db: Session = Depends(get_db),
    backend=Depends(get_backend),
):
    """Return the passage for a subcategory, generating it when needed."""
    try:
        content = ContentResolver(backend).resolve(db, payload.subcategory_id, str(payload.user_id))
    except QuotaExceededError:
        raise HTTPException(status_code=429, detail=QUOTA_DETAIL)
    except Exception as e:
        logger.exception("Get learning content failed")
        raise HTTPException(status_code=500, detail=f"Learning content generation failed: {e}")
    return {"success": True, "content": crud.content_to_dict(content)}


@app.post("/api/learning/quiz/generate")
def generate_quiz(
    payload: LearningRequest,
    db: Session = Depends(get_db),
    generator: QuestionGenerator = Depends(get_question_generator),
):
    """Generate and store a fresh batch of questions for a subcategory."""
    try:
        questions = generator.generate(db, payload.subcategory_id, str(payload.user_id))
    except QuotaExceededError:
        raise HTTPException(status_code=429, detail=QUOTA_DETAIL)
    except GenerationFailedError as e:
        raise HTTPException(status_code=503, detail=f"{e} Please try again.")
    except Exception as e:
        logger.exception("Generate quiz failed")
        raise HTTPException(status_code=500, detail=f"Quiz generation failed: {e}")
    return {"success": True, "questions": [crud.question_to_dict(q) for q in questions]}


@app.post("/api/learning/quiz/submit")
def submit_quiz(payload: QuizSubmitRequest, db: Session = Depends(get_db)):
    """Grade submitted answers and record the attempt."""
    try:
        result = grade(db, payload.subcategory_id, str(payload.user_id), payload.answers)
    except AnswerCountMismatchError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except QuizNotReadyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, **result}


@app.get("/api/learning/progress/{user_id}")
def get_user_progress(user_id: str, db: Session = Depends(get_db)):
    """Return passages opened and quizzes taken by a user."""
    return {
        "success": True,
        "learningProgress": crud.list_progress(db, user_id),
        "quizAttempts": [crud.attempt_to_dict(a) for a in crud.list_attempts(db, user_id)],
    }


@app.get("/api/learning/recent-activity/{user_id}")
def get_recent_activity(user_id: str, db: Session = Depends(get_db)):
    """Return the latest quiz attempts labelled for the dashboard."""
    activity = []
    for attempt in crud.list_attempts(db, user_id, limit=RECENT_ACTIVITY_LIMIT):
        topic = get_topic(attempt.subcategory_id)
        item = crud.attempt_to_dict(attempt)
        item["subcategory_name"] = topic.name
        item["category_type"] = topic.category
        activity.append(item)
    return {"success": True, "recentActivity": activity}


if __name__ == "__main__":
    uvicorn.run(
        "studyhub.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
