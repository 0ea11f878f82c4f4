from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)

from .database import Base


class User(Base):
    """Student account row. Only the fields the learning pipeline reads are mapped."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    username = Column(String(100), nullable=True)
    university = Column(String(255), nullable=True)  # personalization key


class LearningContent(Base):
    """Generated learning passage for a subcategory, global or owned by one user."""

    __tablename__ = "learning_content"

    id = Column(Integer, primary_key=True, index=True)
    subcategory_id = Column(String(100), index=True, nullable=False)
    owner_id = Column(String(36), index=True, nullable=True)  # NULL for shared content
    personalization_key = Column(String(255), nullable=True)
    title = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)
    difficulty = Column(String(50), nullable=False, default="Beginner")
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class UserLearningProgress(Base):
    """Records that a user opened a passage."""

    __tablename__ = "user_learning_progress"
    __table_args__ = (UniqueConstraint("user_id", "content_id", name="uq_progress_user_content"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), index=True, nullable=False)
    subcategory_id = Column(String(100), index=True, nullable=False)
    content_id = Column(Integer, ForeignKey("learning_content.id", ondelete="CASCADE"), nullable=False)
    time_spent = Column(Integer, nullable=False, default=0)  # seconds
    completed_at = Column(DateTime(timezone=True), server_default=func.now())


class QuizQuestion(Base):
    """A validated question in the current batch for a subcategory."""

    __tablename__ = "quiz_questions"

    id = Column(Integer, primary_key=True, index=True)
    subcategory_id = Column(String(100), index=True, nullable=False)
    content_id = Column(Integer, ForeignKey("learning_content.id", ondelete="SET NULL"), nullable=True)
    question = Column(Text, nullable=False)
    options_json = Column(Text, nullable=False)  # list of 4 options as JSON
    correct_answer = Column(Text, nullable=False)
    explanation = Column(Text, nullable=True)
    difficulty = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class QuizAttempt(Base):
    """Append-only log of graded quiz submissions."""

    __tablename__ = "user_quiz_attempts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), index=True, nullable=False)
    subcategory_id = Column(String(100), index=True, nullable=False)
    score = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False)
    answers_json = Column(Text, nullable=False)
    completed_at = Column(DateTime(timezone=True), server_default=func.now())
