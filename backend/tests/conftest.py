"""
Pytest configuration and shared fixtures.

Every test gets a fresh in-memory SQLite schema and a scripted generative
backend, so nothing touches the network or a real database.
"""
import json
import os

# database.py reads this at import time
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from sqlalchemy.orm import sessionmaker

from studyhub.database import Base, make_engine
from studyhub import models  # noqa: F401


class FakeBackend:
    """Replays scripted responses; an Exception entry is raised instead of returned.

    The last entry repeats once the script runs out.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []

    def generate_content(self, prompt):
        self.prompts.append(prompt)
        index = min(len(self.prompts), len(self.responses)) - 1
        response = self.responses[index]
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def calls(self):
        return len(self.prompts)


def make_question(n, **overrides):
    question = {
        "question": f"Which office helps students with request number {n}?",
        "options": [f"Registrar {n}", f"Library {n}", f"Gym {n}", f"Cafeteria {n}"],
        "correctAnswer": f"Registrar {n}",
        "explanation": "The registrar handles enrollment paperwork.",
        "difficulty": "Beginner",
    }
    question.update(overrides)
    return question


def questions_json(count, start=1):
    return json.dumps([make_question(n) for n in range(start, start + count)])


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def user_id():
    return "6f1c2b8e-3d4a-4e5f-9a0b-1c2d3e4f5a6b"


@pytest.fixture
def add_user(session):
    def _add(user_id, university=None):
        session.add(models.User(id=user_id, username="student", university=university))
        session.commit()

    return _add
