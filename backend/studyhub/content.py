import logging

from sqlalchemy.orm import Session

from . import crud, models
from .llm import generate_text
from .parsing import parse_passage
from .prompts import LEARNING_CONTENT_PROMPT, personalization_clause
from .topics import get_topic, is_personalized

logger = logging.getLogger(__name__)


class ContentResolver:
    """Returns the learning passage for a subcategory, generating it on first use.

    Shared subcategories get one passage for everybody. Personalized ones get a
    passage per student, regenerated once the student's university is known
    (or changes).
    """

    def __init__(self, backend):
        self.backend = backend

    def resolve(self, session: Session, subcategory_id: str, user_id: str) -> models.LearningContent:
        personalized = is_personalized(subcategory_id)
        university = crud.get_user_university(session, user_id) if personalized else None
        owner_id = user_id if personalized else None

        content = crud.get_latest_content(session, subcategory_id, owner_id)
        if content is None or self._is_stale(content, personalized, university):
            content = self._generate(session, subcategory_id, owner_id, university)

        crud.record_access(
            session, user_id, subcategory_id, content.id, replace_existing=personalized
        )
        return content

    @staticmethod
    def _is_stale(content: models.LearningContent, personalized: bool, university) -> bool:
        if not personalized or not university:
            return False
        return content.personalization_key != university

    def _generate(self, session, subcategory_id, owner_id, university) -> models.LearningContent:
        topic = get_topic(subcategory_id)
        prompt = LEARNING_CONTENT_PROMPT.format(
            topic=topic.description,
            personalization=personalization_clause(university),
        )
        logger.info(
            "Generating learning content for %s (personalized=%s)", subcategory_id, bool(university)
        )
        text = generate_text(self.backend, prompt)
        generated = parse_passage(text, fallback_title=f"{topic.name} - Learning Guide")
        return crud.create_content(session, subcategory_id, owner_id, university, generated)
