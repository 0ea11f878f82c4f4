class LearningError(Exception):
    """Base class for errors raised by the learning pipeline."""


class QuotaExceededError(LearningError):
    """The generative backend reported quota or rate limiting."""

    def __init__(self, message: str = "Generative backend quota exceeded. Please try again later."):
        super().__init__(message)


class GenerationFailedError(LearningError):
    """No attempt produced enough valid questions."""


class AnswerCountMismatchError(LearningError):
    """Submitted answer count differs from the stored question count."""


class QuizNotReadyError(LearningError):
    """No stored questions exist for the subcategory."""
