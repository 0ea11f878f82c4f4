import logging
import os

from langchain_google_genai import ChatGoogleGenerativeAI

from .errors import QuotaExceededError

logger = logging.getLogger(__name__)

QUOTA_MARKERS = ("quota", "429", "too many requests", "resource_exhausted")


def is_quota_error(exc: BaseException) -> bool:
    """True when an exception message signals quota or rate limiting."""
    msg = str(exc).lower()
    return any(marker in msg for marker in QUOTA_MARKERS)


def generate_text(backend, prompt: str) -> str:
    """Call any backend, turning quota-signalling errors into QuotaExceededError."""
    try:
        return backend.generate_content(prompt)
    except QuotaExceededError:
        raise
    except Exception as e:
        if is_quota_error(e):
            logger.warning("Generative backend quota exhausted: %s", e)
            raise QuotaExceededError() from e
        raise


class GeminiBackend:
    """Text generation through Gemini.

    Anything with a ``generate_content(prompt) -> str`` method can stand in
    for this class (tests pass a scripted fake).
    """

    def __init__(self, model=None):
        self.model = model or self._build_model()

    @staticmethod
    def _build_model() -> ChatGoogleGenerativeAI:
        """Create the Gemini chat model with our preferred settings."""
        api_key = os.getenv("GOOGLE_API_KEY")
        if not api_key:
            raise RuntimeError("GOOGLE_API_KEY environment variable is not set.")

        return ChatGoogleGenerativeAI(
            model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
            temperature=float(os.getenv("GEMINI_TEMPERATURE", "0.4")),
            max_output_tokens=int(os.getenv("GEMINI_MAX_OUTPUT_TOKENS", "4096")),
            google_api_key=api_key,
        )

    def generate_content(self, prompt: str) -> str:
        """Send one prompt and return the response text.

        Raises QuotaExceededError on rate limiting and ValueError on an empty reply.
        No retries happen here.
        """
        try:
            result = self.model.invoke(prompt)
        except Exception as e:
            if is_quota_error(e):
                logger.warning("Gemini quota exhausted: %s", e)
                raise QuotaExceededError() from e
            raise

        content = getattr(result, "content", None)
        if isinstance(content, list):
            # multi-part responses come back as a list of text chunks
            content = "".join(part if isinstance(part, str) else part.get("text", "") for part in content)
        if not content or not content.strip():
            raise ValueError("LLM returned empty response. Check your API key and model name.")
        return content
