from langchain_core.prompts import PromptTemplate  # type: ignore

# Prompt to write a learning passage for a subcategory.
LEARNING_CONTENT_PROMPT = PromptTemplate(
    input_variables=["topic", "personalization"],
    template=(
        "Create comprehensive learning content for international students about: {topic}\n"
        "{personalization}\n"
        "Please provide:\n"
        "1. A clear, engaging title\n"
        "2. Detailed educational content (800-1200 words) that covers:\n"
        "   - Key concepts and important information\n"
        "   - Practical tips and real-world examples\n"
        "   - Common challenges and how to overcome them\n"
        "   - Cultural considerations and best practices\n"
        "3. Appropriate difficulty level (Beginner, Intermediate, or Advanced)\n\n"
        "Return ONLY a valid JSON object with these exact keys: title, content, difficulty.\n"
        "Do not wrap the JSON in markdown code fences.\n"
    ),
)

# Shared output instructions for both question prompts.
_QUESTION_FORMAT = (
    "Each question must have:\n"
    " - question: a clear, specific question (10-300 characters)\n"
    " - options: an array of exactly 4 distinct answer options (plain text, no 'A.' style prefixes)\n"
    " - correctAnswer: the exact text of the correct option\n"
    " - explanation: a brief explanation of why the answer is correct\n"
    " - difficulty: one of 'Beginner', 'Intermediate', 'Advanced'\n\n"
    "Never use 'All of the above', 'None of the above' or combined options such as 'A and B'.\n"
    "Return ONLY a JSON array of question objects.\n"
)

# Prompt to create questions strictly from a passage the student studied.
CONTENT_QUESTIONS_PROMPT = PromptTemplate(
    input_variables=["content", "count"],
    template=(
        "Based on the following learning content for international students, "
        "generate exactly {count} multiple-choice quiz questions.\n"
        "Use ONLY information stated in the content; do not add outside facts.\n\n"
        "CONTENT:\n{content}\n\n"
        + _QUESTION_FORMAT
    ),
)

# Prompt to create general questions when the student skipped the passage.
GENERAL_QUESTIONS_PROMPT = PromptTemplate(
    input_variables=["topic", "personalization", "count"],
    template=(
        "Generate exactly {count} multiple-choice quiz questions about {topic} for international students.\n"
        "{personalization}\n"
        "The questions should test practical general knowledge about this topic "
        "without requiring specific content study.\n\n"
        + _QUESTION_FORMAT
    ),
)


def personalization_clause(university) -> str:
    """Sentence tailoring a prompt to the student's university, or empty."""
    if not university:
        return ""
    return (
        f"Tailor it to students at {university}: mention campus-specific resources, "
        "offices and local details where they are well known."
    )
