from typing import NamedTuple


class Topic(NamedTuple):
    name: str
    description: str
    category: str


TOPICS = {
    "campus-life": Topic(
        "Campus Life",
        "Campus Life and Social Norms - Understanding campus culture, social interactions, "
        "and general mannerisms for international students",
        "culture",
    ),
    "general-mannerisms": Topic(
        "General Mannerisms",
        "General Mannerisms and Social Etiquette - Understanding social norms, communication styles, "
        "cultural behaviors, and proper etiquette for international students",
        "culture",
    ),
    "banking": Topic(
        "Banking",
        "Banking and Financial Management - Setting up bank accounts, understanding credit, "
        "managing finances, and financial literacy",
        "practical-skills",
    ),
    "transportation": Topic(
        "Transportation",
        "Transportation Systems - Using public transport, campus shuttles, ride-sharing services, "
        "and getting around the city",
        "practical-skills",
    ),
    "housing": Topic(
        "Housing",
        "Housing and Accommodation - Finding housing, understanding leases, roommate dynamics, "
        "and accommodation options",
        "practical-skills",
    ),
    "healthcare": Topic(
        "Healthcare",
        "Healthcare and Insurance - Understanding health insurance, finding doctors, "
        "emergency procedures, and healthcare systems",
        "practical-skills",
    ),
    "terminology": Topic(
        "Terminology",
        "Modern Terminology and Slang - Gen Z slang, academic terminology, cultural references, "
        "and modern language usage",
        "language",
    ),
    "visa-status": Topic(
        "Visa Status",
        "Maintaining Visa Status - Visa requirements, compliance, reporting obligations, "
        "and maintaining legal status",
        "legal-immigration",
    ),
    "campus-jobs": Topic(
        "Campus Jobs",
        "Campus Employment - Work authorization, job opportunities, tax implications, "
        "and employment regulations",
        "legal-immigration",
    ),
    "laws": Topic(
        "Laws",
        "Important Laws and Regulations - Legal requirements, rights and responsibilities, "
        "compliance, and legal awareness",
        "legal-immigration",
    ),
    "student-office": Topic(
        "Student Office",
        "International Student Office Updates - Staying updated with requirements, paperwork, "
        "deadlines, and administrative processes",
        "legal-immigration",
    ),
}

# Topics whose content depends on the student's university.
PERSONALIZED_TOPICS = frozenset(
    {"campus-life", "housing", "transportation", "campus-jobs", "student-office"}
)

DEFAULT_DESCRIPTION = "General international student guidance"


def get_topic(topic_id: str) -> Topic:
    """Return catalog info for a subcategory, with a generic entry for unknown ids."""
    return TOPICS.get(topic_id) or Topic(topic_id, DEFAULT_DESCRIPTION, "general")


def is_personalized(topic_id: str) -> bool:
    return topic_id in PERSONALIZED_TOPICS
