import pytest

from studyhub.validator import is_valid, validate_candidate

from conftest import make_question


def test_well_formed_question_is_accepted_unchanged():
    candidate = make_question(1)

    result = validate_candidate(candidate)

    assert result == candidate
    assert result is not candidate


def test_accepted_options_are_four_distinct_and_answer_is_one_of_them():
    result = validate_candidate(make_question(1, correctAnswer="  registrar 1 "))

    normalized = {o.strip().lower() for o in result["options"]}
    assert len(result["options"]) == 4
    assert len(normalized) == 4
    assert result["correctAnswer"].strip() in [o.strip() for o in result["options"]]


def test_case_insensitive_answer_is_rewritten_to_option_text():
    result = validate_candidate(make_question(1, correctAnswer="LIBRARY 1"))

    assert result["correctAnswer"] == "Library 1"


@pytest.mark.parametrize("answer", ["B. Library 1", "b) Library 1", "B) library 1"])
def test_letter_prefixed_answer_is_cleaned_up(answer):
    result = validate_candidate(make_question(1, correctAnswer=answer))

    assert result is not None
    assert result["correctAnswer"] == "Library 1"


def test_letter_prefix_is_stripped_from_options_too():
    candidate = make_question(
        1,
        options=["A. Registrar", "B. Library", "C. Gym", "D. Cafeteria"],
        correctAnswer="Library",
    )

    assert validate_candidate(candidate)["correctAnswer"] == "B. Library"


def test_input_candidate_is_not_mutated():
    candidate = make_question(1, correctAnswer="b. library 1")

    validate_candidate(candidate)

    assert candidate["correctAnswer"] == "b. library 1"


@pytest.mark.parametrize(
    "overrides",
    [
        {"question": None},
        {"question": 42},
        {"question": "Too short"},
        {"question": "x" * 301},
        {"options": None},
        {"options": "Registrar 1"},
        {"options": ["Registrar 1", "Library 1", "Gym 1"]},
        {"options": ["Registrar 1", "Library 1", "Gym 1", "Cafeteria 1", "Dorm 1"]},
        {"options": ["Registrar 1", "Library 1", "Gym 1", None]},
        {"options": ["Registrar 1", "Library 1", "Gym 1", " X "]},
        {"options": ["Registrar 1", "Library 1", "Gym 1", "y" * 201]},
        {"options": ["Registrar 1", "Library 1", "Gym 1", " registrar 1 "]},
        {"correctAnswer": None},
        {"correctAnswer": "Student union"},
    ],
)
def test_malformed_candidates_are_rejected(overrides):
    assert validate_candidate(make_question(1, **overrides)) is None


def test_missing_answer_key_is_rejected():
    candidate = make_question(1)
    del candidate["correctAnswer"]

    assert not is_valid(candidate)


@pytest.mark.parametrize(
    "meta_option",
    ["All of the above", "None of the above", "Both A and B", "A and B", "All of these", "None of these"],
)
def test_meta_answers_are_rejected_even_when_listed(meta_option):
    candidate = make_question(
        1,
        options=["Registrar 1", "Library 1", "Gym 1", meta_option],
        correctAnswer=meta_option.upper(),
    )

    assert validate_candidate(candidate) is None


def test_meta_phrase_matches_as_substring():
    candidate = make_question(
        1,
        options=["Get a visa and bank card", "Library 1", "Gym 1", "Cafeteria 1"],
        correctAnswer="Get a visa and bank card",
    )

    assert validate_candidate(candidate) is None


def test_meta_phrase_in_a_distractor_is_allowed():
    candidate = make_question(1, options=["Registrar 1", "Library 1", "Gym 1", "All of the above"])

    assert is_valid(candidate)


@pytest.mark.parametrize("candidate", [None, "question", ["a", "b"], 3])
def test_non_objects_are_rejected(candidate):
    assert validate_candidate(candidate) is None


def test_boundary_lengths_are_accepted():
    candidate = make_question(
        1,
        question="q" * 10,
        options=["ab", "cd", "ef", "g" * 200],
        correctAnswer="ab",
    )

    assert is_valid(candidate)
