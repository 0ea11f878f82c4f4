import pytest

from studyhub.parsing import (
    parse_passage,
    parse_question_candidates,
    safe_json_parse,
    strip_code_fences,
)


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```\n') == '{"a": 1}'
    assert strip_code_fences("```\n[1, 2]\n```") == "[1, 2]"
    assert strip_code_fences("  plain text  ") == "plain text"


def test_passage_from_fenced_json():
    text = '```json\n{"title": "Opening a Bank Account", "content": "Bring your passport.", "difficulty": "Intermediate"}\n```'

    passage = parse_passage(text, fallback_title="Banking - Learning Guide")

    assert passage == {
        "title": "Opening a Bank Account",
        "content": "Bring your passport.",
        "difficulty": "Intermediate",
    }


def test_passage_defaults_missing_title_and_difficulty():
    passage = parse_passage('{"content": "Bring your passport."}', fallback_title="Banking - Learning Guide")

    assert passage["title"] == "Banking - Learning Guide"
    assert passage["difficulty"] == "Beginner"


def test_passage_regex_fallback_on_malformed_json():
    passage = parse_passage('prefix {"title":"T","content":"C"} suffix', fallback_title="Fallback")

    assert passage["title"] == "T"
    assert passage["content"] == "C"


def test_passage_regex_fallback_on_truncated_json():
    text = '{"title": "Housing 101", "content": "Read the lease \\"carefully\\" before signing'

    passage = parse_passage(text, fallback_title="Housing - Learning Guide")

    assert passage["title"] == "Housing 101"
    assert passage["content"] == 'Read the lease "carefully" before signing'


def test_passage_raw_text_fallback():
    text = "Public transport passes are often discounted for students."

    passage = parse_passage(text, fallback_title="Transportation - Learning Guide")

    assert passage == {
        "title": "Transportation - Learning Guide",
        "content": text,
        "difficulty": "Beginner",
    }


def test_safe_json_parse_recovers_from_trailing_noise_and_commas():
    assert safe_json_parse('{"title": "Foo"} Error: something went wrong') == {"title": "Foo"}
    assert safe_json_parse('{"a": 1, "b": 2,}') == {"a": 1, "b": 2}
    assert safe_json_parse('{"items": [1, 2') == {"items": [1, 2]}


def test_safe_json_parse_rejects_empty():
    with pytest.raises(ValueError):
        safe_json_parse("   ")


def test_question_candidates_from_array_and_wrapped_object():
    array = '```json\n[{"question": "Q1"}, {"question": "Q2"}]\n```'
    wrapped = 'Here you go: {"questions": [{"question": "Q1"}]}'

    assert len(parse_question_candidates(array)) == 2
    assert parse_question_candidates(wrapped) == [{"question": "Q1"}]


@pytest.mark.parametrize("text", ["no json at all", '{"title": "not a quiz"}', '"just a string"'])
def test_question_candidates_require_a_list(text):
    with pytest.raises(ValueError):
        parse_question_candidates(text)
