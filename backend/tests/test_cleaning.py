from interview.topics import get_boilerplate, get_boilerplate_code, is_non_coding
from utils.cleaning import ResponseCleaner


def test_strip_reasoning_blocks():
    text = "<think>The candidate seems junior.</think>What is a closure?"
    assert ResponseCleaner.strip_reasoning(text) == "What is a closure?"
    assert ResponseCleaner.strip_reasoning("Explain GIL. <think>unfinished") == "Explain GIL."


def test_clean_question_rejects_short_output():
    assert ResponseCleaner.clean_question("ok") == ("", False)
    text, valid = ResponseCleaner.clean_question("  What is dependency injection?  ")
    assert valid
    assert text == "What is dependency injection?"


def test_clean_json_response_handles_fences():
    raw = 'Here you go:\n```json\n{"technical": 2, "communication": 3}\n```'
    assert ResponseCleaner.clean_json_response(raw) == '{"technical": 2, "communication": 3}'
    assert ResponseCleaner.clean_json_response("no json here") == "{}"


def test_parse_mcq_with_code():
    text = (
        "Question: What does this print?\n"
        "```python\n"
        "print(1 + 1)\n"
        "```\n"
        "Options:\n"
        "A) 1\n"
        "B) 2\n"
        "C) 11\n"
        "D) Error"
    )
    mcq = ResponseCleaner.parse_mcq(text)
    assert mcq.question == "What does this print?"
    assert mcq.code == "print(1 + 1)"
    assert mcq.options == ["1", "2", "11", "Error"]


def test_parse_mcq_requires_options():
    assert ResponseCleaner.parse_mcq("What is a decorator?") is None
    assert ResponseCleaner.parse_mcq("Question: Pick one\nOptions:\nnothing here") is None


def test_parse_coding_with_boilerplate():
    text = (
        "Solve this problem: Reverse a string.\n"
        "Boilerplate Code:\n"
        "```python\n"
        "def reverse(s):\n"
        "    pass\n"
        "```"
    )
    coding = ResponseCleaner.parse_coding(text, "Python")
    assert coding.problem == "Reverse a string."
    assert coding.language == "python"
    assert coding.boilerplate == "def reverse(s):\n    pass\n"


def test_parse_coding_falls_back_to_skill_boilerplate():
    coding = ResponseCleaner.parse_coding("Solve this problem: Sum a slice of ints.", "Go")
    assert coding.problem == "Sum a slice of ints."
    assert coding.language == "go"
    assert coding.boilerplate.startswith("package main")


def test_boilerplate_lookup():
    assert get_boilerplate_code("PYTHON") == get_boilerplate_code("django")
    assert get_boilerplate("Java Spring Boot")[0] == "java"
    assert get_boilerplate_code("COBOL") == ""


def test_non_coding_lookup():
    assert is_non_coding("Machine Learning", [])
    assert is_non_coding("Python", ["react.js", "Cloud Computing "])
    assert not is_non_coding("Python", ["Django"])
    assert not is_non_coding("Docker Compose", [])
