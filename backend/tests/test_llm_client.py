import pytest
import requests

from interview.agents import QuestionGenerator
from llm import client as client_module
from llm.client import LLMClient
from models.schemas import ExperienceLevel, InterviewStage
from utils.config import LLMConfig


class FakeResponse:
    def __init__(self, body, status_code=200):
        self.body = body
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.body


def _completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def post_calls(monkeypatch):
    """Replace requests.post; set ``post_calls.body`` to choose the reply."""
    class Calls(list):
        body = _completion("What is a Python generator?")
        status_code = 200

    calls = Calls()

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append({"url": url, "json": json, "headers": headers})
        return FakeResponse(calls.body, calls.status_code)

    monkeypatch.setattr(client_module.requests, "post", fake_post)
    monkeypatch.setattr(client_module.time, "sleep", lambda seconds: None)
    return calls


def _client(**overrides):
    settings = dict(base_url="http://llm.test", api_key="secret", max_retries=1)
    settings.update(overrides)
    return LLMClient(LLMConfig(**settings))


def test_generate_question_cleans_content(post_calls):
    post_calls.body = _completion("<think>easy one</think>What is a Python generator?")

    text, valid = _client().generate_question("system", "user")

    assert valid
    assert text == "What is a Python generator?"
    request = post_calls[0]
    assert request["url"] == "http://llm.test/v1/chat/completions"
    assert request["headers"]["Authorization"] == "Bearer secret"
    assert [m["role"] for m in request["json"]["messages"]] == ["system", "user"]


def test_azure_auth_header(post_calls):
    _client(auth_style="azure").generate("system", "user")
    headers = post_calls[0]["headers"]
    assert headers["api-key"] == "secret"
    assert "Authorization" not in headers


@pytest.mark.parametrize(
    "body",
    [
        [{"message": {"content": "What is a decorator?"}}],
        "What is a decorator?",
        {"choices": "What is a decorator?"},
        {"choices": []},
        {"choices": [None]},
        {"choices": [{"message": "What is a decorator?"}]},
        {"choices": [{"message": {"content": ["What is a decorator?"]}}]},
    ],
)
def test_malformed_body_is_invalid(post_calls, body):
    post_calls.body = body

    response = _client().generate("system", "user")

    assert not response.is_valid
    assert response.content == ""
    assert _client().generate_question("system", "user") == ("", False)


def test_http_errors_are_retried_then_reported(post_calls):
    post_calls.status_code = 500

    response = _client(max_retries=2).generate("system", "user")

    assert not response.is_valid
    assert "error" in response.raw_response
    assert len(post_calls) == 3


def test_generate_json_fixes_trailing_commas(post_calls):
    post_calls.body = _completion('```json\n{"technical": 2, "communication": 3,}\n```')

    parsed, valid = _client().generate_json("system", "user")

    assert valid
    assert parsed == {"technical": 2, "communication": 3}


def test_list_body_falls_back_to_canned_question(post_calls):
    post_calls.body = [{"unexpected": True}]
    generator = QuestionGenerator(_client())

    question = generator.next_question(
        InterviewStage.BACKGROUND, "Python", "Python", ExperienceLevel.BEGINNER, history=[]
    )

    assert question.is_fallback
    assert "Python" in question.text
