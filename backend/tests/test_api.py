import pytest
from fastapi.testclient import TestClient

import main
from conftest import FakeLLM
from interview.agents import AgentController
from llm import client as llm_client_module
from llm.client import LLMClient
from utils.config import LLMConfig, config

LIMITS = {"background": 1, "mcq": 1, "coding": 1}
ANSWER = "I have built several REST services with FastAPI and Postgres."


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def client(monkeypatch, llm):
    monkeypatch.setattr(main, "agent_controller", AgentController(llm))
    monkeypatch.setattr(main, "_sessions", {})
    monkeypatch.setattr(config.interview, "stage_limits", dict(LIMITS))
    monkeypatch.setattr(config.interview, "randomize_limits", False)
    monkeypatch.setattr(config.interview, "pipeline", "standard")
    monkeypatch.setattr(config.interview, "score_blend", None)
    monkeypatch.setattr(config.interview, "non_coding_topics", [])
    with TestClient(main.app) as test_client:
        yield test_client


def _start(client, topic="Python", **extra):
    response = client.post("/start-interview", json={"topic": topic, **extra})
    assert response.status_code == 200
    return response.json()


def _answer(client, session_id, answer=ANSWER):
    return client.post(f"/interviews/{session_id}/answer", json={"answer": answer})


def test_root(client):
    body = client.get("/").json()
    assert body["status"] == "running"
    assert body["active_sessions"] == 0


def test_pipelines_listed(client):
    body = client.get("/pipelines").json()
    assert set(body) >= {"basic", "standard", "full", "scenario"}


def test_start_interview_returns_greeting(client, llm):
    body = _start(client, skills=["Python", "FastAPI"], experience_level="2-4")

    assert body["stage"] == "greeting"
    assert body["skills"] == ["Python", "FastAPI"]
    assert body["experience_level"] == "Intermediate"
    assert body["question"]["stage"] == "greeting"
    assert body["stages"] == ["greeting", "background", "mcq", "coding", "wrapup"]
    assert llm.question_prompts == []


def test_full_interview_flow(client, llm):
    session_id = _start(client)["session_id"]

    stages = []
    for _ in range(4):
        body = _answer(client, session_id).json()
        stages.append(body["stage"])
    assert stages == ["background", "mcq", "coding", "wrapup"]

    status = client.get(f"/interviews/{session_id}/status").json()
    assert status["stage"] == "wrapup"
    assert status["is_ended"] is False

    last = _answer(client, session_id, "Thanks, no questions.").json()
    assert last["interview_ended"] is True
    assert last["question"] is None

    report = client.get(f"/interviews/{session_id}/report").json()
    assert report["averages"]["answers_scored"] == 2
    assert report["averages"]["final_score"] == pytest.approx(2.0)
    assert set(report["reports"]) == {"candidate", "recruiter"}
    assert report["session"]["experience_level"] == "Advanced"
    assert len([t for t in report["transcript"] if t["role"] == "candidate"]) == 5

    client.get(f"/interviews/{session_id}/report")
    assert len(llm.report_prompts) == 2


def test_mcq_question_payload(client):
    session_id = _start(client)["session_id"]
    _answer(client, session_id)
    body = _answer(client, session_id).json()

    assert body["stage"] == "mcq"
    assert body["question"]["kind"] == "mcq"
    assert body["question"]["mcq"]["options"] == ["func", "def", "function", "lambda"]


def test_non_coding_topic_skips_coding(client):
    session_id = _start(client, topic="Docker")["session_id"]

    stages = [_answer(client, session_id).json()["stage"] for _ in range(3)]

    assert stages == ["background", "mcq", "wrapup"]
    assert client.get(f"/interviews/{session_id}/status").json()["coding_skipped"] is True


def test_skip_records_sentinel_without_scoring(client, llm):
    session_id = _start(client)["session_id"]
    _answer(client, session_id)
    _answer(client, session_id)

    body = client.post(f"/interviews/{session_id}/skip").json()

    assert body["answered_stage"] == "mcq"
    assert body["score"] is None
    assert body["stage"] == "coding"
    assert llm.evaluation_prompts == []


def test_evaluation_failure_returns_503_and_allows_retry(client, llm):
    session_id = _start(client)["session_id"]
    _answer(client, session_id)
    _answer(client, session_id)
    llm.evaluations = [None]

    failed = _answer(client, session_id, "B")
    assert failed.status_code == 503

    status = client.get(f"/interviews/{session_id}/status").json()
    assert status["stage"] == "mcq"
    assert status["answers_total"] == 1

    retry = _answer(client, session_id, "B")
    assert retry.status_code == 200
    assert retry.json()["stage"] == "coding"


def test_unknown_session_returns_404(client):
    assert client.get("/interviews/missing/status").status_code == 404
    assert _answer(client, "missing").status_code == 404
    assert client.delete("/interviews/missing").status_code == 404


def test_bad_start_requests_return_400_or_422(client):
    assert client.post("/start-interview", json={"topic": ""}).status_code == 422
    response = client.post("/start-interview", json={"topic": "Python", "pipeline": "marathon"})
    assert response.status_code == 400


def test_end_early_then_report(client):
    session_id = _start(client)["session_id"]
    _answer(client, session_id)

    assert client.get(f"/interviews/{session_id}/report").status_code == 409

    ended = client.post(f"/interviews/{session_id}/end").json()
    assert ended["status"] == "Interview ended"
    assert _answer(client, session_id).status_code == 409

    report = client.get(f"/interviews/{session_id}/report")
    assert report.status_code == 200
    assert report.json()["averages"]["final_score"] == 0


def test_list_and_delete_sessions(client):
    first = _start(client)["session_id"]
    second = _start(client, topic="Go")["session_id"]

    listed = {item["session_id"]: item for item in client.get("/interviews").json()}
    assert set(listed) == {first, second}
    assert listed[second]["topic"] == "Go"

    assert client.delete(f"/interviews/{first}").status_code == 200
    assert client.get(f"/interviews/{first}/status").status_code == 404
    assert [item["session_id"] for item in client.get("/interviews").json()] == [second]


def test_malformed_model_reply_keeps_session_consistent(client, monkeypatch):
    class ListBody:
        def raise_for_status(self):
            pass

        def json(self):
            return [{"choices": []}]

    monkeypatch.setattr(llm_client_module.requests, "post", lambda *args, **kwargs: ListBody())
    monkeypatch.setattr(main, "agent_controller", AgentController(LLMClient(LLMConfig(max_retries=0))))
    session_id = _start(client)["session_id"]
    _answer(client, session_id)

    response = _answer(client, session_id)

    assert response.status_code == 200
    body = response.json()
    assert body["stage"] == "mcq"
    assert body["question"]["is_fallback"] is True
    assert body["question"]["mcq"]["options"]

    status = client.get(f"/interviews/{session_id}/status").json()
    assert status["answers_total"] == 1
    assert status["stage_progress"] == {"asked": 0, "limit": 1}


def test_randomized_stage_limits_from_config(client, monkeypatch):
    monkeypatch.setattr(config.interview, "stage_limits", {"mcq": 1})
    monkeypatch.setattr(config.interview, "randomize_limits", True)
    session_id = _start(client)["session_id"]
    _answer(client, session_id)

    status = client.get(f"/interviews/{session_id}/status").json()

    assert status["stage"] == "background"
    assert 10 <= status["stage_progress"]["limit"] <= 15
