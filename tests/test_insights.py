from __future__ import annotations

import asyncio
import threading
from types import SimpleNamespace

import pytest

from services.csv_parser import parse_connections
from services.insights import (
    FAILURE_MESSAGE,
    NO_INSIGHTS_MESSAGE,
    InsightRequester,
    InsightRequestPending,
    InsightState,
    build_insight_prompt,
    fetch_network_insights,
    get_network_insights,
)
from services.llm_client import LLMClient, StubLLMClient, get_llm_client


def _resp(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class _FakeClient:
    def __init__(self, content="## Focus\nMostly manufacturing."):
        self.content = content
        self.calls = []

    def chat(self, **kwargs):
        self.calls.append(kwargs)
        return _resp(self.content)


class _FailingClient:
    def chat(self, **kwargs):
        raise ConnectionError("upstream unavailable")


class _BlockingClient:
    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()
        self._lock = threading.Lock()
        self.in_flight = 0
        self.max_in_flight = 0
        self.calls = 0

    def chat(self, **kwargs):
        with self._lock:
            self.calls += 1
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            self.started.set()
            self.release.wait(5)
            return _resp("done")
        finally:
            with self._lock:
                self.in_flight -= 1


@pytest.fixture
def records(sample_csv):
    return parse_connections(sample_csv)


def test_prompt_contains_roles_companies_and_total(records):
    prompt = build_insight_prompt(records)
    assert "Top Companies: Acme (2), Globex (1)" in prompt
    assert "Sample Roles: Engineer at Acme, Manager at Acme, Analyst at Globex" in prompt
    assert "Total Connections: 3" in prompt
    assert "Three specific networking strategies" in prompt


def test_prompt_is_bounded(records):
    prompt = build_insight_prompt(records, sample_size=1, top_n=1)
    assert "Sample Roles: Engineer at Acme\n" in prompt
    assert "Top Companies: Acme (2)\n" in prompt
    # Total still reflects every record
    assert "Total Connections: 3" in prompt


def test_fetch_sends_prompt_through_client(records):
    client = _FakeClient()
    text = fetch_network_insights(records, client)
    assert text == "## Focus\nMostly manufacturing."
    call = client.calls[0]
    assert call["use_case"] == "network_insights"
    assert call["messages"][-1]["role"] == "user"
    assert "Total Connections: 3" in call["messages"][-1]["content"]


def test_empty_completion_gives_placeholder(records):
    assert fetch_network_insights(records, _FakeClient(content="")) == NO_INSIGHTS_MESSAGE
    assert fetch_network_insights(records, _FakeClient(content=None)) == NO_INSIGHTS_MESSAGE


def test_failures_become_fixed_message(records):
    with pytest.raises(ConnectionError):
        fetch_network_insights(records, _FailingClient())
    assert get_network_insights(records, _FailingClient()) == FAILURE_MESSAGE


def test_requester_success(records):
    requester = InsightRequester(_FakeClient(content="insightful"))
    assert requester.state is InsightState.IDLE
    text = asyncio.run(requester.request(records))
    assert text == "insightful"
    assert requester.state is InsightState.SUCCESS
    assert requester.text == "insightful"
    requester.reset()
    assert (requester.state, requester.text) == (InsightState.IDLE, "")


def test_requester_failure(records):
    requester = InsightRequester(_FailingClient())
    text = asyncio.run(requester.request(records))
    assert text == FAILURE_MESSAGE
    assert requester.state is InsightState.FAILURE


def test_requester_skips_empty_network():
    client = _FakeClient()
    requester = InsightRequester(client)
    assert asyncio.run(requester.request([])) is None
    assert requester.state is InsightState.IDLE
    assert client.calls == []


def test_only_one_request_in_flight(records):
    client = _BlockingClient()
    requester = InsightRequester(client)

    async def scenario():
        task = asyncio.create_task(requester.request(records))
        await asyncio.to_thread(client.started.wait, 5)
        assert requester.state is InsightState.PENDING
        with pytest.raises(InsightRequestPending):
            await requester.request(records)
        with pytest.raises(InsightRequestPending):
            requester.reset()
        client.release.set()
        return await task

    assert asyncio.run(scenario()) == "done"
    assert requester.state is InsightState.SUCCESS


def test_cancel_holds_slot_until_worker_returns(records):
    client = _BlockingClient()
    requester = InsightRequester(client)

    async def scenario():
        task = asyncio.create_task(requester.request(records))
        await asyncio.to_thread(client.started.wait, 5)
        task.cancel()
        try:
            with pytest.raises(asyncio.CancelledError):
                await task
            # The upstream call is still running in its thread
            assert requester.state is InsightState.PENDING
            with pytest.raises(InsightRequestPending):
                await requester.request(records)
        finally:
            client.release.set()

        for _ in range(500):
            if not requester.is_pending:
                break
            await asyncio.sleep(0.01)
        assert requester.state is InsightState.IDLE
        assert requester.text == ""
        return await requester.request(records)

    assert asyncio.run(scenario()) == "done"
    assert requester.state is InsightState.SUCCESS
    assert client.calls == 2
    assert client.max_in_flight == 1


def test_stub_client_only_in_test_env(monkeypatch):
    monkeypatch.setenv("AI_PROVIDER", "stub")
    monkeypatch.setenv("RUN_ENV", "test")
    from config.settings import get_settings
    get_settings.cache_clear()
    assert isinstance(get_llm_client(), StubLLMClient)

    monkeypatch.setenv("RUN_ENV", "local")
    get_settings.cache_clear()
    with pytest.raises(RuntimeError):
        get_llm_client()


def test_openai_client_requires_ai_enabled(monkeypatch):
    from config.settings import get_settings

    monkeypatch.setenv("AI_PROVIDER", "openai")
    monkeypatch.setenv("AI_ENABLED", "false")
    get_settings.cache_clear()
    with pytest.raises(RuntimeError):
        get_llm_client()

    monkeypatch.setenv("AI_ENABLED", "true")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    get_settings.cache_clear()
    assert isinstance(get_llm_client(), LLMClient)


def test_unrouted_provider_not_implemented(monkeypatch):
    import config.llm_routes as routes

    monkeypatch.setitem(routes.ROUTES, "network_insights", {"provider": "gemini"})
    with pytest.raises(NotImplementedError):
        LLMClient().chat(use_case="network_insights", messages=[{"role": "user", "content": "hi"}])
