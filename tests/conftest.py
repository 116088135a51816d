"""Pytest configuration and fixtures."""

import os
from collections.abc import Generator
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

# Set test environment before importing app modules
os.environ["TRELLO_API_KEY"] = "test-consumer-key"
os.environ["TRELLO_API_SECRET"] = "test-consumer-secret"
os.environ["LLM_PROVIDER"] = "groq"
os.environ["GROQ_API_KEY"] = "test-groq-key"
os.environ["AGENT_AUTOSTART"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from trello_reports.agents.base import NarrativeGenerator
from trello_reports.core.errors import GenerationError, RemoteAPIError
from trello_reports.core.scheduler import ReportAgent, ReportSchedule
from trello_reports.db.report_store import ReportStore
from trello_reports.main import app
from trello_reports.models.board import Board, BoardList, BoardSnapshot, Card, Member
from trello_reports.routes.deps import get_chat_backend, get_report_agent

# 2024-01-01 is both a Monday and the first of the month.
MONDAY_FIRST = datetime(2024, 1, 1, 9, 30)
MONDAY = datetime(2024, 1, 8, 9, 30)
FIRST_OF_MONTH = datetime(2024, 2, 1, 9, 30)
TUESDAY_15TH = datetime(2024, 10, 15, 9, 30)


class FakeTrello:
    """Stands in for TrelloIntegration; boards listed in `fail_ids` raise on snapshot."""

    def __init__(self, boards=None, fail_ids=(), fail_listing=False):
        self.boards = boards if boards is not None else [Board(id="B1", name="Engineering")]
        self.fail_ids = set(fail_ids)
        self.fail_listing = fail_listing
        self.snapshot_calls = []

    def list_boards(self):
        if self.fail_listing:
            raise RemoteAPIError("Trello API returned 500 for /members/me/boards", status_code=500)
        return list(self.boards)

    def get_board_details(self, board_id):
        for board in self.boards:
            if board.id == board_id:
                return board
        raise RemoteAPIError(f"Trello API returned 404 for /boards/{board_id}", status_code=404)

    def get_board_snapshot(self, board_id, since=None):
        self.snapshot_calls.append((board_id, since))
        if board_id in self.fail_ids:
            raise RemoteAPIError(f"Trello API returned 500 for /boards/{board_id}", status_code=500)
        board = self.get_board_details(board_id)
        return BoardSnapshot(
            board=board,
            lists=[BoardList(id="L1", name="Doing")],
            cards=[Card(id="C1", name="Ship it", idList="L1")],
            members=[Member(id="M1", fullName="Ada Lovelace", username="ada")],
        )


class FakeGenerator(NarrativeGenerator):
    name = "fake"

    def __init__(self, reply="## Executive Summary\nAll good.", fail=False):
        self.reply = reply
        self.fail = fail
        self.calls = []

    def _complete(self, messages, temperature, max_tokens):
        self.calls.append({"messages": messages, "temperature": temperature, "max_tokens": max_tokens})
        if self.fail:
            raise GenerationError("No response from model")
        return self.reply


@pytest.fixture
def store(tmp_path) -> ReportStore:
    return ReportStore(tmp_path / "reports")


@pytest.fixture
def fake_trello() -> FakeTrello:
    return FakeTrello()


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def make_agent(store, fake_trello, fake_generator):
    """Build an agent around the fakes with a fixed clock."""

    def _make(now=MONDAY, schedule=None, **overrides):
        kwargs = {
            "store": store,
            "trello": fake_trello,
            "generator": fake_generator,
            "clock": lambda: now,
        }
        kwargs.update(overrides)
        return ReportAgent("token", "secret", schedule or ReportSchedule(), **kwargs)

    return _make


@pytest.fixture
def agent(make_agent) -> Generator[ReportAgent, None, None]:
    agent = make_agent()
    yield agent
    if agent.is_running:
        agent.stop()


@pytest.fixture
def client(agent, fake_generator) -> Generator[TestClient, None, None]:
    """Test client with the report agent and chat backend overridden."""
    app.dependency_overrides[get_report_agent] = lambda: agent
    app.dependency_overrides[get_chat_backend] = lambda: fake_generator
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
