"""Tests for the Trello board data client."""

from datetime import datetime, timezone

import httpx
import pytest

from trello_reports.core.errors import RemoteAPIError
from trello_reports.integrations.trello_integration import TrelloIntegration

BOARD = {"id": "B1", "name": "Engineering", "desc": "Platform team", "url": "https://trello.com/b/B1"}
LISTS = [{"id": "L1", "name": "To Do"}, {"id": "L2", "name": "Done"}]
CARDS = [
    {
        "id": "C1",
        "name": "Write docs",
        "desc": "User guide",
        "idList": "L1",
        "due": "2024-01-10T12:00:00.000Z",
        "labels": [{"id": "lb1", "name": "Urgent", "color": "red"}],
        "idMembers": ["M1"],
    }
]
MEMBERS = [{"id": "M1", "fullName": "Ada Lovelace", "username": "ada"}]
ACTIONS = [
    {
        "id": f"A{i}",
        "type": "createCard",
        "date": "2024-01-05T10:00:00.000Z",
        "memberCreator": {"fullName": "Ada Lovelace"},
        "data": {"card": {"name": f"Card {i}"}, "list": {"name": "To Do"}},
    }
    for i in range(30)
]


def make_client(overrides=None, requests=None):
    """Client whose transport serves canned payloads; overrides map path -> status code."""
    overrides = overrides or {}
    routes = {
        "/1/members/me/boards": [BOARD],
        "/1/boards/B1": BOARD,
        "/1/boards/B1/lists": LISTS,
        "/1/boards/B1/cards": CARDS,
        "/1/boards/B1/members": MEMBERS,
        "/1/boards/B1/actions": ACTIONS,
    }

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        path = request.url.path
        if path in overrides:
            return httpx.Response(overrides[path], json={"message": "nope"})
        if path not in routes:
            return httpx.Response(404, text="board not found")
        return httpx.Response(200, json=routes[path])

    return TrelloIntegration(
        "user-token",
        "user-secret",
        api_key="consumer-key",
        api_secret="consumer-secret",
        transport=httpx.MockTransport(handler),
    )


class TestFetching:
    def test_list_boards(self):
        boards = make_client().list_boards()
        assert [(b.id, b.name, b.description) for b in boards] == [("B1", "Engineering", "Platform team")]

    def test_requests_are_oauth_signed(self):
        requests = []
        make_client(requests=requests).list_boards()

        auth_header = requests[0].headers["Authorization"]
        assert auth_header.startswith("OAuth ")
        assert 'oauth_token="user-token"' in auth_header
        assert 'oauth_consumer_key="consumer-key"' in auth_header
        assert requests[0].url.params["fields"] == "name,desc,url,shortUrl"

    def test_cards_are_normalized(self):
        card = make_client().get_cards("B1")[0]
        assert card.list_id == "L1"
        assert card.description == "User guide"
        assert card.due.year == 2024
        assert card.labels[0].name == "Urgent"

    def test_non_2xx_raises_remote_api_error(self):
        client = make_client(overrides={"/1/members/me/boards": 401})
        with pytest.raises(RemoteAPIError) as exc_info:
            client.list_boards()
        assert exc_info.value.status_code == 401

    def test_missing_board_raises(self):
        with pytest.raises(RemoteAPIError):
            make_client().get_board_details("nope")

    def test_transport_failure_raises_remote_api_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = TrelloIntegration(
            "t", "s", api_key="k", api_secret="s", transport=httpx.MockTransport(handler)
        )
        with pytest.raises(RemoteAPIError):
            client.list_boards()

    def test_activity_uses_limit_and_optional_since(self):
        requests = []
        client = make_client(requests=requests)

        client.get_board_activity("B1")
        client.get_board_activity("B1", since=datetime(2024, 1, 1))

        assert requests[0].url.params["limit"] == "50"
        assert "since" not in requests[0].url.params
        assert requests[1].url.params["since"] == datetime(2024, 1, 1).astimezone().isoformat()

    def test_since_carries_a_utc_offset(self):
        requests = []
        client = make_client(requests=requests)

        client.get_board_activity("B1", since=datetime(2024, 1, 1))
        client.get_board_activity("B1", since=datetime(2024, 1, 1, tzinfo=timezone.utc))

        assert datetime.fromisoformat(requests[0].url.params["since"]).tzinfo is not None
        sent = datetime.fromisoformat(requests[1].url.params["since"])
        assert sent == datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestSnapshot:
    def test_snapshot_aggregates_everything(self):
        snapshot = make_client().get_board_snapshot("B1", since=datetime(2024, 1, 1))

        assert snapshot.board.name == "Engineering"
        assert [l.name for l in snapshot.lists] == ["To Do", "Done"]
        assert snapshot.cards[0].name == "Write docs"
        assert snapshot.members[0].username == "ada"
        assert len(snapshot.activities) == 20
        assert snapshot.activities[0].id == "A0"

    def test_activity_failure_degrades_to_empty(self):
        client = make_client(overrides={"/1/boards/B1/actions": 500})
        snapshot = client.get_board_snapshot("B1")

        assert snapshot.activities == []
        assert snapshot.cards[0].name == "Write docs"

    @pytest.mark.parametrize(
        "path",
        ["/1/boards/B1", "/1/boards/B1/lists", "/1/boards/B1/cards", "/1/boards/B1/members"],
    )
    def test_required_fetch_failure_fails_snapshot(self, path):
        client = make_client(overrides={path: 500})
        with pytest.raises(RemoteAPIError):
            client.get_board_snapshot("B1")
