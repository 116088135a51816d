import logging
from datetime import datetime
from typing import Any, List, Optional, Type, TypeVar

import httpx
from authlib.integrations.httpx_client import OAuth1Auth
from pydantic import BaseModel, ValidationError

from trello_reports.core.config import settings
from trello_reports.core.errors import RemoteAPIError
from trello_reports.models.board import (
    Activity,
    Board,
    BoardList,
    BoardSnapshot,
    Card,
    Member,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Trello's page size for /actions; the snapshot keeps only the newest entries.
ACTIVITY_PAGE_SIZE = 50
SNAPSHOT_ACTIVITY_LIMIT = 20


class TrelloIntegration:
    """
    Read-only access to the Trello REST API on behalf of one user.
    Requests are signed with OAuth 1.0a using the app's consumer key and the
    user's access token.
    """

    BOARD_FIELDS = "name,desc,url,shortUrl"
    LIST_FIELDS = "name,closed,idBoard,pos"
    CARD_FIELDS = "name,desc,closed,idBoard,idList,due,labels,idMembers,dateLastActivity"
    MEMBER_FIELDS = "fullName,username,avatarUrl"

    def __init__(
        self,
        access_token: str,
        access_secret: str,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 20,
    ):
        self.access_token = access_token
        self.access_secret = access_secret
        self.api_key = api_key if api_key is not None else settings.TRELLO_API_KEY
        self.api_secret = api_secret if api_secret is not None else settings.TRELLO_API_SECRET
        self.base_url = (base_url or settings.TRELLO_API_BASE_URL).rstrip("/")
        self.transport = transport
        self.timeout = timeout

    def list_boards(self) -> List[Board]:
        """Boards visible to the authenticated member, in API order."""
        data = self._get("/members/me/boards", {"fields": self.BOARD_FIELDS})
        return self._parse_list(data, Board, "boards")

    def get_board_details(self, board_id: str) -> Board:
        data = self._get(f"/boards/{board_id}", {"fields": self.BOARD_FIELDS})
        if not isinstance(data, dict):
            raise RemoteAPIError(f"Unexpected board payload for {board_id}")
        try:
            return Board.model_validate(data)
        except ValidationError as e:
            raise RemoteAPIError(f"Error parsing board data: {e}") from e

    def get_lists(self, board_id: str) -> List[BoardList]:
        data = self._get(f"/boards/{board_id}/lists", {"fields": self.LIST_FIELDS})
        return self._parse_list(data, BoardList, "lists")

    def get_cards(self, board_id: str) -> List[Card]:
        data = self._get(
            f"/boards/{board_id}/cards",
            {
                "fields": self.CARD_FIELDS,
                "members": "true",
                "member_fields": self.MEMBER_FIELDS,
            },
        )
        return self._parse_list(data, Card, "cards")

    def get_board_members(self, board_id: str) -> List[Member]:
        data = self._get(f"/boards/{board_id}/members", {"fields": self.MEMBER_FIELDS})
        return self._parse_list(data, Member, "members")

    def get_board_activity(self, board_id: str, since: Optional[datetime] = None) -> List[Activity]:
        """
        Recent actions on the board, newest first.
        Without `since` no lower time bound is sent. Naive datetimes are local time
        and are sent with their UTC offset.
        """
        params = {"limit": str(ACTIVITY_PAGE_SIZE)}
        if since is not None:
            params["since"] = since.astimezone().isoformat()
        data = self._get(f"/boards/{board_id}/actions", params)
        return self._parse_list(data, Activity, "activity")

    def get_board_snapshot(self, board_id: str, since: Optional[datetime] = None) -> BoardSnapshot:
        """
        Fetch board, lists, cards, members and recent activity in one go.
        Activity is optional: if it cannot be fetched the snapshot carries
        an empty activity list instead of failing.
        """
        board = self.get_board_details(board_id)
        lists = self.get_lists(board_id)
        cards = self.get_cards(board_id)
        members = self.get_board_members(board_id)

        try:
            activities = self.get_board_activity(board_id, since)
        except RemoteAPIError as e:
            logger.warning(f"Could not fetch activity for board {board_id}: {e}")
            activities = []

        return BoardSnapshot(
            board=board,
            lists=lists,
            cards=cards,
            members=members,
            activities=activities[:SNAPSHOT_ACTIVITY_LIMIT],
        )

    def _client(self) -> httpx.Client:
        auth = OAuth1Auth(
            client_id=self.api_key,
            client_secret=self.api_secret,
            token=self.access_token,
            token_secret=self.access_secret,
        )
        return httpx.Client(
            base_url=self.base_url,
            auth=auth,
            timeout=self.timeout,
            transport=self.transport,
        )

    def _get(self, path: str, params: dict[str, str]) -> Any:
        try:
            with self._client() as client:
                response = client.get(path, params=params)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"Trello API error on {path}: status {status}")
            raise RemoteAPIError(f"Trello API returned {status} for {path}", status_code=status) from e
        except httpx.RequestError as e:
            logger.error(f"Trello network error on {path}: {e}")
            raise RemoteAPIError(f"Could not reach Trello API: {e}") from e
        except ValueError as e:
            raise RemoteAPIError(f"Invalid JSON from Trello API for {path}: {e}") from e

    @staticmethod
    def _parse_list(data: Any, model: Type[ModelT], what: str) -> List[ModelT]:
        if not isinstance(data, list):
            raise RemoteAPIError(f"Unexpected {what} payload from Trello API")
        try:
            return [model.model_validate(item) for item in data]
        except ValidationError as e:
            raise RemoteAPIError(f"Error parsing {what} data: {e}") from e
