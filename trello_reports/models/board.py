"""Trello board entities as returned by the REST API, plus the per-report snapshot."""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TrelloModel(BaseModel):
    """Accepts Trello's camelCase payloads and ignores fields we do not use."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Board(TrelloModel):
    id: str
    name: str = ""
    description: str = Field(default="", alias="desc")
    url: str = ""
    short_url: str = Field(default="", alias="shortUrl")


class BoardList(TrelloModel):
    id: str
    name: str = ""
    closed: bool = False
    board_id: str = Field(default="", alias="idBoard")


class Label(TrelloModel):
    id: str = ""
    name: str = ""
    color: Optional[str] = None


class Card(TrelloModel):
    id: str
    name: str = ""
    description: str = Field(default="", alias="desc")
    closed: bool = False
    list_id: str = Field(default="", alias="idList")
    due: Optional[datetime] = None
    labels: List[Label] = Field(default_factory=list)
    member_ids: List[str] = Field(default_factory=list, alias="idMembers")
    last_activity: Optional[datetime] = Field(default=None, alias="dateLastActivity")


class Member(TrelloModel):
    id: str
    full_name: str = Field(default="", alias="fullName")
    username: str = ""


class Activity(TrelloModel):
    """One entry of a board's action log."""

    id: str = ""
    type: str = ""
    date: Optional[datetime] = None
    member_creator: dict[str, Any] = Field(default_factory=dict, alias="memberCreator")
    data: dict[str, Any] = Field(default_factory=dict)

    @property
    def actor(self) -> str:
        return self.member_creator.get("fullName") or self.member_creator.get("username") or "Someone"


class BoardSnapshot(BaseModel):
    """Everything fetched for one report generation. Never persisted."""

    board: Board
    lists: List[BoardList] = Field(default_factory=list)
    cards: List[Card] = Field(default_factory=list)
    members: List[Member] = Field(default_factory=list)
    activities: List[Activity] = Field(default_factory=list)

    def cards_by_list(self) -> dict[str, List[Card]]:
        grouped: dict[str, List[Card]] = {}
        for card in self.cards:
            grouped.setdefault(card.list_id, []).append(card)
        return grouped
