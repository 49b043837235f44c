"""Shared dataclasses used across connection/pager modules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

Document = Mapping[str, Any]
Page = tuple[Document, ...]
ResumeToken = str


@dataclass(frozen=True, slots=True)
class Selection:
    """Database/container currently targeted by the connection context."""

    database_id: str | None = None
    container_id: str | None = None

    @property
    def label(self) -> str:
        if self.database_id is None:
            return ""
        if self.container_id is None:
            return self.database_id
        return f"{self.database_id}/{self.container_id}"


@dataclass(frozen=True, slots=True)
class QueryBatch:
    """One round trip's worth of documents returned by a remote client."""

    documents: tuple[Document, ...]
    resume_token: ResumeToken | None = None
    has_more: bool = False


class PagerPhase(str, Enum):
    """Lifecycle phases of the query pager."""

    IDLE = "idle"
    PAGING = "paging"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True, slots=True)
class PagerState:
    """Pager phase plus the token needed to resume (only while paging)."""

    phase: PagerPhase
    resume_token: ResumeToken | None = None

    def __post_init__(self) -> None:
        if (self.phase is PagerPhase.PAGING) != (self.resume_token is not None):
            raise ValueError(f"{self.phase.value} state cannot carry resume token {self.resume_token!r}")


IDLE = PagerState(PagerPhase.IDLE)
EXHAUSTED = PagerState(PagerPhase.EXHAUSTED)


def paging(token: ResumeToken) -> PagerState:
    return PagerState(PagerPhase.PAGING, token)


__all__ = [
    "Document",
    "EXHAUSTED",
    "IDLE",
    "Page",
    "PagerPhase",
    "PagerState",
    "QueryBatch",
    "ResumeToken",
    "Selection",
    "paging",
]
