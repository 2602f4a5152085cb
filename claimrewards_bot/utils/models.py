"""Pydantic models and outcome types for the claim rewards bot.

`ClaimRecord` and `ClaimContainer` mirror the on-disk claim log document;
`LoadResult` and `ClaimResult` are the explicit outcomes returned by the
stores and the claim service so callers can tell a recovered default apart
from a normal load without relying on exceptions.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, TypeAdapter

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def format_timestamp(moment: datetime) -> str:
    """Render `moment` as fixed-width UTC ISO-8601 (sortable as text)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


class ClaimRecord(BaseModel):
    """A single completed claim. Serialized as `steamid`/`timestamp`/`amount_claimed`."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    user_id: str = Field(..., alias="steamid")
    timestamp: str
    amount_claimed: int

    def to_json(self) -> Dict[str, object]:
        return self.model_dump(by_alias=True)


class ClaimContainer(BaseModel):
    """Top-level claim log document: `{"claims": [...]}`."""

    claims: Optional[List[ClaimRecord]] = None


# ledger document: user id -> pending amount
LEDGER_ADAPTER = TypeAdapter(Dict[str, NonNegativeInt])


class LoadOutcome(str, Enum):
    LOADED = "loaded"
    CREATED = "created"
    RECOVERED = "recovered"


@dataclass(frozen=True)
class LoadResult:
    outcome: LoadOutcome
    count: int = 0
    error: Optional[str] = None

    @property
    def recovered(self) -> bool:
        return self.outcome is LoadOutcome.RECOVERED


class ClaimStatus(str, Enum):
    CLAIMED = "claimed"
    NOTHING_TO_CLAIM = "nothing_to_claim"
    NO_PERMISSION = "no_permission"
    GRANT_FAILED = "grant_failed"


@dataclass(frozen=True)
class ClaimResult:
    status: ClaimStatus
    user_id: str
    amount: int = 0
    item_kind: Optional[str] = None
    record: Optional[ClaimRecord] = None

    @property
    def ok(self) -> bool:
        return self.status is ClaimStatus.CLAIMED
