"""Append-only history of completed claims.

Stored as `{"claims": [{"steamid": ..., "timestamp": ..., "amount_claimed": ...}]}`
and rewritten in full after each append. Records are never updated or
removed here.
"""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from pydantic import ValidationError

from claimrewards_bot.utils import persistence
from claimrewards_bot.utils.logger import get_logger
from claimrewards_bot.utils.models import (
    ClaimContainer,
    ClaimRecord,
    LoadOutcome,
    LoadResult,
    format_timestamp,
)

logger = get_logger("claimrewards.claim_log")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ClaimLog:
    """File-backed, chronological list of `ClaimRecord`s."""

    def __init__(self, path: Union[str, Path], clock: Optional[Callable[[], datetime]] = None):
        self.path = Path(path)
        self._clock = clock or _utcnow
        self._claims: List[ClaimRecord] = []

    def __len__(self) -> int:
        return len(self._claims)

    @property
    def records(self) -> Tuple[ClaimRecord, ...]:
        return tuple(self._claims)

    def claims_for(self, user_id: str) -> List[ClaimRecord]:
        return [c for c in self._claims if c.user_id == user_id]

    def load(self) -> LoadResult:
        """Load the claim history.

        Missing file: start empty and write a well-formed document. Read or
        parse failures: start empty, report `RECOVERED`. History lost to a
        corrupt file is accepted; other errors are re-raised.
        """
        if not self.path.exists():
            logger.info("No claim log found at %s, creating a new file.", self.path)
            self._claims = []
            self.save()
            return LoadResult(LoadOutcome.CREATED)

        try:
            raw = persistence.read_json(self.path)
            if raw is None:
                logger.warning("Claim log %s is empty, starting with no history.", self.path)
                self._claims = []
                return LoadResult(LoadOutcome.RECOVERED, error="empty document")
            container = ClaimContainer.model_validate(raw)
        except PermissionError as exc:
            logger.error("Unexpected error loading claim log: %s", exc)
            raise
        except OSError as exc:
            logger.warning("IO error loading claim log: %s", exc)
            self._claims = []
            return LoadResult(LoadOutcome.RECOVERED, error=str(exc))
        except (ValueError, ValidationError) as exc:
            logger.warning("JSON error loading claim log: %s", exc)
            self._claims = []
            return LoadResult(LoadOutcome.RECOVERED, error=str(exc))
        except Exception as exc:
            logger.error("Unexpected error loading claim log: %s", exc)
            raise

        self._claims = list(container.claims or [])
        logger.info("Claim log loaded: %d records.", len(self._claims))
        return LoadResult(LoadOutcome.LOADED, count=len(self._claims))

    def save(self) -> None:
        """Overwrite the log file with every record. Failures propagate."""
        document = {"claims": [c.to_json() for c in self._claims]}
        try:
            persistence.write_json(self.path, document)
        except OSError as exc:
            logger.error("IO error saving claim log: %s", exc)
            raise
        except (TypeError, ValueError) as exc:
            logger.error("JSON error saving claim log: %s", exc)
            raise
        except Exception as exc:
            logger.error("Unexpected error saving claim log: %s", exc)
            raise
        logger.debug("Claim log saved (%d records).", len(self._claims))

    def log_claim(self, user_id: str, amount: int) -> ClaimRecord:
        record = ClaimRecord(
            user_id=user_id,
            timestamp=format_timestamp(self._clock()),
            amount_claimed=amount,
        )
        self._claims.append(record)
        self.save()
        return record
