"""Pending reward ledger: user id -> amount still owed.

The whole mapping lives in memory and is mirrored to one JSON object on
disk after every change. Loading never fails on a damaged file; saving
always fails loudly, because a removal that did not reach disk would let
the same reward be claimed again after a restart.
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Union

from pydantic import ValidationError

from claimrewards_bot.utils import persistence
from claimrewards_bot.utils.logger import get_logger
from claimrewards_bot.utils.models import LEDGER_ADAPTER, LoadOutcome, LoadResult

logger = get_logger("claimrewards.ledger")


class RewardLedger:
    """File-backed mapping of user id to pending reward amount."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._rewards: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._rewards)

    def load(self) -> LoadResult:
        """Load the ledger file into memory.

        A missing file is created empty. Unreadable or malformed content falls
        back to an empty ledger and reports `LoadOutcome.RECOVERED`. Anything
        else (including permission errors) is logged and re-raised.
        """
        if not self.path.exists():
            logger.info("No reward ledger found at %s, creating a new file.", self.path)
            self._rewards = {}
            self.save()
            return LoadResult(LoadOutcome.CREATED)

        try:
            raw = persistence.read_json(self.path)
            if raw is None:
                logger.warning("Reward ledger %s is empty, starting with no rewards.", self.path)
                self._rewards = {}
                return LoadResult(LoadOutcome.RECOVERED, error="empty document")
            self._rewards = dict(LEDGER_ADAPTER.validate_python(raw))
        except PermissionError as exc:
            logger.error("Unexpected error loading reward ledger: %s", exc)
            raise
        except OSError as exc:
            logger.warning("IO error loading reward ledger: %s", exc)
            self._rewards = {}
            return LoadResult(LoadOutcome.RECOVERED, error=str(exc))
        except (ValueError, ValidationError) as exc:
            # json.JSONDecodeError and UnicodeDecodeError are ValueErrors
            logger.warning("JSON error loading reward ledger: %s", exc)
            self._rewards = {}
            return LoadResult(LoadOutcome.RECOVERED, error=str(exc))
        except Exception as exc:
            logger.error("Unexpected error loading reward ledger: %s", exc)
            raise

        logger.info("Reward ledger loaded: %d pending rewards.", len(self._rewards))
        return LoadResult(LoadOutcome.LOADED, count=len(self._rewards))

    def save(self) -> None:
        """Overwrite the ledger file with the full mapping. Failures propagate."""
        try:
            persistence.write_json(self.path, self._rewards)
        except OSError as exc:
            logger.error("IO error saving reward ledger: %s", exc)
            raise
        except (TypeError, ValueError) as exc:
            logger.error("JSON error saving reward ledger: %s", exc)
            raise
        except Exception as exc:
            logger.error("Unexpected error saving reward ledger: %s", exc)
            raise
        logger.debug("Reward ledger saved (%d entries).", len(self._rewards))

    def has_reward(self, user_id: str) -> bool:
        return user_id in self._rewards

    def get_reward_amount(self, user_id: str) -> int:
        return self._rewards.get(user_id, 0)

    def set_reward(self, user_id: str, amount: int) -> None:
        """Create or overwrite the pending reward for `user_id`."""
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise ValueError("reward amount must be an integer")
        if amount < 0:
            raise ValueError("reward amount must be non-negative")
        if self._rewards.get(user_id) == amount:
            return
        self._rewards[user_id] = amount
        self.save()

    def remove_reward(self, user_id: str) -> bool:
        """Drop the entry for `user_id`; persists only when something was removed."""
        if self._rewards.pop(user_id, None) is None:
            return False
        self.save()
        return True

    def rewards(self) -> Dict[str, int]:
        return dict(self._rewards)
