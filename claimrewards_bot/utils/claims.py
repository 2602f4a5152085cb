"""Claim orchestration: pending reward -> delivered item + audit record.

The grant happens first, then the ledger entry is removed, then the claim
is logged. Each step persists on its own; nothing here rolls back a grant
if a later step raises.
"""
from __future__ import annotations

import threading
from typing import Callable

from claimrewards_bot.config import RewardConfig
from claimrewards_bot.utils.claim_log import ClaimLog
from claimrewards_bot.utils.ledger import RewardLedger
from claimrewards_bot.utils.logger import get_logger
from claimrewards_bot.utils.models import ClaimResult, ClaimStatus

logger = get_logger("claimrewards.claims")

# grant(user_id, item_kind, amount, variant_id) -> delivered?
GrantFn = Callable[[str, str, int, int], bool]


class ClaimService:
    """Moves a user's pending reward into the claim log, at most once."""

    def __init__(self, ledger: RewardLedger, claim_log: ClaimLog, grant: GrantFn, config: RewardConfig):
        self.ledger = ledger
        self.claim_log = claim_log
        self.grant = grant
        self.config = config
        self._lock = threading.Lock()

    def claim_for(self, user_id: str) -> ClaimResult:
        with self._lock:
            if not self.ledger.has_reward(user_id):
                return ClaimResult(ClaimStatus.NOTHING_TO_CLAIM, user_id=user_id)

            amount = self.ledger.get_reward_amount(user_id)
            item_kind = self.config.reward_item
            delivered = self.grant(user_id, item_kind, amount, self.config.reward_variant_id)
            if not delivered:
                logger.warning("Grant of %d %s to %s failed; reward left pending.", amount, item_kind, user_id)
                return ClaimResult(ClaimStatus.GRANT_FAILED, user_id=user_id, amount=amount, item_kind=item_kind)

            self.ledger.remove_reward(user_id)
            record = self.claim_log.log_claim(user_id, amount)
            logger.info("User %s claimed %d %s.", user_id, amount, item_kind)
            return ClaimResult(
                ClaimStatus.CLAIMED,
                user_id=user_id,
                amount=amount,
                item_kind=item_kind,
                record=record,
            )
