"""Lifecycle and wiring for the reward claim feature.

`ClaimRewardsPlugin` owns the reward config, ledger, claim log, permission
store and grant collaborator. The bot calls `init()` during setup and
`shutdown()` on close; command handlers only talk to `request_claim()` and
the admin helpers below.
"""
from __future__ import annotations

from typing import Optional

from claimrewards_bot.config import RewardConfig, Settings, load_reward_config
from claimrewards_bot.utils import i18n
from claimrewards_bot.utils import logger as claim_logger
from claimrewards_bot.utils.claim_log import ClaimLog
from claimrewards_bot.utils.claims import ClaimService, GrantFn
from claimrewards_bot.utils.inventory import InventoryGranter
from claimrewards_bot.utils.ledger import RewardLedger
from claimrewards_bot.utils.models import ClaimResult, ClaimStatus, LoadResult
from claimrewards_bot.utils.perms import PERMISSION_CLAIM, PermissionStore

logger = claim_logger.get_logger("claimrewards.plugin")


class ClaimRewardsPlugin:
    def __init__(
        self,
        settings: Settings,
        grant: Optional[GrantFn] = None,
        permissions: Optional[PermissionStore] = None,
        config: Optional[RewardConfig] = None,
    ):
        self.settings = settings
        self.ledger = RewardLedger(settings.ledger_file)
        self.claim_log = ClaimLog(settings.claim_log_file)
        self.permissions = permissions or PermissionStore(settings.permissions_file)
        self.grant = grant or InventoryGranter(settings.inventory_file)
        self.config = config
        self.service: Optional[ClaimService] = None
        self.ledger_load: Optional[LoadResult] = None
        self.claim_log_load: Optional[LoadResult] = None

    @property
    def ready(self) -> bool:
        return self.service is not None

    def init(self) -> None:
        """Create the data directory, load config and both stores, build the service."""
        self.settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
        claim_logger.set_archive_path(self.settings.audit_file)
        i18n.set_data_dir(self.settings.DATA_DIR / "i18n")

        if self.config is None:
            self.config = load_reward_config(self.settings.config_file)

        self.permissions.load()
        self.permissions.register_permission(PERMISSION_CLAIM)

        self.ledger_load = self.ledger.load()
        self.claim_log_load = self.claim_log.load()
        for name, result in (("ledger", self.ledger_load), ("claim log", self.claim_log_load)):
            if result.recovered:
                logger.warning("Reward %s recovered with an empty default: %s", name, result.error)

        self.service = ClaimService(self.ledger, self.claim_log, self.grant, self.config)
        logger.info(
            "Claim rewards ready: %d pending, %d claimed, item=%s variant=%d",
            len(self.ledger), len(self.claim_log), self.config.reward_item, self.config.reward_variant_id,
        )

    def shutdown(self) -> None:
        """Detach the service. Stores are already persisted after every change."""
        if self.service is None:
            return
        self.service = None
        claim_logger.stop_background_writer()
        logger.info("Claim rewards shut down.")

    def _require_service(self) -> ClaimService:
        if self.service is None:
            raise RuntimeError("ClaimRewardsPlugin.init() has not been called")
        return self.service

    def request_claim(self, user_id: str) -> ClaimResult:
        """Permission check, then the claim itself."""
        service = self._require_service()
        if not self.permissions.has_permission(user_id, PERMISSION_CLAIM):
            return ClaimResult(ClaimStatus.NO_PERMISSION, user_id=user_id)
        return service.claim_for(user_id)

    def set_reward(self, user_id: str, amount: int) -> None:
        self._require_service()
        self.ledger.set_reward(user_id, amount)
        logger.info("Pending reward for %s set to %d.", user_id, amount)
