"""Configuration loader for the claim rewards bot.

`Settings` reads environment variables (and a .env file via python-dotenv).
`RewardConfig` is the per-deployment reward definition kept in
`data/config.json`; it is loaded once at startup and regenerated with
defaults when missing or damaged.
"""
from pathlib import Path
from typing import Optional, List, Union
import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from claimrewards_bot.utils import persistence
from claimrewards_bot.utils.logger import get_logger

load_dotenv()

logger = get_logger("claimrewards.config")

DEFAULT_REWARD_ITEM = "blood"
DEFAULT_REWARD_VARIANT_ID = 0


class Settings:
    """Process-level settings from the environment."""

    TOKEN: Optional[str] = os.getenv("TOKEN")
    DEV_GUILD_ID: Optional[int] = int(os.getenv("DEV_GUILD_ID")) if os.getenv("DEV_GUILD_ID") else None
    OWNER_ID: Optional[int] = int(os.getenv("OWNER_ID")) if os.getenv("OWNER_ID") else None
    COMMAND_PREFIX: str = os.getenv("COMMAND_PREFIX", "!")
    LOCALE: str = os.getenv("LOCALE", "en")

    # Where the ledger, claim log, inventories and permissions live
    DATA_DIR: Path = Path(os.getenv("CLAIMREWARDS_DATA_DIR", str(Path.cwd() / "data")))

    @property
    def ledger_file(self) -> Path:
        return self.DATA_DIR / "rewards.json"

    @property
    def claim_log_file(self) -> Path:
        return self.DATA_DIR / "claimed_rewards.json"

    @property
    def config_file(self) -> Path:
        return self.DATA_DIR / "config.json"

    @property
    def inventory_file(self) -> Path:
        return self.DATA_DIR / "inventories.json"

    @property
    def permissions_file(self) -> Path:
        return self.DATA_DIR / "permissions.json"

    @property
    def audit_file(self) -> Path:
        return self.DATA_DIR / "logs.jsonl"

    def validate(self, required: Optional[List[str]] = None) -> List[str]:
        """Validate required environment variables.

        Args:
            required: list of attribute names to check (e.g. ["TOKEN"]). If
                omitted, defaults to checking `TOKEN`.

        Returns:
            A list of missing attribute names (empty if all present).
        """
        if required is None:
            required = ["TOKEN"]

        missing: List[str] = []
        for name in required:
            val = getattr(self, name, None)
            if val is None or (isinstance(val, str) and not val.strip()):
                missing.append(name)

        return missing


class RewardConfig(BaseModel):
    """Item kind and variant handed out for every claim."""

    model_config = ConfigDict(populate_by_name=True)

    reward_item: str = Field(DEFAULT_REWARD_ITEM, alias="RewardItem", min_length=1)
    reward_variant_id: int = Field(DEFAULT_REWARD_VARIANT_ID, alias="RewardSkinID", ge=0)

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)


def save_reward_config(path: Union[str, Path], config: RewardConfig) -> None:
    persistence.write_json(path, config.to_json())


def _default_config(path: Path) -> RewardConfig:
    config = RewardConfig()
    save_reward_config(path, config)
    return config


def load_reward_config(path: Union[str, Path]) -> RewardConfig:
    """Read the reward config, writing defaults when it is missing or unusable."""
    path = Path(path)
    if not path.exists():
        logger.warning("Generating new configuration file at %s", path)
        return _default_config(path)

    try:
        raw = persistence.read_json(path)
    except PermissionError as exc:
        logger.error("Unexpected error loading config: %s", exc)
        raise
    except OSError as exc:
        logger.warning("IO error loading config: %s, generating default config...", exc)
        return _default_config(path)
    except ValueError as exc:
        logger.warning("JSON error loading config: %s, generating default config...", exc)
        return _default_config(path)

    if raw is None:
        logger.warning("Config file was empty, creating new defaults...")
        return _default_config(path)

    try:
        return RewardConfig.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Invalid config values: %s, generating default config...", exc)
        return _default_config(path)
