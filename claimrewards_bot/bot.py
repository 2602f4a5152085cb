"""Bot factory for the claim rewards bot.

Creates the commands.Bot instance, starts the claim rewards plugin and loads
the cogs.
"""
from typing import Optional

import discord
from discord import Object
from discord.ext import commands

from .config import Settings
from .plugin import ClaimRewardsPlugin
from claimrewards_bot.utils import logger as claim_logger

logger = claim_logger.get_logger("claimrewards.bot")

EXTENSIONS = (
    "claimrewards_bot.cogs.core.core",
    "claimrewards_bot.cogs.rewards.claim",
)


class ClaimRewardsBot(commands.Bot):
    def __init__(self, settings: Settings, plugin: Optional[ClaimRewardsPlugin] = None, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.settings = settings
        self.plugin = plugin or ClaimRewardsPlugin(settings)

    async def close(self) -> None:
        try:
            await super().close()
        finally:
            self.plugin.shutdown()

    async def setup_hook(self) -> None:
        # data must be loaded before any command can run
        self.plugin.init()

        for name in EXTENSIONS:
            try:
                await self.load_extension(name)
                logger.info("Loaded extension: %s", name)
            except Exception:
                logger.exception("Failed to load extension %s", name)

        # Sync to dev guild for faster iteration when configured
        dev_guild = getattr(self.settings, "DEV_GUILD_ID", None)
        if dev_guild:
            try:
                guild_obj = Object(id=int(dev_guild))
                self.tree.copy_global_to(guild=guild_obj)
                await self.tree.sync(guild=guild_obj)
                logger.info("Synced app commands to dev guild %s", dev_guild)
            except discord.HTTPException as e:
                logger.warning("Failed to sync app commands: %s", e)


def create_bot(settings: Optional[Settings] = None) -> commands.Bot:
    """Create and return a configured ClaimRewardsBot instance."""
    if settings is None:
        settings = Settings()

    intents = discord.Intents.default()
    intents.message_content = True

    return ClaimRewardsBot(
        settings,
        command_prefix=commands.when_mentioned_or(settings.COMMAND_PREFIX),
        intents=intents,
        owner_id=settings.OWNER_ID,
    )
