"""Core cog: ping, status and the global command error handler."""
import discord
from discord.ext import commands

from claimrewards_bot.utils import helpers, i18n
from claimrewards_bot.utils import logger as claim_logger
from claimrewards_bot.utils import perms

logger = claim_logger.get_logger("claimrewards.core")


class Core(commands.Cog):
    """Core commands: ping and reward store status.

    The error listener keeps a failing command (for instance a ledger save
    that raised) contained to that one invocation.
    """

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    def _locale(self) -> str:
        settings = getattr(self.bot, "settings", None)
        return getattr(settings, "LOCALE", "en")

    @commands.Cog.listener()
    async def on_command_error(self, ctx: commands.Context, error: Exception):
        """Log the failure and reply with a friendly message."""
        if isinstance(error, commands.CommandNotFound):
            return
        if isinstance(error, commands.CheckFailure):
            await ctx.send(i18n.t("no_permission", locale=self._locale()))
            return
        if isinstance(error, (commands.MissingRequiredArgument, commands.BadArgument)):
            await ctx.send(f"Usage: `{ctx.prefix}{ctx.command.qualified_name} {ctx.command.signature}`")
            return

        original = getattr(error, "original", error)
        claim_logger.audit_command_error(
            getattr(ctx.command, "qualified_name", None),
            getattr(ctx.author, "id", None),
            original,
        )
        try:
            await ctx.send(embed=helpers.make_embed("Error", i18n.t("command_error", locale=self._locale()), helpers.ERROR_COLOUR))
        except discord.HTTPException:
            pass

    @commands.Cog.listener()
    async def on_ready(self):
        logger.info("Bot ready as %s (id: %s)", self.bot.user, self.bot.user.id)

    @commands.command(name="ping")
    async def ping(self, ctx: commands.Context):
        """Respond with latency (ms)."""
        latency = round(self.bot.latency * 1000)
        await ctx.send(embed=helpers.make_embed("Pong!", f"Latency: {latency}ms"))

    @commands.command(name="rewardstatus")
    @perms.is_owner()
    async def rewardstatus(self, ctx: commands.Context):
        """Show how the reward stores loaded and their current sizes."""
        plugin = self.bot.plugin
        lines = []
        for name, store, result in (
            ("Ledger", plugin.ledger, plugin.ledger_load),
            ("Claim log", plugin.claim_log, plugin.claim_log_load),
        ):
            outcome = result.outcome.value if result is not None else "not loaded"
            line = f"**{name}**: {len(store)} entries ({outcome})"
            if result is not None and result.error:
                line += f" - {result.error[:200]}"
            lines.append(line)
        if plugin.config is not None:
            lines.append(f"**Reward**: {plugin.config.reward_item} (variant {plugin.config.reward_variant_id})")
        await ctx.send(embed=helpers.make_embed("Reward Status", "\n".join(lines), helpers.NEUTRAL_COLOUR))


async def setup(bot: commands.Bot):
    await bot.add_cog(Core(bot))
