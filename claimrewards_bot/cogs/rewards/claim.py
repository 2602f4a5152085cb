"""Reward claim commands.

`claim` (prefix and slash) hands the invoking user's id to the plugin and
relays the outcome. Owner-only commands manage pending rewards, inspect the
claim history and grant or revoke the claim permission.
"""
from __future__ import annotations

import re
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from claimrewards_bot.utils import helpers, i18n
from claimrewards_bot.utils import logger as claim_logger
from claimrewards_bot.utils import perms
from claimrewards_bot.utils.models import ClaimResult, ClaimStatus

logger = claim_logger.get_logger("claimrewards.cogs.claim")

_MENTION_RE = re.compile(r"^<@!?(\d+)>$")


def resolve_target(arg: str) -> Optional[str]:
    """Turn `*`, a raw id or a user mention into a permission holder id."""
    arg = arg.strip()
    if arg == perms.EVERYONE:
        return arg
    m = _MENTION_RE.match(arg)
    if m:
        return m.group(1)
    return arg if arg.isdigit() else None


class ClaimRewards(commands.Cog):
    """Claim pending rewards and manage the reward ledger."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @property
    def plugin(self):
        return self.bot.plugin

    def _locale(self) -> str:
        return getattr(self.bot.settings, "LOCALE", "en")

    def run_claim(self, user_id: int) -> tuple[ClaimResult, discord.Embed]:
        """Claim for `user_id` and build the reply embed."""
        result = self.plugin.request_claim(str(user_id))
        locale = self._locale()
        if result.status is ClaimStatus.CLAIMED:
            claim_logger.enqueue_log({
                "type": "reward_claim",
                "user_id": result.user_id,
                "amount": result.amount,
                "item": result.item_kind,
                "timestamp": result.record.timestamp if result.record else None,
            })
            text = i18n.t("claim_success", locale=locale, amount=result.amount, item=result.item_kind)
            return result, helpers.make_embed("Reward Claimed", text, helpers.SUCCESS_COLOUR)
        if result.status is ClaimStatus.GRANT_FAILED:
            return result, helpers.make_embed("Claim Failed", i18n.t("grant_failed", locale=locale), helpers.ERROR_COLOUR)
        return result, helpers.make_embed("Claim", i18n.t(result.status.value, locale=locale), helpers.NEUTRAL_COLOUR)

    @commands.command(name="claim")
    async def claim(self, ctx: commands.Context):
        """Claim your pending reward."""
        _, embed = self.run_claim(ctx.author.id)
        await ctx.send(embed=embed)

    @app_commands.command(name="claim", description="Claim your pending reward")
    async def slash_claim(self, interaction: discord.Interaction):
        _, embed = self.run_claim(interaction.user.id)
        await interaction.response.send_message(embed=embed, ephemeral=True)

    async def cog_app_command_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError):
        """Slash counterpart of Core.on_command_error: log, audit and answer."""
        original = getattr(error, "original", error)
        command = interaction.command.qualified_name if interaction.command is not None else None
        claim_logger.audit_command_error(command, interaction.user.id, original)
        embed = helpers.make_embed("Error", i18n.t("command_error", locale=self._locale()), helpers.ERROR_COLOUR)
        try:
            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException:
            pass

    @commands.command(name="setreward")
    @perms.is_owner()
    async def setreward(self, ctx: commands.Context, member: discord.User, amount: int):
        """Set (or overwrite) a user's pending reward."""
        try:
            self.plugin.set_reward(str(member.id), amount)
        except ValueError as e:
            await ctx.send(f"Invalid amount: {e}")
            return
        claim_logger.enqueue_log({"type": "reward_set", "user_id": str(member.id), "amount": amount, "by": ctx.author.id})
        await ctx.send(embed=helpers.make_embed("Reward Set", f"{member.mention} can now claim {helpers.format_reward(amount, self.plugin.config.reward_item)}."))

    @commands.command(name="pending")
    @perms.is_owner()
    async def pending(self, ctx: commands.Context, member: Optional[discord.User] = None):
        """Show one user's pending reward, or every pending reward."""
        ledger = self.plugin.ledger
        if member is not None:
            uid = str(member.id)
            if not ledger.has_reward(uid):
                await ctx.send(f"{member.mention} has nothing to claim.")
                return
            await ctx.send(f"{member.mention} is owed {ledger.get_reward_amount(uid)}.")
            return
        rewards = ledger.rewards()
        lines = [f"<@{uid}>: {amount}" for uid, amount in sorted(rewards.items())[:25]]
        body = "\n".join(lines) if lines else "No pending rewards."
        if len(rewards) > 25:
            body += f"\n... and {len(rewards) - 25} more"
        await ctx.send(embed=helpers.make_embed(f"Pending Rewards ({len(rewards)})", body))

    @commands.command(name="claimhistory")
    @perms.is_owner()
    async def claimhistory(self, ctx: commands.Context, member: Optional[discord.User] = None):
        """Show the most recent claims, optionally for one user."""
        log = self.plugin.claim_log
        records = log.claims_for(str(member.id)) if member is not None else log.records
        await ctx.send(embed=helpers.make_embed("Claim History", helpers.format_claims(records)))

    @commands.command(name="grantclaim")
    @perms.is_owner()
    async def grantclaim(self, ctx: commands.Context, target: str):
        """Allow a user (mention or id, or `*` for everyone) to claim rewards."""
        holder = resolve_target(target)
        if holder is None:
            await ctx.send("Give a user mention, a user id or `*`.")
            return
        changed = self.plugin.permissions.grant_permission(perms.PERMISSION_CLAIM, holder)
        await ctx.send(f"Granted `{perms.PERMISSION_CLAIM}` to {holder}." if changed else f"{holder} already has `{perms.PERMISSION_CLAIM}`.")

    @commands.command(name="revokeclaim")
    @perms.is_owner()
    async def revokeclaim(self, ctx: commands.Context, target: str):
        """Remove a previously granted claim permission."""
        holder = resolve_target(target)
        if holder is None:
            await ctx.send("Give a user mention, a user id or `*`.")
            return
        changed = self.plugin.permissions.revoke_permission(perms.PERMISSION_CLAIM, holder)
        await ctx.send(f"Revoked `{perms.PERMISSION_CLAIM}` from {holder}." if changed else f"{holder} did not have `{perms.PERMISSION_CLAIM}`.")


async def setup(bot: commands.Bot):
    await bot.add_cog(ClaimRewards(bot))
