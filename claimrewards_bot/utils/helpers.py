"""Small embed helpers shared by the cogs."""
from typing import Iterable, Optional

import discord

from claimrewards_bot.utils.models import ClaimRecord

SUCCESS_COLOUR = 0x2ECC71
NEUTRAL_COLOUR = 0x95A5A6
ERROR_COLOUR = 0xE74C3C


def make_embed(title: str, description: str, colour: Optional[int] = None) -> discord.Embed:
    """Create a small embed used by many commands.

    Args:
        title: embed title
        description: embed body
        colour: optional integer colour
    """
    e = discord.Embed(title=title, description=description)
    if colour is not None:
        e.colour = colour
    return e


def format_reward(amount: int, item_kind: str) -> str:
    return f"{amount} x {item_kind}"


def format_claims(records: Iterable[ClaimRecord], limit: int = 10) -> str:
    """Render the newest `limit` claim records, newest first."""
    lines = [
        f"`{r.timestamp}` <@{r.user_id}> claimed {r.amount_claimed}"
        for r in list(records)[-limit:][::-1]
    ]
    return "\n".join(lines) if lines else "No claims recorded."
