"""Permission helpers.

`PermissionStore` is a small file-backed registry of named permissions and
the user ids holding them (`"*"` grants a permission to everyone). The
`is_owner()` check guards the admin commands.
"""
from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Union

from discord.ext import commands

from claimrewards_bot.utils import persistence
from claimrewards_bot.utils.logger import get_logger

PERMISSION_CLAIM = "claimrewards.use"
EVERYONE = "*"

logger = get_logger("claimrewards.perms")


class PermissionStore:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._grants: Dict[str, List[str]] = {}

    def load(self) -> None:
        if not self.path.exists():
            self._grants = {}
            return
        try:
            data = persistence.read_json(self.path)
        except ValueError as exc:
            logger.warning("Permission file %s unreadable (%s); no permissions granted.", self.path, exc)
            data = {}
        if not isinstance(data, dict):
            data = {}
        self._grants = {str(k): [str(u) for u in (v or [])] for k, v in data.items()}

    def save(self) -> None:
        persistence.write_json(self.path, self._grants)

    def register_permission(self, name: str) -> None:
        if name not in self._grants:
            self._grants[name] = []
            self.save()

    def grant_permission(self, name: str, user_id: str) -> bool:
        holders = self._grants.setdefault(name, [])
        if user_id in holders:
            return False
        holders.append(user_id)
        self.save()
        return True

    def revoke_permission(self, name: str, user_id: str) -> bool:
        holders = self._grants.get(name, [])
        if user_id not in holders:
            return False
        holders.remove(user_id)
        self.save()
        return True

    def has_permission(self, user_id: str, name: str = PERMISSION_CLAIM) -> bool:
        holders = self._grants.get(name, [])
        return EVERYONE in holders or user_id in holders

    def holders(self, name: str = PERMISSION_CLAIM) -> List[str]:
        return list(self._grants.get(name, []))


def is_owner() -> Callable:
    """Check that the invoking user is the configured OWNER_ID or the bot owner.

    Use as a decorator: `@perms.is_owner()`.
    """
    async def predicate(ctx: commands.Context) -> bool:
        settings = getattr(ctx.bot, "settings", None)
        if settings is not None and settings.OWNER_ID:
            if int(settings.OWNER_ID) == ctx.author.id:
                return True
        # fallback to library check
        return await ctx.bot.is_owner(ctx.author)

    return commands.check(predicate)
