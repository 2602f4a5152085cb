"""Message lookup for the claim rewards bot.

Built-in English strings can be overridden per locale with a JSON file at
`<CLAIMREWARDS_DATA_DIR>/i18n/<locale>.json` mapping message keys to format strings.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict

from claimrewards_bot.config import Settings

DATA_DIR = Settings.DATA_DIR / "i18n"

DEFAULT_MESSAGES: Dict[str, str] = {
    "claim_success": "You have claimed {amount} {item}.",
    "nothing_to_claim": "Nothing to claim.",
    "no_permission": "You do not have permission to use this command.",
    "grant_failed": "Your reward could not be delivered right now. It is still waiting for you.",
    "command_error": "An error occurred while processing your command.",
}


def load_locale(locale: str) -> Dict[str, str]:
    p = DATA_DIR / f"{locale}.json"
    if not p.exists():
        return {}
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except Exception:
        return {}


def t(key: str, locale: str = "en", **kwargs) -> str:
    d = load_locale(locale)
    val = d.get(key) or DEFAULT_MESSAGES.get(key) or key
    try:
        return val.format(**kwargs)
    except (KeyError, IndexError, ValueError):
        return val


def set_data_dir(path: Path) -> None:
    """Load locale overrides from `path` instead of the environment default."""
    global DATA_DIR
    DATA_DIR = Path(path)
