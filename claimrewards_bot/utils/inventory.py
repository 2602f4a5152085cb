"""File-backed item inventory used as the default reward delivery mechanism.

Each user owns a list of item stacks keyed by item kind and variant id:

    {"<user_id>": {"items": [{"item": "blood", "variant_id": 0, "amount": 50}]}}

`grant_item` matches the grant collaborator signature expected by
`ClaimService` and returns whether the items were delivered.
"""
from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Dict, List, Union

from claimrewards_bot.utils import persistence
from claimrewards_bot.utils.logger import get_logger

DATA_DIR = Path.cwd() / "data"
INVENTORY_FILE = DATA_DIR / "inventories.json"
_lock = threading.Lock()

logger = get_logger("claimrewards.inventory")


def _load_all(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = persistence.read_json(path)
    except ValueError:
        logger.warning("Inventory file %s is corrupt, starting fresh.", path)
        return {}
    return data if isinstance(data, dict) else {}


def add_item(user_id: str, item_kind: str, amount: int, variant_id: int = 0, path: Union[str, Path, None] = None) -> Dict[str, Any]:
    """Add `amount` of `item_kind` to the user's stack for that variant."""
    path = Path(path) if path is not None else INVENTORY_FILE
    with _lock:
        data = _load_all(path)
        bucket = data.get(str(user_id))
        if not isinstance(bucket, dict):
            bucket = data[str(user_id)] = {"items": []}
        items = bucket.get("items")
        if not isinstance(items, list):
            items = bucket["items"] = []
        for stack in items:
            if isinstance(stack, dict) and stack.get("item") == item_kind and int(stack.get("variant_id", 0)) == int(variant_id):
                stack["amount"] = int(stack.get("amount", 0)) + int(amount)
                break
        else:
            stack = {"item": item_kind, "variant_id": int(variant_id), "amount": int(amount)}
            items.append(stack)
        persistence.write_json(path, data)
        return stack


def list_items(user_id: str, path: Union[str, Path, None] = None) -> List[Dict[str, Any]]:
    path = Path(path) if path is not None else INVENTORY_FILE
    bucket = _load_all(path).get(str(user_id))
    if not isinstance(bucket, dict):
        return []
    items = bucket.get("items")
    return items if isinstance(items, list) else []


def grant_item(user_id: str, item_kind: str, amount: int, variant_id: int = 0, path: Union[str, Path, None] = None) -> bool:
    """Deliver a reward. Unknown (blank) item kinds and negative amounts are refused."""
    if not item_kind or not item_kind.strip():
        logger.warning("Refusing to grant blank item kind to %s", user_id)
        return False
    if amount < 0:
        logger.warning("Refusing to grant negative amount %d to %s", amount, user_id)
        return False
    if amount == 0:
        # nothing to deliver; the claim itself still counts
        return True
    add_item(user_id, item_kind, amount, variant_id, path=path)
    return True


class InventoryGranter:
    """Grant collaborator bound to one inventory file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def __call__(self, user_id: str, item_kind: str, amount: int, variant_id: int) -> bool:
        return grant_item(user_id, item_kind, amount, variant_id, path=self.path)
