"""
Game Catalog API — Response Normalizer
========================================

What:  The presentation pass applied to every outgoing payload.
How:   ``normalize_payload`` deep-copies its input and, for a Game-like
       mapping (or each mapping in a list):

       1. releaseDate  → "YYYY-MM-DD" (calendar day in UTC)
       2. price.amount → float
       3. coverImage   → ".jpg" appended unless it already ends in
                         .jpg / .jpeg / .png / .gif (any case)

       Scalars and lists of scalars pass through untouched. The pass is
       idempotent and never mutates the stored document.
"""

import copy
import math
import re
from datetime import date, datetime, timezone
from typing import Any, Dict

IMAGE_EXTENSION = re.compile(r"\.(jpg|jpeg|png|gif)$", re.IGNORECASE)
DEFAULT_IMAGE_EXTENSION = ".jpg"


def utc_day(value: datetime) -> str:
    # Aware values are shifted to UTC first; naive ones are already UTC
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.date().isoformat()


def format_date(value: Any) -> Any:
    if isinstance(value, datetime):
        return utc_day(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            return utc_day(datetime.fromisoformat(raw))
        except ValueError:
            return value
    return value


def coerce_amount(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return value
        return number if math.isfinite(number) else value
    # Decimal and friends
    try:
        return float(value)
    except (TypeError, ValueError):
        return value


def ensure_image_extension(url: Any) -> Any:
    if not isinstance(url, str) or not url:
        return url
    if IMAGE_EXTENSION.search(url):
        return url
    return url + DEFAULT_IMAGE_EXTENSION


def normalize_game(game: Dict[str, Any]) -> Dict[str, Any]:
    """Apply the three presentation rules in place and return the mapping."""
    if game.get("releaseDate"):
        game["releaseDate"] = format_date(game["releaseDate"])

    price = game.get("price")
    if isinstance(price, dict) and price.get("amount") is not None:
        price["amount"] = coerce_amount(price["amount"])

    if game.get("coverImage"):
        game["coverImage"] = ensure_image_extension(game["coverImage"])

    return game


def normalize_payload(payload: Any) -> Any:
    """Normalize a single game, a list of games, or pass anything else through."""
    if isinstance(payload, list):
        return [
            normalize_game(item) if isinstance(item, dict) else item
            for item in copy.deepcopy(payload)
        ]
    if isinstance(payload, dict):
        return normalize_game(copy.deepcopy(payload))
    return payload
