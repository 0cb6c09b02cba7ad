# recipe_ingest/services/normalize.py
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Union

DEFAULT_SERVINGS = 4
DEFAULT_QUANTITY = 1

Number = Union[int, float]


def _as_number(value: Any) -> Optional[Number]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        s = value.strip().replace(",", ".")
        try:
            n = float(s)
        except ValueError:
            return None
        if not math.isfinite(n):
            return None
        return int(n) if n.is_integer() else n
    return None


def _normalize_ingredient(ing: Any) -> Any:
    if isinstance(ing, str):
        return {"name": ing.strip(), "quantity": DEFAULT_QUANTITY, "unit": ""}
    if not isinstance(ing, dict):
        # left as-is so validation reports it
        return ing

    quantity = _as_number(ing.get("quantity"))
    unit = ing.get("unit")
    return {
        "name": ing.get("name"),
        "quantity": quantity if quantity else DEFAULT_QUANTITY,
        "unit": unit.lower() if isinstance(unit, str) else "",
    }


def _normalize_step(step: Any, position: int) -> Any:
    if isinstance(step, str):
        return {"order": position, "text": step.strip()}
    if not isinstance(step, dict):
        return step

    order = _as_number(step.get("order"))
    if order is None or order < 1 or int(order) != order:
        order = position
    return {"order": int(order), "text": step.get("text")}


def _normalize_tags(tags: Any) -> Any:
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = [tags]
    if not isinstance(tags, list):
        return tags

    out: List[str] = []
    seen = set()
    for t in tags:
        if not isinstance(t, str):
            continue
        t = t.strip()
        if not t or t in seen:
            continue
        seen.add(t)
        out.append(t)
    return out


def normalize_recipe(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Re-apply the defaults the system prompt asks the model for:
      - servings: 4 when missing or not a positive number
      - ingredient quantity: 1 when missing or not numeric; unit lower-cased
      - step order: 1-based position when missing
      - tags: always a list
    Shapes that cannot be repaired are passed through untouched for validation.
    """
    title = raw.get("title")
    servings = _as_number(raw.get("servings"))

    ingredients = raw.get("ingredients")
    if isinstance(ingredients, list):
        ingredients = [_normalize_ingredient(i) for i in ingredients]

    steps = raw.get("steps")
    if isinstance(steps, list):
        steps = [_normalize_step(s, idx) for idx, s in enumerate(steps, start=1)]

    return {
        "title": title.strip() if isinstance(title, str) else title,
        "servings": servings if servings and servings > 0 else DEFAULT_SERVINGS,
        "ingredients": ingredients,
        "steps": steps,
        "tags": _normalize_tags(raw.get("tags")),
    }
