# recipe_ingest/services/validation.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _is_text(v: Any) -> bool:
    return isinstance(v, str) and bool(v.strip())


def validate_recipe(recipe: Any) -> ValidationResult:
    """Check a normalized recipe against the fixed schema. Every rule is checked; errors accumulate."""
    if recipe is None:
        return ValidationResult(valid=False, errors=["Recipe object is required"])
    if not isinstance(recipe, dict):
        return ValidationResult(valid=False, errors=["Recipe must be an object"])

    errors: List[str] = []

    if not _is_text(recipe.get("title")):
        errors.append("Title is required and must be a string")

    if not _is_number(recipe.get("servings")):
        errors.append("Servings is required and must be a number")

    ingredients = recipe.get("ingredients")
    if not isinstance(ingredients, list):
        errors.append("Ingredients must be an array")
    else:
        for index, ing in enumerate(ingredients):
            if not isinstance(ing, dict):
                errors.append(f"Ingredient {index}: must be an object")
                continue
            if not isinstance(ing.get("name"), str):
                errors.append(f"Ingredient {index}: name is required and must be a string")
            if not _is_number(ing.get("quantity")):
                errors.append(f"Ingredient {index}: quantity must be a number")
            if not isinstance(ing.get("unit"), str):
                errors.append(f"Ingredient {index}: unit is required and must be a string")

    steps = recipe.get("steps")
    if not isinstance(steps, list):
        errors.append("Steps must be an array")
    else:
        for index, step in enumerate(steps):
            if not isinstance(step, dict):
                errors.append(f"Step {index}: must be an object")
                continue
            if not _is_number(step.get("order")):
                errors.append(f"Step {index}: order must be a number")
            if not isinstance(step.get("text"), str):
                errors.append(f"Step {index}: text is required and must be a string")

    if not isinstance(recipe.get("tags"), list):
        errors.append("Tags must be an array")

    return ValidationResult(valid=not errors, errors=errors)
