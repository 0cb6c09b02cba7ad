from __future__ import annotations

from recipe_ingest.services.normalize import normalize_recipe
from recipe_ingest.services.validation import validate_recipe


def test_missing_servings_defaults_to_four():
    out = normalize_recipe({"title": "Soup", "ingredients": [], "steps": []})
    assert out["servings"] == 4


def test_zero_or_negative_servings_default_to_four():
    assert normalize_recipe({"servings": 0})["servings"] == 4
    assert normalize_recipe({"servings": -2})["servings"] == 4


def test_numeric_string_servings_are_coerced():
    assert normalize_recipe({"servings": "6"})["servings"] == 6


def test_ingredient_quantity_defaults_and_unit_lowercased():
    out = normalize_recipe(
        {
            "ingredients": [
                {"name": "flour", "quantity": 250, "unit": "G"},
                {"name": "salt"},
                {"name": "milk", "quantity": "a splash", "unit": "ML"},
                {"name": "butter", "quantity": "12,5", "unit": "g"},
            ]
        }
    )
    assert out["ingredients"] == [
        {"name": "flour", "quantity": 250, "unit": "g"},
        {"name": "salt", "quantity": 1, "unit": ""},
        {"name": "milk", "quantity": 1, "unit": "ml"},
        {"name": "butter", "quantity": 12.5, "unit": "g"},
    ]


def test_boolean_quantity_is_not_a_number():
    out = normalize_recipe({"ingredients": [{"name": "egg", "quantity": True, "unit": ""}]})
    assert out["ingredients"][0]["quantity"] == 1


def test_step_order_defaults_to_position():
    out = normalize_recipe({"steps": [{"text": "a"}, {"order": 7, "text": "b"}, {"order": 0, "text": "c"}, "d"]})
    assert [s["order"] for s in out["steps"]] == [1, 7, 3, 4]
    assert out["steps"][3] == {"order": 4, "text": "d"}


def test_tags_always_a_list_without_duplicates():
    assert normalize_recipe({})["tags"] == []
    assert normalize_recipe({"tags": "vegan"})["tags"] == ["vegan"]
    assert normalize_recipe({"tags": ["quick", "quick", " easy ", None, ""]})["tags"] == ["quick", "easy"]


def test_unrepairable_shapes_are_left_for_validation():
    out = normalize_recipe({"title": "X", "ingredients": "flour, eggs", "steps": [42]})
    assert out["ingredients"] == "flour, eggs"
    assert out["steps"] == [42]

    result = validate_recipe(out)
    assert not result.valid
    assert "Ingredients must be an array" in result.errors
    assert "Step 0: must be an object" in result.errors


def test_extra_fields_are_dropped():
    out = normalize_recipe({"title": "X", "notes": "secret", "time": {"prep_min": 5}})
    assert set(out) == {"title", "servings", "ingredients", "steps", "tags"}


def test_well_formed_backend_json_always_validates():
    raw_variants = [
        {"title": "A", "ingredients": [], "steps": []},
        {"title": "B", "servings": None, "ingredients": [{"name": "x"}], "steps": [{"text": "y"}], "tags": None},
        {"title": "C", "servings": "3", "ingredients": [{"name": "x", "quantity": "?", "unit": None}],
         "steps": [{"order": "2", "text": "y"}], "tags": ["t"]},
    ]
    for raw in raw_variants:
        result = validate_recipe(normalize_recipe(raw))
        assert result.valid, result.errors
