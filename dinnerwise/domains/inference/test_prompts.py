"""
Tests for prompt rendering and recipe parsing.
"""

from __future__ import annotations

import json

import pytest

from dinnerwise.config.errors import PermanentError

from .models import InferenceRequest, Plan
from .prompts import build_prompt, parse_recipes

RECIPE = {
    "title": "Egg Fried Rice",
    "cookTime": "20 minutes",
    "calories": 450,
    "ingredients": ["rice", "eggs", "scallions"],
    "steps": ["Scramble eggs", "Fry rice", "Combine"],
    "nutritional_highlights": ["high protein"],
    "difficulty": "Easy",
}


def test_prompt_keeps_ingredient_order() -> None:
    request = InferenceRequest(
        ingredients=["scallions", "rice", "eggs"], tenant_id="t", plan=Plan.FREE
    )
    prompt = build_prompt(request)
    assert "Available ingredients: scallions, rice, eggs" in prompt


def test_prompt_defaults_preferences() -> None:
    request = InferenceRequest(ingredients=["rice"], tenant_id="t", plan=Plan.FREE)
    assert "Dietary preferences: No specific preferences" in build_prompt(request)


def test_prompt_with_preferences_only() -> None:
    request = InferenceRequest(preferences="vegan comfort food", tenant_id="t", plan=Plan.FREE)
    prompt = build_prompt(request)
    assert "Dietary preferences: vegan comfort food" in prompt
    assert "Available ingredients: Whatever is on hand" in prompt


def test_parse_recipes_array() -> None:
    recipes = parse_recipes(json.dumps([RECIPE, RECIPE]))
    assert len(recipes) == 2
    assert recipes[0].title == "Egg Fried Rice"
    assert recipes[0].cook_time == "20 minutes"


def test_parse_recipes_with_surrounding_text() -> None:
    text = f"Here are your recipes:\n{json.dumps([RECIPE])}\nEnjoy!"
    assert parse_recipes(text)[0].calories == 450


def test_parse_recipes_wrapped_object() -> None:
    assert len(parse_recipes(json.dumps({"recipes": [RECIPE]}))) == 1


def test_parse_recipes_not_json() -> None:
    with pytest.raises(PermanentError, match="no JSON array"):
        parse_recipes("I am sorry, I cannot help with that.")


def test_parse_recipes_invalid_schema() -> None:
    bad = {**RECIPE, "calories": -5}
    with pytest.raises(PermanentError, match="Recipe validation failed"):
        parse_recipes(json.dumps([bad]))


def test_parse_recipes_empty_array() -> None:
    with pytest.raises(PermanentError, match="no recipes"):
        parse_recipes("[]")
