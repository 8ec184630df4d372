"""
Recipe Prompts - Prompt rendering and recipe payload parsing.
"""

from __future__ import annotations

import json
import logging

from pydantic import TypeAdapter, ValidationError

from dinnerwise.config.errors import ErrorCode, PermanentError

from .models import InferenceRequest, Recipe

logger = logging.getLogger(__name__)

__all__ = ["SYSTEM_PROMPT", "build_prompt", "parse_recipes"]

SYSTEM_PROMPT = (
    "You are a professional chef and nutritionist specializing in creating "
    "delicious, healthy, and practical dinner recipes."
)

RECIPE_TEMPLATE = """\
Generate creative, delicious, and healthy dinner recipes based on the provided ingredients and dietary preferences.

Available ingredients: {ingredients}
Dietary preferences: {preferences}

For each recipe, provide:
- A creative and appetizing title
- Estimated cook time (e.g., "30 minutes", "1 hour")
- Approximate calories per serving
- List of ingredients needed (including quantities)
- Step-by-step cooking instructions
- Nutritional highlights
- Difficulty level (Easy/Medium/Hard)

Format the response as a JSON array of objects with this structure:
[
  {{
    "title": "Recipe Name",
    "cookTime": "30 minutes",
    "calories": 450,
    "ingredients": ["ingredient1", "ingredient2"],
    "steps": ["step1", "step2", "step3"],
    "nutritional_highlights": ["high protein", "low carb"],
    "difficulty": "Easy"
  }}
]"""

_RECIPES = TypeAdapter(list[Recipe])


def build_prompt(request: InferenceRequest) -> str:
    """Render the recipe prompt, keeping the caller's ingredient order."""
    ingredients = [i.strip() for i in request.ingredients if i.strip()]
    return RECIPE_TEMPLATE.format(
        ingredients=", ".join(ingredients) or "Whatever is on hand",
        preferences=request.preferences.strip() or "No specific preferences",
    )


def parse_recipes(text: str) -> list[Recipe]:
    """
    Parse the model's JSON array of recipes.

    Tolerates prose around the array; a single object is accepted as a
    one-recipe list.

    Raises:
        PermanentError: No valid recipe payload in the text
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        start = text.find("[")
        end = text.rfind("]") + 1
        if start < 0 or end <= start:
            raise PermanentError(
                "Model response contained no JSON array",
                {"preview": text[:200]},
                code=ErrorCode.LLM_INVALID_RESPONSE,
            ) from None
        try:
            data = json.loads(text[start:end])
        except json.JSONDecodeError as e:
            raise PermanentError(
                f"Model response is not valid JSON: {e}",
                {"preview": text[:200]},
                code=ErrorCode.LLM_INVALID_RESPONSE,
            ) from e

    if isinstance(data, dict):
        data = data.get("recipes", [data])

    try:
        recipes = _RECIPES.validate_python(data)
    except ValidationError as e:
        raise PermanentError(
            f"Recipe validation failed: {e.error_count()} error(s)",
            {"errors": [err["msg"] for err in e.errors()][:10]},
            code=ErrorCode.LLM_INVALID_RESPONSE,
        ) from e

    if not recipes:
        raise PermanentError("Model returned no recipes", code=ErrorCode.LLM_INVALID_RESPONSE)

    logger.debug("Parsed %d recipes", len(recipes))
    return recipes
