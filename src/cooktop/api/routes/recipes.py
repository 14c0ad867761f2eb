"""Recipe catalogue API routes."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from ..schemas import RecipeSelection
from .state import require_clock

router = APIRouter()


@router.get("/")
async def list_recipes():
    """List the recipe catalogue and the current selection."""
    clock = require_clock()
    selected = clock.machine.session.selected_recipe
    return {
        "recipes": [recipe.to_dict() for recipe in clock.config.recipes],
        "selected": selected.id if selected else None,
    }


@router.post("/select")
async def select_recipe(selection: RecipeSelection):
    """Select the recipe for the next start (idle only)."""
    clock = require_clock()
    recipe = clock.config.get_recipe(selection.recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail=f"Unknown recipe: {selection.recipe_id}")
    if not clock.select_recipe(recipe):
        raise HTTPException(status_code=400, detail="Recipe can only be changed while idle")
    return {"success": True, "selected": recipe.id}
