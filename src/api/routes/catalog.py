"""Category and leaderboard routes (public, read-only)."""

from typing import List

from fastapi import APIRouter

from core.dependencies import CategoryManagerDep, LeaderboardManagerDep
from core.exceptions import NotFoundError
from schemas.category import Category
from schemas.leaderboard import LeaderboardEntry

router = APIRouter(prefix="/api", tags=["Catalog"])


@router.get("/categories", response_model=List[Category], summary="List categories")
def list_categories(category_manager: CategoryManagerDep = None) -> List[Category]:
    return category_manager.get_categories()


@router.get(
    "/categories/{category_id}", response_model=Category, summary="Get a category"
)
def get_category(
    category_id: str, category_manager: CategoryManagerDep = None
) -> Category:
    category = category_manager.get_category_by_id(category_id)
    if category is None:
        raise NotFoundError("Category not found.")
    return category


@router.get(
    "/leaderboard", response_model=List[LeaderboardEntry], summary="Top players"
)
def leaderboard(
    leaderboard_manager: LeaderboardManagerDep = None,
) -> List[LeaderboardEntry]:
    return leaderboard_manager.get_leaderboard()
