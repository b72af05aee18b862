"""
Game Catalog API — Game Route Handlers
========================================

What:  Every endpoint under /api/games.
How:   Handlers are thin: build the query with the query builder, call
       GameService with the injected repository, and pass the result
       through ``normalize_payload`` before returning it.

Route order matters: fixed paths (/search, /with-dlc, /platform/...) and
the dedicated sub-resource paths are registered before the catch-all
/{game_id}/{prop} accessor.

Numeric query parameters are declared as strings so that malformed values
reach the query builder (which falls back to defaults) instead of being
rejected by FastAPI.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query

from gamecatalog.config import settings
from gamecatalog.dependencies import get_game_repository
from gamecatalog.schemas.game import ErrorResponse, GameListResponse, MessageResponse
from gamecatalog.services.game_service import ALLOWED_PROPERTIES, game_service
from gamecatalog.services.normalizer import normalize_payload
from gamecatalog.services.query_builder import (
    build_list_query,
    build_search_filter,
    parse_fields,
)
from gamecatalog.services.repository import GameRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/games", tags=["Games"])

NOT_FOUND = {404: {"description": "Game or sub-resource not found", "model": ErrorResponse}}
BAD_REQUEST = {400: {"description": "Invalid input", "model": ErrorResponse}}
SERVER_ERROR = {500: {"description": "Storage error", "model": ErrorResponse}}

GameBody = Body(..., description="Game document (camelCase keys)")


# ══════════════════════════════════════════════════════════════════════════
# Collection endpoints
# ══════════════════════════════════════════════════════════════════════════


@router.get("/", response_model=GameListResponse, include_in_schema=False)
@router.get(
    "",
    response_model=GameListResponse,
    responses={**SERVER_ERROR},
    summary="List games (paginated, filterable)",
)
async def list_games(
    page: Optional[str] = Query(default=None, description="1-based page number (default 1)"),
    limit: Optional[str] = Query(
        default=None, description=f"Games per page (default {settings.default_page_size}, max {settings.max_page_size})"
    ),
    platform: Optional[str] = Query(default=None, description="Comma list; games on any of them"),
    genre: Optional[str] = Query(default=None, description="Comma list; games in any of them"),
    sort: Optional[str] = Query(
        default=None, description="title | releaseDate | rating | price, prefix '-' for descending"
    ),
    repo: GameRepository = Depends(get_game_repository),
) -> Dict[str, Any]:
    query = build_list_query(
        page=page,
        limit=limit,
        platform=platform,
        genre=genre,
        sort=sort,
        default_limit=settings.default_page_size,
        max_limit=settings.max_page_size,
    )
    result = await game_service.list_games(repo, query)
    result["games"] = normalize_payload(result["games"])
    return result


@router.get(
    "/search",
    responses={**SERVER_ERROR},
    summary="Search games by several criteria (unpaginated)",
)
async def search_games(
    title: Optional[str] = Query(default=None, description="Case-insensitive substring"),
    genre: Optional[str] = Query(default=None, description="Single genre"),
    developer: Optional[str] = Query(default=None, description="Case-insensitive substring"),
    min_rating: Optional[str] = Query(default=None, alias="minRating"),
    max_price: Optional[str] = Query(default=None, alias="maxPrice"),
    repo: GameRepository = Depends(get_game_repository),
) -> List[Dict[str, Any]]:
    spec = build_search_filter(
        title=title,
        genre=genre,
        developer=developer,
        min_rating=min_rating,
        max_price=max_price,
    )
    return normalize_payload(await game_service.search_games(repo, spec))


@router.get("/with-dlc", responses={**SERVER_ERROR}, summary="Games that have DLC")
async def games_with_dlc(
    repo: GameRepository = Depends(get_game_repository),
) -> List[Dict[str, Any]]:
    return normalize_payload(await game_service.games_with_dlc(repo))


@router.get("/platform/{platform}", responses={**SERVER_ERROR}, summary="Games on one platform")
async def games_by_platform(
    platform: str,
    repo: GameRepository = Depends(get_game_repository),
) -> List[Dict[str, Any]]:
    return normalize_payload(await game_service.games_by_platform(repo, platform))


@router.post("/", status_code=201, include_in_schema=False)
@router.post(
    "",
    status_code=201,
    responses={**BAD_REQUEST, **SERVER_ERROR},
    summary="Create a game",
)
async def create_game(
    payload: Dict[str, Any] = GameBody,
    repo: GameRepository = Depends(get_game_repository),
) -> Dict[str, Any]:
    return normalize_payload(await game_service.create_game(repo, payload))


# ══════════════════════════════════════════════════════════════════════════
# Single game endpoints
# ══════════════════════════════════════════════════════════════════════════


@router.get(
    "/{game_id}",
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Get a game by id",
)
async def get_game(
    game_id: str,
    fields: Optional[str] = Query(default=None, description="Comma list of fields to return"),
    repo: GameRepository = Depends(get_game_repository),
) -> Dict[str, Any]:
    game = await game_service.get_game(repo, game_id, parse_fields(fields))
    return normalize_payload(game)


@router.put(
    "/{game_id}",
    responses={**BAD_REQUEST, **NOT_FOUND, **SERVER_ERROR},
    summary="Replace a game",
)
async def replace_game(
    game_id: str,
    payload: Dict[str, Any] = GameBody,
    repo: GameRepository = Depends(get_game_repository),
) -> Dict[str, Any]:
    return normalize_payload(await game_service.replace_game(repo, game_id, payload))


@router.patch(
    "/{game_id}",
    responses={**BAD_REQUEST, **NOT_FOUND, **SERVER_ERROR},
    summary="Partially update a game",
)
async def patch_game(
    game_id: str,
    payload: Dict[str, Any] = GameBody,
    repo: GameRepository = Depends(get_game_repository),
) -> Dict[str, Any]:
    return normalize_payload(await game_service.patch_game(repo, game_id, payload))


@router.delete(
    "/{game_id}",
    response_model=MessageResponse,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Delete a game",
)
async def delete_game(
    game_id: str,
    repo: GameRepository = Depends(get_game_repository),
) -> Dict[str, str]:
    return await game_service.delete_game(repo, game_id)


# ══════════════════════════════════════════════════════════════════════════
# Sub-resource accessors
# ══════════════════════════════════════════════════════════════════════════


@router.get("/{game_id}/platforms", responses={**NOT_FOUND}, summary="Platforms of a game")
async def game_platforms(game_id: str, repo: GameRepository = Depends(get_game_repository)):
    return await game_service.get_sub_resource(repo, game_id, "platforms")


@router.get("/{game_id}/genre", responses={**NOT_FOUND}, summary="Genres of a game")
async def game_genre(game_id: str, repo: GameRepository = Depends(get_game_repository)):
    return await game_service.get_sub_resource(repo, game_id, "genre")


@router.get(
    "/{game_id}/developer",
    responses={**NOT_FOUND},
    summary="Developer of a game, as {\"developer\": ...}",
)
async def game_developer(game_id: str, repo: GameRepository = Depends(get_game_repository)):
    return await game_service.get_sub_resource(repo, game_id, "developer")


@router.get("/{game_id}/screenshots", responses={**NOT_FOUND}, summary="Screenshot URLs")
async def game_screenshots(game_id: str, repo: GameRepository = Depends(get_game_repository)):
    return await game_service.get_sub_resource(repo, game_id, "screenshots")


@router.get("/{game_id}/requirements", responses={**NOT_FOUND}, summary="System requirements")
async def game_requirements(game_id: str, repo: GameRepository = Depends(get_game_repository)):
    return await game_service.get_sub_resource(repo, game_id, "requirements")


@router.get("/{game_id}/dlc", responses={**NOT_FOUND}, summary="Title and DLC list of a game")
async def game_dlc(game_id: str, repo: GameRepository = Depends(get_game_repository)):
    return normalize_payload(await game_service.get_sub_resource(repo, game_id, "dlc"))


@router.get(
    "/{game_id}/{prop}",
    responses={**BAD_REQUEST, **NOT_FOUND, **SERVER_ERROR},
    summary="Bare value of one allowlisted game field",
)
async def game_property(
    game_id: str,
    prop: str,
    repo: GameRepository = Depends(get_game_repository),
):
    return await game_service.get_property(repo, game_id, prop, allowed=ALLOWED_PROPERTIES)
