"""
Game Catalog API — Game Service (Business Logic)
==================================================

What:  Orchestrates every /api/games operation between the query builder
       and the repository.
How:   Stateless; each call receives the request's GameRepository. Returns
       plain documents; the route handlers run the response normalizer.
Who:   Called by routes/games.py.

Error Handling Strategy:
    - Missing game / sub-resource → NotFoundError (field-specific message)
    - Property outside the allowlist → BadRequestError, before any lookup
    - Malformed id on PUT / PATCH → ValidationError("Invalid ID format")
    - Malformed id on reads / DELETE → InvalidIdentifierError propagates (500)
    - Repository errors otherwise propagate unchanged
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from gamecatalog.exceptions import (
    BadRequestError,
    InvalidIdentifierError,
    NotFoundError,
    ValidationError,
)
from gamecatalog.services.filters import FilterSpec, Projection
from gamecatalog.services.query_builder import (
    ListQuery,
    build_platform_filter,
    build_with_dlc_filter,
)
from gamecatalog.services.repository import Document, GameRepository, is_valid_id

logger = logging.getLogger(__name__)

GAME_NOT_FOUND = "Game not found"

# Fields served by GET /api/games/{id}/{property}
ALLOWED_PROPERTIES: FrozenSet[str] = frozenset({
    "title",
    "platforms",
    "genre",
    "developer",
    "publisher",
    "releaseDate",
    "description",
    "coverImage",
    "screenshots",
    "systemRequirements",
    "price",
    "rating",
})


@dataclass(frozen=True)
class SubResource:
    field: str
    missing_message: str
    require_list: bool = False
    with_title: bool = False
    wrap: bool = False


SUB_RESOURCES: Dict[str, SubResource] = {
    "platforms": SubResource("platforms", "No platforms found for this game"),
    "genre": SubResource("genre", "No genre found for this game"),
    # Wrapped as {"developer": ...} for existing clients
    "developer": SubResource("developer", "No developer found for this game", wrap=True),
    "screenshots": SubResource("screenshots", "No screenshots found for this game"),
    "requirements": SubResource(
        "systemRequirements", "No system requirements found for this game"
    ),
    "dlc": SubResource(
        "dlc", "No DLC found for this game", require_list=True, with_title=True
    ),
}


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    return False


class GameService:
    """Business logic for the games collection."""

    # ── Collection reads ──────────────────────────────────────────────────

    async def list_games(self, repo: GameRepository, query: ListQuery) -> Dict[str, Any]:
        """
        One page of the filtered collection.

        Returns:
            {"games": [...], "totalPages": n, "currentPage": page, "totalCount": count}
        """
        games = await repo.find(
            query.filter, sort=query.sort, skip=query.skip, limit=query.limit
        )
        total_count = await repo.count_documents(query.filter)
        return {
            "games": games,
            "totalPages": query.total_pages(total_count),
            "currentPage": query.page,
            "totalCount": total_count,
        }

    async def search_games(self, repo: GameRepository, spec: FilterSpec) -> List[Document]:
        return await repo.find(spec)

    async def games_by_platform(self, repo: GameRepository, platform: str) -> List[Document]:
        return await repo.find(build_platform_filter(platform))

    async def games_with_dlc(self, repo: GameRepository) -> List[Document]:
        return await repo.find(build_with_dlc_filter())

    # ── Single game CRUD ──────────────────────────────────────────────────

    async def get_game(
        self,
        repo: GameRepository,
        game_id: str,
        projection: Optional[Projection] = None,
    ) -> Document:
        game = await repo.find_by_id(game_id, projection)
        if game is None:
            raise NotFoundError(message=GAME_NOT_FOUND, resource_id=game_id)
        return game

    async def create_game(self, repo: GameRepository, payload: Mapping[str, Any]) -> Document:
        game = await repo.insert(payload)
        logger.info("Game created: %s (%s)", game["_id"], game.get("title"))
        return game

    async def replace_game(
        self, repo: GameRepository, game_id: str, payload: Mapping[str, Any]
    ) -> Document:
        """PUT: the payload becomes the whole document."""
        try:
            game = await repo.find_by_id_and_update(game_id, payload, replace=True)
        except InvalidIdentifierError as e:
            raise ValidationError(message=e.message, field="id") from e
        if game is None:
            raise NotFoundError(message=GAME_NOT_FOUND, resource_id=game_id)
        logger.info("Game replaced: %s", game_id)
        return game

    async def patch_game(
        self, repo: GameRepository, game_id: str, payload: Mapping[str, Any]
    ) -> Document:
        """PATCH: top-level keys are merged, then the result is validated."""
        if not is_valid_id(game_id):
            raise ValidationError(message="Invalid ID format", field="id")
        game = await repo.find_by_id_and_update(
            game_id, payload, return_updated=True, run_validators=True
        )
        if game is None:
            raise NotFoundError(message=GAME_NOT_FOUND, resource_id=game_id)
        logger.info("Game patched: %s (fields: %s)", game_id, ", ".join(sorted(payload)))
        return game

    async def delete_game(self, repo: GameRepository, game_id: str) -> Dict[str, str]:
        deleted = await repo.find_by_id_and_delete(game_id)
        if deleted is None:
            raise NotFoundError(message=GAME_NOT_FOUND, resource_id=game_id)
        logger.info("Game deleted: %s", game_id)
        return {"message": "Game deleted successfully"}

    # ── Accessors ─────────────────────────────────────────────────────────

    async def get_sub_resource(self, repo: GameRepository, game_id: str, name: str) -> Any:
        """
        Dedicated sub-resource routes (platforms, genre, developer,
        screenshots, requirements, dlc).

        Raises:
            NotFoundError: game missing, or field absent / empty
                           (for dlc: also when it is not a list)
        """
        resource = SUB_RESOURCES[name]
        fields = ("title", resource.field) if resource.with_title else (resource.field,)
        game = await repo.find_by_id(
            game_id, Projection(fields=fields, include_id=resource.with_title)
        )
        if game is None:
            raise NotFoundError(message=GAME_NOT_FOUND, resource_id=game_id)

        value = game.get(resource.field)
        if _is_empty(value) or (resource.require_list and not isinstance(value, list)):
            raise NotFoundError(
                message=resource.missing_message, resource=name, resource_id=game_id
            )

        if resource.with_title:
            return game
        if resource.wrap:
            return {resource.field: value}
        return value

    async def get_property(
        self,
        repo: GameRepository,
        game_id: str,
        prop: str,
        allowed: FrozenSet[str] = ALLOWED_PROPERTIES,
    ) -> Any:
        """
        Generic accessor: the bare value of one allowlisted field
        (None when the game lacks it).
        """
        if prop not in allowed:
            raise BadRequestError(
                message="Invalid property requested",
                context={"property": prop},
            )
        game = await repo.find_by_id(game_id, Projection(fields=(prop,), include_id=False))
        if game is None:
            raise NotFoundError(message=GAME_NOT_FOUND, resource_id=game_id)
        return game.get(prop)


game_service = GameService()
