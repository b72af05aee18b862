"""
Game Catalog API — Game Repository Interface
==============================================

What:  Abstract storage collaborator for Game documents.
How:   Concrete backends implement a handful of primitives; the shared
       validation ("run validators") and patch-merging rules live here so
       both backends enforce the same document invariants.
Who:   GameService calls it; FastAPI injects it via get_game_repository().

Implementations:
    - SqlGameRepository:    PostgreSQL JSONB column (services/sql_repository.py)
    - MemoryGameRepository: process-local ordered dict (services/memory_repository.py)

Contract:
    - Documents are returned as plain dicts with the identity under "_id".
    - Malformed ids raise InvalidIdentifierError.
    - Documents violating the Game schema raise DocumentValidationError.
    - Anything else that goes wrong in the backend raises StorageError.
"""

import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from gamecatalog.exceptions import DocumentValidationError, InvalidIdentifierError
from gamecatalog.schemas.game import GameDocument
from gamecatalog.services.filters import FilterSpec, Projection, SortSpec

Document = Dict[str, Any]


def is_valid_id(game_id: str) -> bool:
    try:
        uuid.UUID(str(game_id))
    except ValueError:
        return False
    return True


def parse_id(game_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(game_id))
    except ValueError:
        raise InvalidIdentifierError(game_id) from None


def _describe_errors(exc: PydanticValidationError) -> List[Dict[str, Any]]:
    return [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]


def validate_document(document: Mapping[str, Any]) -> Document:
    """
    Validate a full Game document and return its storage form.

    Raises:
        DocumentValidationError: with one entry per failing field
    """
    try:
        model = GameDocument.model_validate(dict(document))
    except PydanticValidationError as exc:
        errors = _describe_errors(exc)
        summary = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
        raise DocumentValidationError(
            message=f"Game validation failed: {summary}",
            errors=errors,
        ) from None
    return model.to_storage()


def merge_patch(current: Mapping[str, Any], patch: Mapping[str, Any]) -> Document:
    """
    Shallow merge of top-level keys.

    Embedded values (price, systemRequirements, dlc) are replaced wholesale;
    a None value removes the key. The identity field is never patched.
    """
    merged = dict(current)
    for key, value in patch.items():
        if key == "_id":
            continue
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    return merged


class GameRepository(ABC):
    """Storage collaborator for the games collection."""

    @abstractmethod
    async def find(
        self,
        spec: FilterSpec,
        projection: Optional[Projection] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Document]:
        """Matching documents in insertion order (or ``sort`` order)."""
        ...

    @abstractmethod
    async def count_documents(self, spec: FilterSpec) -> int:
        ...

    @abstractmethod
    async def find_by_id(
        self, game_id: str, projection: Optional[Projection] = None
    ) -> Optional[Document]:
        ...

    @abstractmethod
    async def _insert_validated(self, document: Document) -> Document:
        """Persist an already validated document under a new identity."""
        ...

    @abstractmethod
    async def _load_for_update(self, game_id: str) -> Optional[Document]:
        """Current stored document (without ``_id``), or None."""
        ...

    @abstractmethod
    async def _store_update(self, game_id: str, document: Document) -> None:
        ...

    @abstractmethod
    async def find_by_id_and_delete(self, game_id: str) -> Optional[Document]:
        """Remove a game and return what was stored, or None."""
        ...

    @abstractmethod
    async def delete_all(self) -> int:
        """Remove every game; returns how many were removed."""
        ...

    async def insert(self, document: Mapping[str, Any]) -> Document:
        return await self._insert_validated(validate_document(document))

    async def find_by_id_and_update(
        self,
        game_id: str,
        patch: Mapping[str, Any],
        return_updated: bool = True,
        run_validators: bool = True,
        replace: bool = False,
    ) -> Optional[Document]:
        """
        Update a game.

        Args:
            replace:        True → ``patch`` becomes the whole document;
                            False → top-level keys are merged into it
            run_validators: validate the resulting document before storing
            return_updated: return the new document (else the previous one)

        Returns:
            The chosen document with ``_id``, or None if the game does not exist
        """
        current = await self._load_for_update(game_id)
        if current is None:
            return None

        updated: Document = dict(patch) if replace else merge_patch(current, patch)
        updated.pop("_id", None)
        if run_validators or replace:
            updated = validate_document(updated)

        await self._store_update(game_id, updated)
        chosen = updated if return_updated else current
        return {"_id": str(parse_id(game_id)), **chosen}
