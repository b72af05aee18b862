"""
Game Catalog API — In-Memory Game Repository
==============================================

What:  GameRepository over a process-local ordered dict.
Who:   Selected with STORAGE_BACKEND=memory (local development, demos) and
       used by the test-suite.
How:   Filter descriptors are evaluated with each predicate's ``matches()``.
       Documents are deep-copied on the way in and out so callers can never
       mutate stored state.

Single event loop only: there are no awaits between reading and writing
the dict, so no locking is needed.
"""

import copy
import uuid
from typing import Dict, List, Optional

from gamecatalog.services.filters import (
    MISSING,
    FilterSpec,
    Projection,
    SortSpec,
    matches_filter,
    resolve_path,
)
from gamecatalog.services.repository import Document, GameRepository, parse_id


class MemoryGameRepository(GameRepository):

    def __init__(self) -> None:
        # id (str) → document without "_id", in insertion order
        self._games: Dict[str, Document] = {}

    def _with_id(self, game_id: str, document: Document) -> Document:
        return {"_id": game_id, **copy.deepcopy(document)}

    def _sorted(self, documents: List[Document], sort: Optional[SortSpec]) -> List[Document]:
        if sort is None:
            return documents
        present = [d for d in documents if resolve_path(d, sort.path) not in (MISSING, None)]
        absent = [d for d in documents if resolve_path(d, sort.path) in (MISSING, None)]
        present.sort(key=lambda d: resolve_path(d, sort.path), reverse=sort.descending)
        return present + absent

    async def find(
        self,
        spec: FilterSpec,
        projection: Optional[Projection] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Document]:
        matched = [
            self._with_id(game_id, document)
            for game_id, document in self._games.items()
            if matches_filter(document, spec)
        ]
        matched = self._sorted(matched, sort)
        end = None if limit is None else skip + limit
        page = matched[skip:end]
        if projection is not None:
            page = [projection.apply(document) for document in page]
        return page

    async def count_documents(self, spec: FilterSpec) -> int:
        return sum(1 for document in self._games.values() if matches_filter(document, spec))

    async def find_by_id(
        self, game_id: str, projection: Optional[Projection] = None
    ) -> Optional[Document]:
        key = str(parse_id(game_id))
        document = self._games.get(key)
        if document is None:
            return None
        found = self._with_id(key, document)
        return projection.apply(found) if projection is not None else found

    async def _insert_validated(self, document: Document) -> Document:
        game_id = str(uuid.uuid4())
        self._games[game_id] = copy.deepcopy(document)
        return self._with_id(game_id, document)

    async def _load_for_update(self, game_id: str) -> Optional[Document]:
        document = self._games.get(str(parse_id(game_id)))
        return copy.deepcopy(document) if document is not None else None

    async def _store_update(self, game_id: str, document: Document) -> None:
        self._games[str(parse_id(game_id))] = copy.deepcopy(document)

    async def find_by_id_and_delete(self, game_id: str) -> Optional[Document]:
        key = str(parse_id(game_id))
        document = self._games.pop(key, None)
        if document is None:
            return None
        return {"_id": key, **document}

    async def delete_all(self) -> int:
        removed = len(self._games)
        self._games.clear()
        return removed

    def __len__(self) -> int:
        return len(self._games)

