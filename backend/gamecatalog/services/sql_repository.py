"""
Game Catalog API — PostgreSQL Game Repository
===============================================

What:  GameRepository backed by the ``games`` table (JSONB documents).
How:   Filter descriptors are compiled to JSONB expressions:

           AnyOf         document -> 'platforms' ?| ARRAY['PC', 'Xbox']
           Equals        document -> 'genre' @> '"RPG"' (scalar equality or array member)
           Contains      document ->> 'title' ILIKE '%zelda%' (wildcards escaped)
           Range         CASE WHEN jsonb_typeof(...) = 'number'
                              THEN CAST(... AS FLOAT) END >= :bound
           NonEmptyList  CASE WHEN jsonb_typeof(...) = 'array'
                              THEN jsonb_array_length(...) ELSE 0 END > 0

       Dotted paths (``price.amount``) use the ``#>`` / ``#>>`` path operators.
Who:   Built per request by get_game_repository() with that request's session.

Error translation:
    SQLAlchemyError → StorageError (message = driver error text)
    malformed id    → InvalidIdentifierError (before any SQL is sent)
"""

import logging
import uuid
from typing import Any, List, Optional

from sqlalchemy import Text, and_, case, delete, func, select, true, update
from sqlalchemy.dialects.postgresql import array
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from gamecatalog.exceptions import StorageError
from gamecatalog.models.game import GameRecord
from gamecatalog.services.filters import (
    AnyOf,
    Contains,
    Equals,
    FilterSpec,
    NonEmptyList,
    Predicate,
    Projection,
    Range,
    SortSpec,
)
from gamecatalog.services.repository import Document, GameRepository, parse_id

logger = logging.getLogger(__name__)

# Sort paths compared numerically; every other path is compared as text
NUMERIC_PATHS = frozenset({"rating", "price.amount"})


# ── Predicate compilation ─────────────────────────────────────────────────

def json_element(path: str):
    """``document -> 'a'`` for a single key, ``document #> '{a,b}'`` for a path."""
    parts = tuple(path.split("."))
    if len(parts) == 1:
        return GameRecord.document[parts[0]]
    return GameRecord.document[parts]


def numeric_value(path: str) -> ColumnElement:
    element = json_element(path)
    return case(
        (func.jsonb_typeof(element) == "number", element.as_float()),
        else_=None,
    )


def escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def compile_predicate(path: str, predicate: Predicate) -> ColumnElement:
    element = json_element(path)

    if isinstance(predicate, AnyOf):
        return element.has_any(array(list(predicate.values), type_=Text))

    if isinstance(predicate, Equals):
        return element.contains(predicate.value)

    if isinstance(predicate, Contains):
        pattern = f"%{escape_like(predicate.text)}%"
        return element.astext.ilike(pattern, escape="\\")

    if isinstance(predicate, Range):
        value = numeric_value(path)
        clauses = []
        if predicate.gte is not None:
            clauses.append(value >= predicate.gte)
        if predicate.lte is not None:
            clauses.append(value <= predicate.lte)
        if not clauses:
            clauses.append(value.is_not(None))
        return and_(*clauses)

    if isinstance(predicate, NonEmptyList):
        length = case(
            (func.jsonb_typeof(element) == "array", func.jsonb_array_length(element)),
            else_=0,
        )
        return length > 0

    raise TypeError(f"Unsupported predicate: {predicate!r}")


def compile_filter(spec: FilterSpec) -> ColumnElement:
    if not spec:
        return true()
    return and_(*(compile_predicate(path, predicate) for path, predicate in spec.items()))


def compile_order(sort: Optional[SortSpec]) -> List[Any]:
    """ORDER BY clauses; insertion order is the default and the tie-break."""
    order: List[Any] = []
    if sort is not None:
        if sort.path in NUMERIC_PATHS:
            key = numeric_value(sort.path)
        else:
            key = json_element(sort.path).astext
        key = key.desc() if sort.descending else key.asc()
        order.append(key.nulls_last())
    order.extend([GameRecord.created_at.asc(), GameRecord.id.asc()])
    return order


# ── Repository ────────────────────────────────────────────────────────────

class SqlGameRepository(GameRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _execute(self, statement):
        try:
            return await self.session.execute(statement)
        except SQLAlchemyError as e:
            logger.error("Database error: %s", str(e), exc_info=True)
            raise StorageError(message=str(e)) from e

    async def _get_record(self, game_id: str) -> Optional[GameRecord]:
        key = parse_id(game_id)
        result = await self._execute(select(GameRecord).where(GameRecord.id == key))
        return result.scalar_one_or_none()

    async def find(
        self,
        spec: FilterSpec,
        projection: Optional[Projection] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Document]:
        query = select(GameRecord).where(compile_filter(spec)).order_by(*compile_order(sort))
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)

        result = await self._execute(query)
        documents = [record.to_document() for record in result.scalars().all()]
        if projection is not None:
            documents = [projection.apply(document) for document in documents]
        return documents

    async def count_documents(self, spec: FilterSpec) -> int:
        query = select(func.count(GameRecord.id)).where(compile_filter(spec))
        result = await self._execute(query)
        return result.scalar() or 0

    async def find_by_id(
        self, game_id: str, projection: Optional[Projection] = None
    ) -> Optional[Document]:
        record = await self._get_record(game_id)
        if record is None:
            return None
        document = record.to_document()
        return projection.apply(document) if projection is not None else document

    async def _insert_validated(self, document: Document) -> Document:
        record = GameRecord(id=uuid.uuid4(), document=document)
        self.session.add(record)
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error("Database error inserting game: %s", str(e), exc_info=True)
            raise StorageError(message=str(e)) from e
        return record.to_document()

    async def _load_for_update(self, game_id: str) -> Optional[Document]:
        record = await self._get_record(game_id)
        return dict(record.document) if record is not None else None

    async def _store_update(self, game_id: str, document: Document) -> None:
        await self._execute(
            update(GameRecord)
            .where(GameRecord.id == parse_id(game_id))
            .values(document=document)
        )

    async def find_by_id_and_delete(self, game_id: str) -> Optional[Document]:
        result = await self._execute(
            delete(GameRecord)
            .where(GameRecord.id == parse_id(game_id))
            .returning(GameRecord.id, GameRecord.document)
        )
        row = result.one_or_none()
        if row is None:
            return None
        return {"_id": str(row.id), **row.document}

    async def delete_all(self) -> int:
        result = await self._execute(delete(GameRecord))
        return result.rowcount or 0
