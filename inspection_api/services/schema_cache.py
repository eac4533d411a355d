"""
Startup-time schema cache for the dynamic table API.

`SchemaLoader.load_all_schemas()` reflects every user table once and returns
a `SchemaCache`, a read-only mapping from table name to `TableSchema`. The
cache is never refreshed; columns added by a migration while the process is
running are only picked up after a restart.

Column classification ("is this a date column", "is this searchable") is a
pluggable callable so alternate heuristics can be swapped in without touching
the query builder.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
import logging
from types import MappingProxyType
from typing import Callable

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import CompileError, SQLAlchemyError

from inspection_api.core.errors import TableNotFoundError
from inspection_api.core.flow_logging import flow_info

logger = logging.getLogger(__name__)

_DATE_TYPE_HINTS = ("date", "time", "timestamp")
_DATE_NAME_HINTS = ("date", "time", "created", "updated")
_TEXT_TYPE_HINTS = ("text", "varchar", "char", "character", "string", "clob")
_SEARCH_NAME_HINTS = ("name", "vin", "email", "title", "description")

_DIALECT_LABELS = {"sqlite": "SQLite", "postgresql": "PostgreSQL"}


@dataclass(frozen=True)
class ColumnInfo:
    name: str
    declared_type: str
    is_not_null: bool
    is_primary_key: bool

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "type": self.declared_type,
            "notNull": self.is_not_null,
            "primaryKey": self.is_primary_key,
        }


@dataclass(frozen=True)
class ColumnClassification:
    is_date: bool = False
    is_searchable: bool = False


ColumnClassifier = Callable[[ColumnInfo], ColumnClassification]


def default_column_classifier(col: ColumnInfo) -> ColumnClassification:
    name = col.name.lower()
    declared = col.declared_type.lower()
    is_date = any(h in declared for h in _DATE_TYPE_HINTS) or any(
        h in name for h in _DATE_NAME_HINTS
    )
    is_searchable = any(h in declared for h in _TEXT_TYPE_HINTS) or any(
        h in name for h in _SEARCH_NAME_HINTS
    )
    return ColumnClassification(is_date=is_date, is_searchable=is_searchable)


@dataclass(frozen=True)
class TableSchema:
    table_name: str
    columns: tuple[ColumnInfo, ...]
    date_columns: tuple[str, ...]
    searchable_columns: tuple[str, ...]

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.columns)

    def has_column(self, name: str) -> bool:
        return any(c.name == name for c in self.columns)

    def get_column(self, name: str) -> ColumnInfo | None:
        for col in self.columns:
            if col.name == name:
                return col
        return None

    @property
    def primary_key_column(self) -> ColumnInfo | None:
        for col in self.columns:
            if col.is_primary_key:
                return col
        return None

    @property
    def key_column(self) -> ColumnInfo | None:
        """Column used for `/:table/:id` lookups."""
        pk_cols = [c for c in self.columns if c.is_primary_key]
        if len(pk_cols) == 1:
            return pk_cols[0]
        return self.get_column("id")

    def to_dict(self) -> dict[str, object]:
        return {
            "columns": [c.to_dict() for c in self.columns],
            "searchableColumns": list(self.searchable_columns),
            "dateColumns": list(self.date_columns),
        }


def build_table_schema(
    table_name: str,
    columns: Iterable[ColumnInfo],
    classifier: ColumnClassifier = default_column_classifier,
) -> TableSchema:
    cols = tuple(columns)
    date_columns: list[str] = []
    searchable_columns: list[str] = []
    for col in cols:
        classification = classifier(col)
        if classification.is_date:
            date_columns.append(col.name)
        if classification.is_searchable:
            searchable_columns.append(col.name)
    return TableSchema(
        table_name=table_name,
        columns=cols,
        date_columns=tuple(date_columns),
        searchable_columns=tuple(searchable_columns),
    )


class SchemaCache(Mapping[str, TableSchema]):
    """Read-only table name -> TableSchema map built once at startup."""

    def __init__(self, schemas: Mapping[str, TableSchema], dialect_name: str = "") -> None:
        self._schemas = MappingProxyType(dict(schemas))
        self.dialect_name = dialect_name

    def __getitem__(self, table_name: str) -> TableSchema:
        return self._schemas[table_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._schemas)

    def __len__(self) -> int:
        return len(self._schemas)

    def require(self, table_name: str) -> TableSchema:
        schema = self._schemas.get(table_name)
        if schema is None:
            raise TableNotFoundError(table_name)
        return schema

    def table_names(self) -> list[str]:
        return sorted(self._schemas)

    @property
    def dialect_label(self) -> str:
        return _DIALECT_LABELS.get(self.dialect_name, self.dialect_name)


def _declared_type_name(sql_type, dialect) -> str:
    try:
        return str(sql_type.compile(dialect=dialect))
    except CompileError:
        return sql_type.__class__.__name__.upper()


class SchemaLoader:
    """
    Reflects the database once and produces the frozen `SchemaCache`.

    With `fail_fast=False` a table whose introspection fails is skipped and
    logged; with `fail_fast=True` the error propagates and startup aborts.
    """

    def __init__(
        self,
        engine: Engine,
        *,
        classifier: ColumnClassifier = default_column_classifier,
        excluded_tables: Iterable[str] = (),
        fail_fast: bool = False,
    ) -> None:
        self.engine = engine
        self.classifier = classifier
        self.excluded_tables = frozenset(excluded_tables)
        self.fail_fast = fail_fast
        self._schemas: dict[str, TableSchema] = {}
        self._cache: SchemaCache | None = None

    def _list_user_tables(self) -> list[str]:
        insp = inspect(self.engine)
        # The inspector already leaves out sqlite_* and pg_catalog tables.
        names = insp.get_table_names()
        return [n for n in names if n not in self.excluded_tables]

    def load_schema_for_table(self, table_name: str) -> TableSchema:
        if self._cache is not None:
            raise RuntimeError("Schema cache is already loaded and read-only")

        insp = inspect(self.engine)
        reflected = insp.get_columns(table_name)
        pk = insp.get_pk_constraint(table_name) or {}
        pk_cols = set(pk.get("constrained_columns") or [])

        columns = [
            ColumnInfo(
                name=c["name"],
                declared_type=_declared_type_name(c["type"], self.engine.dialect),
                is_not_null=not c.get("nullable", True),
                is_primary_key=c["name"] in pk_cols,
            )
            for c in reflected
        ]
        schema = build_table_schema(table_name, columns, self.classifier)
        self._schemas[table_name] = schema
        flow_info(
            logger,
            "schema_loaded table=%s columns=%s searchable=%s date=%s",
            table_name,
            len(schema.columns),
            len(schema.searchable_columns),
            len(schema.date_columns),
            category="schema",
        )
        return schema

    def load_all_schemas(self) -> SchemaCache:
        if self._cache is not None:
            raise RuntimeError("Schema cache can only be loaded once per process")

        for table_name in self._list_user_tables():
            try:
                self.load_schema_for_table(table_name)
            except SQLAlchemyError:
                if self.fail_fast:
                    logger.exception("schema_load_failed table=%s", table_name)
                    raise
                logger.warning(
                    "schema_load_skipped table=%s", table_name, exc_info=True
                )

        self._cache = SchemaCache(self._schemas, dialect_name=self.engine.dialect.name)
        flow_info(
            logger,
            "schema_cache_ready tables=%s dialect=%s",
            len(self._cache),
            self._cache.dialect_label,
            category="schema",
        )
        return self._cache
