# inspection_api/crud/dynamic.py
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass
import logging
import math
import re
from typing import Any, Iterator

from sqlalchemy import String, and_, cast, column, delete, func, insert, or_, select, table, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.pool import SingletonThreadPool, StaticPool
from sqlalchemy.sql import ColumnElement, TableClause

from inspection_api.core.config import settings
from inspection_api.core.errors import InvalidColumnError, RecordNotFoundError, UnderlyingStoreError
from inspection_api.core.flow_logging import flow_info
from inspection_api.services.schema_cache import ColumnInfo, TableSchema

logger = logging.getLogger(__name__)

_LIKE_ESCAPE = "\\"
_MISSING = object()
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_INTEGER_TYPE = re.compile(r"\b(?:TINY|SMALL|MEDIUM|BIG)?INT(?:EGER|[248])?\b")
# Pools that hand every checkout the same DBAPI connection.
_SHARED_CONNECTION_POOLS = (StaticPool, SingletonThreadPool)


@dataclass(frozen=True)
class ListParams:
    page: int = 1
    limit: int = 50
    search: str = ""
    sort_by: str | None = None
    sort_order: str = "DESC"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def parse_leading_int(value: int | str | None) -> int | None:
    """Leading integer of `value` ("12abc" -> 12), or None when there is none."""
    if value is None or isinstance(value, int):
        return value
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def normalize_list_params(
    page: int | str | None = None,
    limit: int | str | None = None,
    search: str | None = None,
    sort_by: str | None = None,
    sort_order: str | None = None,
    *,
    default_limit: int | None = None,
    max_limit: int | None = None,
) -> ListParams:
    default_limit = default_limit or settings.DYNAMIC_API_DEFAULT_LIMIT
    max_limit = max_limit or settings.DYNAMIC_API_MAX_LIMIT

    page_num = parse_leading_int(page)
    limit_num = parse_leading_int(limit)
    page_value = page_num if page_num and page_num > 0 else 1
    limit_value = limit_num if limit_num and limit_num > 0 else default_limit
    limit_value = min(limit_value, max_limit)
    order = "ASC" if (sort_order or "").strip().upper() == "ASC" else "DESC"
    sort_col = (sort_by or "").strip() or None
    return ListParams(
        page=page_value,
        limit=limit_value,
        search=(search or "").strip(),
        sort_by=sort_col,
        sort_order=order,
    )


def _lightweight_table(schema: TableSchema) -> TableClause:
    # Untyped columns: values are bound as-is and rows come back as the
    # driver returns them.
    return table(schema.table_name, *[column(c.name) for c in schema.columns])


@contextmanager
def _store_errors(db: Session, message: str, table_name: str, op: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("dynamic_store_error op=%s table=%s", op, table_name)
        raise UnderlyingStoreError(message) from exc


def resolve_sort_column(schema: TableSchema, sort_by: str | None = None) -> str:
    if sort_by:
        if not schema.has_column(sort_by):
            raise InvalidColumnError(
                f"Unknown sort column '{sort_by}' for table '{schema.table_name}'",
                [sort_by],
            )
        return sort_by

    dates = schema.date_columns
    if dates:
        for hint in ("created", "updated"):
            match = next((c for c in dates if hint in c.lower()), None)
            if match:
                return match
        return dates[0]

    pk = schema.primary_key_column
    if pk is not None:
        return pk.name
    return schema.columns[0].name


def _escape_like(term: str) -> str:
    return (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


def split_search_terms(search: str | None) -> list[str]:
    return (search or "").split()


def build_search_condition(
    tbl: TableClause,
    schema: TableSchema,
    search: str | None,
) -> ColumnElement[bool] | None:
    """
    OR across searchable columns, where each column must contain every term.
    Matching is case-insensitive on all backends.
    """
    terms = split_search_terms(search)
    if not terms or not schema.searchable_columns:
        return None

    per_column = []
    for col_name in schema.searchable_columns:
        text_col = cast(tbl.c[col_name], String)
        per_column.append(
            and_(
                *[
                    text_col.ilike(f"%{_escape_like(term)}%", escape=_LIKE_ESCAPE)
                    for term in terms
                ]
            )
        )
    return or_(*per_column)


def _fetch_page_and_total(db: Session, page_stmt, count_stmt) -> tuple[list, int]:
    """Runs the page query and the count query at the same time."""
    bind = db.get_bind()
    # A session bound to a Connection has no pool of its own.
    pool = getattr(bind, "pool", None)
    if pool is not None and not isinstance(pool, _SHARED_CONNECTION_POOLS):

        def _page():
            with bind.connect() as conn:
                return conn.execute(page_stmt).mappings().all()

        def _total():
            with bind.connect() as conn:
                return conn.execute(count_stmt).scalar_one()

        with ThreadPoolExecutor(max_workers=2) as executor:
            page_future = executor.submit(_page)
            total_future = executor.submit(_total)
            return page_future.result(), int(total_future.result())

    # A single shared connection cannot run both statements at once.
    rows = db.execute(page_stmt).mappings().all()
    return rows, int(db.execute(count_stmt).scalar_one())


def list_rows(db: Session, schema: TableSchema, params: ListParams) -> dict[str, Any]:
    tbl = _lightweight_table(schema)
    sort_column = resolve_sort_column(schema, params.sort_by)
    condition = build_search_condition(tbl, schema, params.search)

    base_stmt = select(tbl)
    count_stmt = select(func.count()).select_from(tbl)
    if condition is not None:
        base_stmt = base_stmt.where(condition)
        count_stmt = count_stmt.where(condition)

    descending = params.sort_order == "DESC"
    order_cols = [sort_column]
    key = schema.key_column
    if key is not None and key.name != sort_column:
        # Tie-breaker so that pages never overlap when sort values repeat.
        order_cols.append(key.name)
    order_by = [tbl.c[c].desc() if descending else tbl.c[c].asc() for c in order_cols]

    page_stmt = base_stmt.order_by(*order_by).offset(params.offset).limit(params.limit)

    flow_info(
        logger,
        "dynamic_list table=%s page=%s limit=%s sort=%s %s search=%r",
        schema.table_name,
        params.page,
        params.limit,
        sort_column,
        params.sort_order,
        params.search,
        category="query",
    )

    with _store_errors(db, "Failed to get table data", schema.table_name, "list"):
        rows, total = _fetch_page_and_total(db, page_stmt, count_stmt)

    total_pages = math.ceil(total / params.limit) if params.limit else 0
    return {
        "data": [dict(row) for row in rows],
        "pagination": {
            "page": params.page,
            "limit": params.limit,
            "total": total,
            "totalPages": total_pages,
            "hasNext": params.page < total_pages,
            "hasPrev": params.page > 1,
        },
        "meta": {
            "tableName": schema.table_name,
            "schema": schema.to_dict(),
            "sortedBy": sort_column,
            "sortOrder": params.sort_order,
            "searchTerm": params.search,
        },
    }


def _require_key_column(schema: TableSchema) -> ColumnInfo:
    key = schema.key_column
    if key is None:
        raise InvalidColumnError(f"Table '{schema.table_name}' has no id column")
    return key


def _coerce_id(key: ColumnInfo, row_id: Any) -> Any:
    """Returns `_MISSING` when `row_id` can never match an integer key."""
    if _INTEGER_TYPE.search(key.declared_type.upper()) and not isinstance(row_id, int):
        try:
            return int(str(row_id).strip())
        except ValueError:
            return _MISSING
    return row_id


def validate_field_map(schema: TableSchema, fields: dict[str, Any]) -> None:
    if not fields:
        raise InvalidColumnError("No fields supplied")
    unknown = sorted(k for k in fields if not schema.has_column(k))
    if unknown:
        raise InvalidColumnError(
            f"Unknown columns for table '{schema.table_name}'",
            unknown,
        )


def get_row(db: Session, schema: TableSchema, row_id: Any) -> dict[str, Any] | None:
    key = _require_key_column(schema)
    value = _coerce_id(key, row_id)
    if value is _MISSING:
        return None

    tbl = _lightweight_table(schema)
    stmt = select(tbl).where(tbl.c[key.name] == value).limit(1)
    with _store_errors(db, "Failed to get record", schema.table_name, "get"):
        row = db.execute(stmt).mappings().first()
    return dict(row) if row is not None else None


def create_row(db: Session, schema: TableSchema, fields: dict[str, Any]) -> dict[str, Any]:
    validate_field_map(schema, fields)
    tbl = _lightweight_table(schema)
    key = schema.key_column
    stmt = insert(tbl).values(**fields)

    with _store_errors(db, "Failed to create record", schema.table_name, "create"):
        if key is not None and db.get_bind().dialect.insert_returning:
            result = db.execute(stmt.returning(tbl.c[key.name]))
            new_id = result.scalar_one_or_none()
        else:
            result = db.execute(stmt)
            new_id = result.lastrowid
        db.commit()

    logger.info("dynamic_create table=%s id=%s", schema.table_name, new_id)
    return {"id": new_id, "changes": 1}


def update_row(
    db: Session,
    schema: TableSchema,
    row_id: Any,
    fields: dict[str, Any],
) -> dict[str, Any]:
    validate_field_map(schema, fields)
    key = _require_key_column(schema)
    value = _coerce_id(key, row_id)
    if value is _MISSING:
        raise RecordNotFoundError()

    tbl = _lightweight_table(schema)
    stmt = update(tbl).where(tbl.c[key.name] == value).values(**fields)
    with _store_errors(db, "Failed to update record", schema.table_name, "update"):
        result = db.execute(stmt)
        changes = result.rowcount or 0
        db.commit()

    if changes == 0:
        raise RecordNotFoundError()
    logger.info("dynamic_update table=%s id=%s", schema.table_name, value)
    return {"changes": changes}


def delete_row(db: Session, schema: TableSchema, row_id: Any) -> dict[str, Any]:
    key = _require_key_column(schema)
    value = _coerce_id(key, row_id)
    if value is _MISSING:
        raise RecordNotFoundError()

    tbl = _lightweight_table(schema)
    stmt = delete(tbl).where(tbl.c[key.name] == value)
    with _store_errors(db, "Failed to delete record", schema.table_name, "delete"):
        result = db.execute(stmt)
        changes = result.rowcount or 0
        db.commit()

    if changes == 0:
        raise RecordNotFoundError()
    logger.info("dynamic_delete table=%s id=%s", schema.table_name, value)
    return {"changes": changes}
