# inspection_api/api/routers/dynamic_tables.py
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from inspection_api.api.deps.request_identity import get_request_identity
from inspection_api.api.deps.schema_cache import get_schema_cache
from inspection_api.core.errors import RecordNotFoundError
from inspection_api.crud import dynamic
from inspection_api.db.session import get_db
from inspection_api.schemas.dynamic import (
    RowCreateOut,
    RowDeleteOut,
    RowListOut,
    RowUpdateOut,
    TableListOut,
    TableSchemaOut,
)
from inspection_api.services.schema_cache import SchemaCache

router = APIRouter(tags=["dynamic"], dependencies=[Depends(get_request_identity)])


@router.get("/tables", response_model=TableListOut)
def list_tables(cache: SchemaCache = Depends(get_schema_cache)):
    tables = cache.table_names()
    return {"tables": tables, "count": len(tables), "database": cache.dialect_label}


@router.get("/tables/{table_name}/schema", response_model=TableSchemaOut)
def get_table_schema(table_name: str, cache: SchemaCache = Depends(get_schema_cache)):
    schema = cache.require(table_name)
    return {
        "tableName": table_name,
        **schema.to_dict(),
        "database": cache.dialect_label,
    }


@router.get("/{table_name}", response_model=RowListOut)
def list_table_rows(
    table_name: str,
    # Parsed leniently: unparsable values fall back to the defaults.
    page: str | None = Query(None, description="1-based page number"),
    limit: str | None = Query(None, description="Page size, capped at the server maximum"),
    search: str | None = Query(None),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query("DESC", alias="sortOrder"),
    db: Session = Depends(get_db),
    cache: SchemaCache = Depends(get_schema_cache),
):
    schema = cache.require(table_name)
    params = dynamic.normalize_list_params(
        page=page,
        limit=limit,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return dynamic.list_rows(db, schema, params)


@router.get("/{table_name}/{row_id}", response_model=dict[str, Any])
def get_table_row(
    table_name: str,
    row_id: str,
    db: Session = Depends(get_db),
    cache: SchemaCache = Depends(get_schema_cache),
):
    schema = cache.require(table_name)
    row = dynamic.get_row(db, schema, row_id)
    if row is None:
        raise RecordNotFoundError()
    return row


@router.post("/{table_name}", response_model=RowCreateOut, status_code=status.HTTP_201_CREATED)
def create_table_row(
    table_name: str,
    payload: dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    cache: SchemaCache = Depends(get_schema_cache),
):
    schema = cache.require(table_name)
    return dynamic.create_row(db, schema, payload)


@router.put("/{table_name}/{row_id}", response_model=RowUpdateOut)
def update_table_row(
    table_name: str,
    row_id: str,
    payload: dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    cache: SchemaCache = Depends(get_schema_cache),
):
    schema = cache.require(table_name)
    return dynamic.update_row(db, schema, row_id, payload)


@router.delete("/{table_name}/{row_id}", response_model=RowDeleteOut)
def delete_table_row(
    table_name: str,
    row_id: str,
    db: Session = Depends(get_db),
    cache: SchemaCache = Depends(get_schema_cache),
):
    schema = cache.require(table_name)
    dynamic.delete_row(db, schema, row_id)
    return {"message": "Record deleted successfully"}
