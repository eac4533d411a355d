from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ColumnOut(_CamelModel):
    name: str
    type: str
    not_null: bool = Field(alias="notNull")
    primary_key: bool = Field(alias="primaryKey")


class TableSchemaBody(_CamelModel):
    columns: list[ColumnOut]
    searchable_columns: list[str] = Field(alias="searchableColumns")
    date_columns: list[str] = Field(alias="dateColumns")


class TableSchemaOut(TableSchemaBody):
    table_name: str = Field(alias="tableName")
    database: str


class TableListOut(BaseModel):
    tables: list[str]
    count: int
    database: str


class PaginationOut(_CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int = Field(alias="totalPages")
    has_next: bool = Field(alias="hasNext")
    has_prev: bool = Field(alias="hasPrev")


class ListMetaOut(_CamelModel):
    table_name: str = Field(alias="tableName")
    table_schema: TableSchemaBody = Field(alias="schema")
    sorted_by: str = Field(alias="sortedBy")
    sort_order: str = Field(alias="sortOrder")
    search_term: str = Field(alias="searchTerm")


class RowListOut(BaseModel):
    data: list[dict[str, Any]]
    pagination: PaginationOut
    meta: ListMetaOut


class RowCreateOut(BaseModel):
    id: Any = None
    changes: int


class RowUpdateOut(BaseModel):
    changes: int


class RowDeleteOut(BaseModel):
    message: str
