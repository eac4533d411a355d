from __future__ import annotations

import dataclasses

import pytest
from sqlalchemy.exc import OperationalError

from inspection_api.core.errors import InvalidColumnError, TableNotFoundError
from inspection_api.crud.dynamic import resolve_sort_column
from inspection_api.services.schema_cache import (
    ColumnClassification,
    ColumnInfo,
    SchemaCache,
    SchemaLoader,
    build_table_schema,
    default_column_classifier,
)


def _col(name: str, declared_type: str = "INTEGER", *, pk: bool = False) -> ColumnInfo:
    return ColumnInfo(name=name, declared_type=declared_type, is_not_null=pk, is_primary_key=pk)


@pytest.mark.parametrize(
    "column,is_date,is_searchable",
    [
        (_col("created_at", "DATETIME"), True, False),
        (_col("expiration_date", "DATE"), True, False),
        (_col("updated", "INTEGER"), True, False),
        (_col("service_time", "REAL"), True, False),
        (_col("customer_name", "VARCHAR(255)"), False, True),
        (_col("vehicle_vin", "INTEGER"), False, True),
        (_col("customer_email", "BLOB"), False, True),
        (_col("notes", "TEXT"), False, True),
        (_col("plate", "CHARACTER(8)"), False, True),
        (_col("mileage", "INTEGER"), False, False),
        (_col("total_cost", "NUMERIC(10, 2)"), False, False),
    ],
)
def test_default_classifier_heuristics(column, is_date, is_searchable):
    result = default_column_classifier(column)
    assert result.is_date is is_date
    assert result.is_searchable is is_searchable


def test_classifier_can_be_swapped():
    columns = [_col("id", pk=True), _col("name", "TEXT"), _col("created_at", "DATETIME")]

    def nothing_special(_col: ColumnInfo) -> ColumnClassification:
        return ColumnClassification()

    schema = build_table_schema("things", columns, nothing_special)
    assert schema.searchable_columns == ()
    assert schema.date_columns == ()
    assert schema.column_names == ("id", "name", "created_at")


def test_sort_prefers_created_then_updated_then_first_date():
    created = build_table_schema(
        "t",
        [_col("id", pk=True), _col("service_date", "DATE"), _col("updated_at", "DATETIME"), _col("created_at", "DATETIME")],
    )
    assert resolve_sort_column(created) == "created_at"

    updated = build_table_schema(
        "t",
        [_col("id", pk=True), _col("service_date", "DATE"), _col("updated_at", "DATETIME")],
    )
    assert resolve_sort_column(updated) == "updated_at"

    first_date = build_table_schema(
        "t",
        [_col("id", pk=True), _col("test_date", "DATE"), _col("expiration_date", "DATE")],
    )
    assert resolve_sort_column(first_date) == "test_date"


def test_sort_falls_back_to_primary_key_then_first_column():
    with_pk = build_table_schema("t", [_col("label", "TEXT"), _col("code", "INTEGER", pk=True)])
    assert resolve_sort_column(with_pk) == "code"

    no_pk = build_table_schema("t", [_col("label", "TEXT"), _col("qty")])
    assert resolve_sort_column(no_pk) == "label"


def test_explicit_sort_must_be_a_known_column():
    schema = build_table_schema("t", [_col("id", pk=True), _col("qty")])
    assert resolve_sort_column(schema, "qty") == "qty"
    with pytest.raises(InvalidColumnError):
        resolve_sort_column(schema, "QTY")


def test_key_column_uses_single_pk_or_id():
    composite = build_table_schema(
        "t", [_col("id"), _col("a", pk=True), _col("b", pk=True)]
    )
    assert composite.key_column.name == "id"

    no_key = build_table_schema("t", [_col("a", pk=True), _col("b", pk=True)])
    assert no_key.key_column is None


def test_loader_reflects_user_tables(engine):
    cache = SchemaLoader(engine).load_all_schemas()

    assert "widgets" in cache
    assert "oil_change_records" in cache
    assert "sqlite_sequence" not in cache
    assert cache.dialect_label == "SQLite"

    widgets = cache["widgets"]
    assert widgets.column_names == ("id", "name", "description", "price", "created_at")
    assert widgets.primary_key_column.name == "id"
    assert widgets.get_column("name").is_not_null is True
    assert widgets.searchable_columns == ("name", "description")
    assert widgets.date_columns == ("created_at",)


def test_loader_honours_excluded_tables(engine):
    cache = SchemaLoader(engine, excluded_tables=["widgets"]).load_all_schemas()
    assert "widgets" not in cache
    assert "widgets" not in cache.table_names()


def test_cache_is_read_only(engine):
    cache = SchemaLoader(engine).load_all_schemas()

    with pytest.raises(TypeError):
        cache["widgets"] = cache["oil_change_records"]  # type: ignore[index]
    with pytest.raises(dataclasses.FrozenInstanceError):
        cache["widgets"].table_name = "gadgets"  # type: ignore[misc]
    with pytest.raises(TableNotFoundError):
        cache.require("gadgets")


def test_cache_loads_only_once(engine):
    loader = SchemaLoader(engine)
    loader.load_all_schemas()

    with pytest.raises(RuntimeError):
        loader.load_all_schemas()
    with pytest.raises(RuntimeError):
        loader.load_schema_for_table("widgets")


def _failing_for(loader: SchemaLoader, bad_table: str):
    original = loader.load_schema_for_table

    def _load(table_name: str):
        if table_name == bad_table:
            raise OperationalError("PRAGMA table_info", {}, Exception("disk I/O error"))
        return original(table_name)

    return _load


def test_broken_table_is_skipped_by_default(engine, monkeypatch):
    loader = SchemaLoader(engine)
    monkeypatch.setattr(loader, "load_schema_for_table", _failing_for(loader, "widgets"))

    cache = loader.load_all_schemas()
    assert "widgets" not in cache
    assert "oil_change_records" in cache


def test_broken_table_aborts_when_fail_fast(engine, monkeypatch):
    loader = SchemaLoader(engine, fail_fast=True)
    monkeypatch.setattr(loader, "load_schema_for_table", _failing_for(loader, "widgets"))

    with pytest.raises(OperationalError):
        loader.load_all_schemas()


def test_empty_cache_serves_nothing():
    cache = SchemaCache({})
    assert len(cache) == 0
    assert cache.table_names() == []
    with pytest.raises(TableNotFoundError):
        cache.require("widgets")
