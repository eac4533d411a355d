from __future__ import annotations

from sqlalchemy import func, select

from inspection_api.db.example_data import seed_example_tables
from inspection_api.models import CustomerVehicleProfile, OilChangeRecord


def test_seed_fills_empty_tables_once(engine, db_session):
    inserted = seed_example_tables(engine)
    assert inserted == {
        "oil_change_records": 5,
        "emissions_test_records": 3,
        "tire_installation_records": 3,
        "customer_vehicle_profiles": 3,
    }

    again = seed_example_tables(engine)
    assert set(again.values()) == {0}
    assert db_session.execute(select(func.count()).select_from(OilChangeRecord)).scalar_one() == 5


def test_seed_leaves_populated_tables_alone(engine, db_session):
    db_session.add(
        CustomerVehicleProfile(
            customer_name="Walk-in",
            vehicle_vin="JH4KA8260MC000001",
        )
    )
    db_session.commit()

    inserted = seed_example_tables(engine)
    assert inserted["customer_vehicle_profiles"] == 0
    assert inserted["oil_change_records"] == 5


def test_seeded_rows_are_searchable_through_the_api(engine, client_factory):
    seed_example_tables(engine)
    with client_factory(engine) as client:
        r = client.get("/api/oil_change_records", params={"search": "honda"})
        assert r.status_code == 200
        payload = r.json()
        assert payload["pagination"]["total"] == 1
        assert payload["data"][0]["vehicle_vin"] == "1HGCM82633A123456"
        assert payload["meta"]["sortedBy"] == "created_at"

        r = client.get(
            "/api/emissions_test_records",
            params={"sortBy": "test_date", "sortOrder": "ASC", "limit": 1},
        )
        assert r.json()["data"][0]["certificate_number"] == "EM2024001"
        assert r.json()["pagination"]["hasNext"] is True
