"""
Sample shop data for the service-record tables.

`seed_example_tables` creates the model tables if needed and fills each
empty table with a handful of realistic rows. Tables that already hold data
are left untouched, so running it twice is harmless.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from inspection_api.db.base import Base
from inspection_api.models import (
    CustomerVehicleProfile,
    EmissionsTestRecord,
    OilChangeRecord,
    TireInstallationRecord,
)

logger = logging.getLogger(__name__)

_VEHICLES = [
    ("John Smith", "1HGCM82633A123456", "Honda", "Accord", 2020),
    ("Sarah Davis", "1G1ZT51826F123456", "Chevrolet", "Malibu", 2019),
    ("Bob Wilson", "3VWDP7AJ5DM123456", "Volkswagen", "Jetta", 2018),
    ("Alice Johnson", "1FTFW1ET5DFC12345", "Ford", "F-150", 2021),
    ("David Brown", "5NPE24AF2FH123456", "Hyundai", "Elantra", 2017),
]


def _vehicle(idx: int) -> dict[str, Any]:
    name, vin, make, model, year = _VEHICLES[idx]
    return {
        "customer_name": name,
        "vehicle_vin": vin,
        "vehicle_make": make,
        "vehicle_model": model,
        "vehicle_year": year,
    }


OIL_CHANGES: list[dict[str, Any]] = [
    {**_vehicle(0), "mileage": 25000, "oil_type": "5W-30 Synthetic", "filter_brand": "Honda OEM",
     "service_date": datetime(2024, 1, 15), "technician_name": "Mike Johnson",
     "next_service_mileage": 30000, "notes": "Customer requested premium oil", "total_cost": Decimal("45.99")},
    {**_vehicle(1), "mileage": 32000, "oil_type": "0W-20 Full Synthetic", "filter_brand": "AC Delco",
     "service_date": datetime(2024, 1, 16), "technician_name": "Lisa Chen",
     "next_service_mileage": 37000, "notes": "Regular maintenance", "total_cost": Decimal("52.50")},
    {**_vehicle(2), "mileage": 45000, "oil_type": "5W-40 Synthetic", "filter_brand": "Mann Filter",
     "service_date": datetime(2024, 1, 17), "technician_name": "Tom Rodriguez",
     "next_service_mileage": 50000, "notes": "High mileage vehicle", "total_cost": Decimal("48.75")},
    {**_vehicle(3), "mileage": 18000, "oil_type": "5W-30 Conventional", "filter_brand": "Motorcraft",
     "service_date": datetime(2024, 1, 18), "technician_name": "Mike Johnson",
     "next_service_mileage": 23000, "notes": "Fleet vehicle", "total_cost": Decimal("38.99")},
    {**_vehicle(4), "mileage": 67000, "oil_type": "5W-30 High Mileage", "filter_brand": "Fram",
     "service_date": datetime(2024, 1, 19), "technician_name": "Lisa Chen",
     "next_service_mileage": 72000, "notes": "High mileage blend recommended", "total_cost": Decimal("41.25")},
]

EMISSIONS_TESTS: list[dict[str, Any]] = [
    {**_vehicle(0), "license_plate": "ABC-123", "test_date": datetime(2024, 1, 10), "test_type": "OBD",
     "test_result": "Pass", "inspector_name": "Inspector Jane", "station_id": "ST001",
     "certificate_number": "EM2024001", "expiration_date": date(2025, 1, 10),
     "notes": "All systems normal", "retest_required": False},
    {**_vehicle(2), "license_plate": "DEF-456", "test_date": datetime(2024, 1, 12), "test_type": "OBD",
     "test_result": "Fail", "inspector_name": "Inspector Jane", "station_id": "ST001",
     "certificate_number": None, "expiration_date": None,
     "notes": "Check engine light on", "retest_required": True},
    {**_vehicle(4), "license_plate": "JKL-654", "test_date": datetime(2024, 1, 14), "test_type": "Tailpipe",
     "test_result": "Conditional Pass", "inspector_name": "Inspector Jane", "station_id": "ST001",
     "certificate_number": "EM2024004", "expiration_date": date(2024, 7, 14),
     "notes": "Borderline readings", "retest_required": False},
]

TIRE_INSTALLATIONS: list[dict[str, Any]] = [
    {**_vehicle(0), "installation_date": datetime(2024, 1, 8), "tire_brand": "Michelin",
     "tire_model": "Defender T+H", "tire_size": "225/60R16", "quantity": 4, "tire_type": "All Season",
     "front_tires": "225/60R16", "rear_tires": "225/60R16", "installation_type": "New",
     "technician_name": "Mike Johnson", "pressure_front": 32, "pressure_rear": 32,
     "alignment_performed": False, "balance_performed": True, "total_cost": Decimal("650.00"),
     "warranty_months": 60, "notes": "Customer wanted premium tires"},
    {**_vehicle(1), "installation_date": datetime(2024, 1, 9), "tire_brand": "Goodyear",
     "tire_model": "Assurance WeatherReady", "tire_size": "215/60R16", "quantity": 2, "tire_type": "All Season",
     "front_tires": "215/60R16", "rear_tires": None, "installation_type": "Replacement",
     "technician_name": "Lisa Chen", "pressure_front": 35, "pressure_rear": 35,
     "alignment_performed": False, "balance_performed": True, "total_cost": Decimal("320.00"),
     "warranty_months": 65, "notes": "Front tires only"},
    {**_vehicle(4), "installation_date": datetime(2024, 1, 12), "tire_brand": "Hankook",
     "tire_model": "Kinergy PT", "tire_size": "205/55R16", "quantity": 4, "tire_type": "All Season",
     "front_tires": "205/55R16", "rear_tires": "205/55R16", "installation_type": "Rotation",
     "technician_name": "Lisa Chen", "pressure_front": 32, "pressure_rear": 32,
     "alignment_performed": False, "balance_performed": False, "total_cost": Decimal("25.00"),
     "warranty_months": 0, "notes": "Tire rotation service only"},
]

VEHICLE_PROFILES: list[dict[str, Any]] = [
    {"customer_name": "John Smith", "customer_email": "john.smith@email.com", "customer_phone": "555-0101",
     "vehicle_vin": "1HGCM82633A123456", "vehicle_make": "Honda", "vehicle_model": "Accord",
     "vehicle_year": 2020, "license_plate": "ABC-123", "color": "Silver", "mileage": 25000,
     "last_service_date": datetime(2024, 1, 15), "next_service_due_date": date(2024, 4, 15),
     "preferred_technician": "Mike Johnson", "service_notes": "Regular customer, always on time",
     "customer_preferences": "Prefers synthetic oil", "insurance_company": "State Farm",
     "insurance_policy": "SF123456789", "registration_expiration": date(2024, 12, 31), "active": True},
    {"customer_name": "Sarah Davis", "customer_email": "sarah.davis@email.com", "customer_phone": "555-0102",
     "vehicle_vin": "1G1ZT51826F123456", "vehicle_make": "Chevrolet", "vehicle_model": "Malibu",
     "vehicle_year": 2019, "license_plate": "XYZ-789", "color": "White", "mileage": 32000,
     "last_service_date": datetime(2024, 1, 16), "next_service_due_date": date(2024, 4, 16),
     "preferred_technician": "Lisa Chen", "service_notes": "Fleet vehicle",
     "customer_preferences": "Standard service", "insurance_company": "Geico",
     "insurance_policy": "GE987654321", "registration_expiration": date(2024, 11, 30), "active": True},
    {"customer_name": "Alice Johnson", "customer_email": "alice.johnson@email.com", "customer_phone": "555-0104",
     "vehicle_vin": "1FTFW1ET5DFC12345", "vehicle_make": "Ford", "vehicle_model": "F-150",
     "vehicle_year": 2021, "license_plate": "GHI-321", "color": "Red", "mileage": 18000,
     "last_service_date": datetime(2024, 1, 18), "next_service_due_date": date(2024, 7, 18),
     "preferred_technician": "Mike Johnson", "service_notes": "Work truck, heavy usage",
     "customer_preferences": "Needs heavy duty service", "insurance_company": "Farmers",
     "insurance_policy": "FA789123456", "registration_expiration": date(2025, 1, 20), "active": True},
]

SAMPLE_ROWS = [
    (OilChangeRecord, OIL_CHANGES),
    (EmissionsTestRecord, EMISSIONS_TESTS),
    (TireInstallationRecord, TIRE_INSTALLATIONS),
    (CustomerVehicleProfile, VEHICLE_PROFILES),
]


def seed_example_tables(engine: Engine) -> dict[str, int]:
    """Returns the number of rows inserted per table."""
    Base.metadata.create_all(engine)
    inserted: dict[str, int] = {}
    with Session(engine) as db:
        for model, rows in SAMPLE_ROWS:
            table_name = model.__tablename__
            existing = db.execute(select(func.count()).select_from(model)).scalar_one()
            if existing:
                logger.info("seed_skipped table=%s existing_rows=%s", table_name, existing)
                inserted[table_name] = 0
                continue
            db.add_all([model(**row) for row in rows])
            inserted[table_name] = len(rows)
            logger.info("seed_inserted table=%s rows=%s", table_name, len(rows))
        db.commit()
    return inserted
