"""
Shop service-record tables.

These are plain tables: the API serves them through the dynamic table
routes rather than dedicated routers. `scripts/create_example_tables.py`
creates and seeds them.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, Integer, Numeric, String, Text, false, true
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from inspection_api.db.base import Base
from inspection_api.models.mixins import TimestampMixin


class VehicleMixin:
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    vehicle_vin: Mapped[str] = mapped_column(String(17), nullable=False)
    vehicle_make: Mapped[Optional[str]] = mapped_column(String(50))
    vehicle_model: Mapped[Optional[str]] = mapped_column(String(50))
    vehicle_year: Mapped[Optional[int]] = mapped_column(Integer)


class OilChangeRecord(VehicleMixin, TimestampMixin, Base):
    __tablename__ = "oil_change_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    mileage: Mapped[Optional[int]] = mapped_column(Integer)
    oil_type: Mapped[Optional[str]] = mapped_column(String(100))
    filter_brand: Mapped[Optional[str]] = mapped_column(String(50))
    service_date: Mapped[Optional[datetime]] = mapped_column(DateTime, server_default=func.now())
    technician_name: Mapped[Optional[str]] = mapped_column(String(100))
    next_service_mileage: Mapped[Optional[int]] = mapped_column(Integer)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    total_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))


class EmissionsTestRecord(VehicleMixin, TimestampMixin, Base):
    __tablename__ = "emissions_test_records"
    __table_args__ = (
        CheckConstraint(
            "test_type IN ('OBD', 'Tailpipe', 'Visual', 'Comprehensive')",
            name="ck_emissions_test_type",
        ),
        CheckConstraint(
            "test_result IN ('Pass', 'Fail', 'Conditional Pass')",
            name="ck_emissions_test_result",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    license_plate: Mapped[Optional[str]] = mapped_column(String(20))
    test_date: Mapped[Optional[datetime]] = mapped_column(DateTime, server_default=func.now())
    test_type: Mapped[Optional[str]] = mapped_column(String(20))
    test_result: Mapped[Optional[str]] = mapped_column(String(20))
    inspector_name: Mapped[Optional[str]] = mapped_column(String(100))
    station_id: Mapped[Optional[str]] = mapped_column(String(50))
    certificate_number: Mapped[Optional[str]] = mapped_column(String(50))
    expiration_date: Mapped[Optional[date]] = mapped_column(Date)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    retest_required: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )


class TireInstallationRecord(VehicleMixin, TimestampMixin, Base):
    __tablename__ = "tire_installation_records"
    __table_args__ = (
        CheckConstraint(
            "tire_type IN ('All Season', 'Summer', 'Winter', 'Performance')",
            name="ck_tire_type",
        ),
        CheckConstraint(
            "installation_type IN ('New', 'Rotation', 'Replacement', 'Repair')",
            name="ck_tire_installation_type",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    installation_date: Mapped[Optional[datetime]] = mapped_column(DateTime, server_default=func.now())
    tire_brand: Mapped[Optional[str]] = mapped_column(String(50))
    tire_model: Mapped[Optional[str]] = mapped_column(String(100))
    tire_size: Mapped[Optional[str]] = mapped_column(String(50))
    quantity: Mapped[Optional[int]] = mapped_column(Integer)
    tire_type: Mapped[Optional[str]] = mapped_column(String(20))
    front_tires: Mapped[Optional[str]] = mapped_column(String(50))
    rear_tires: Mapped[Optional[str]] = mapped_column(String(50))
    installation_type: Mapped[Optional[str]] = mapped_column(String(20))
    technician_name: Mapped[Optional[str]] = mapped_column(String(100))
    pressure_front: Mapped[Optional[int]] = mapped_column(Integer)
    pressure_rear: Mapped[Optional[int]] = mapped_column(Integer)
    alignment_performed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    balance_performed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    total_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    warranty_months: Mapped[Optional[int]] = mapped_column(Integer)
    notes: Mapped[Optional[str]] = mapped_column(Text)


class CustomerVehicleProfile(TimestampMixin, Base):
    __tablename__ = "customer_vehicle_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_email: Mapped[Optional[str]] = mapped_column(String(255))
    customer_phone: Mapped[Optional[str]] = mapped_column(String(20))
    vehicle_vin: Mapped[str] = mapped_column(String(17), nullable=False, unique=True)
    vehicle_make: Mapped[Optional[str]] = mapped_column(String(50))
    vehicle_model: Mapped[Optional[str]] = mapped_column(String(50))
    vehicle_year: Mapped[Optional[int]] = mapped_column(Integer)
    license_plate: Mapped[Optional[str]] = mapped_column(String(20))
    color: Mapped[Optional[str]] = mapped_column(String(30))
    mileage: Mapped[Optional[int]] = mapped_column(Integer)
    last_service_date: Mapped[Optional[datetime]] = mapped_column(DateTime)
    next_service_due_date: Mapped[Optional[date]] = mapped_column(Date)
    preferred_technician: Mapped[Optional[str]] = mapped_column(String(100))
    service_notes: Mapped[Optional[str]] = mapped_column(Text)
    customer_preferences: Mapped[Optional[str]] = mapped_column(Text)
    insurance_company: Mapped[Optional[str]] = mapped_column(String(100))
    insurance_policy: Mapped[Optional[str]] = mapped_column(String(50))
    registration_expiration: Mapped[Optional[date]] = mapped_column(Date)
    active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
