"""
Easily extendible seed data templates.

- Reference data (clinic settings, doctors, services, weekly schedules)
  seeded once by ``seed_reference_data``
- Record templates expanded N times by ``seed_db``

    Example: Seed only patients
        await seed_db(db_manager, {"patients": PATIENT_DATA_TEMPLATE}, records=100)
"""

from datetime import time
from decimal import Decimal
from typing import Any

# Clinic reference data
CLINIC_SETTINGS_DATA: dict[str, Any] = {
    "clinic_name": "Smart Clinic",
    "opening_time": time(9, 0),
    "closing_time": time(17, 0),
    "appointment_duration_minutes": 30,
    "max_appointments_per_day_per_patient": 1,
}

DOCTORS_DATA: list[dict[str, Any]] = [
    {
        "name": "Dr. Sarah Johnson",
        "specialization": "Cardiology",
        "email": "sarah.johnson@clinic.com",
        "phone": "555-0101",
    },
    {
        "name": "Dr. Michael Chen",
        "specialization": "Dermatology",
        "email": "michael.chen@clinic.com",
        "phone": "555-0102",
    },
    {
        "name": "Dr. Emily Davis",
        "specialization": "Pediatrics",
        "email": "emily.davis@clinic.com",
        "phone": "555-0103",
    },
]

SERVICES_DATA: list[dict[str, Any]] = [
    {
        "name": "General Consultation",
        "description": "Routine health checkup and consultation",
        "price": Decimal("100.00"),
        "duration_minutes": 30,
    },
    {
        "name": "Specialist Consultation",
        "description": "Specialized medical consultation",
        "price": Decimal("200.00"),
        "duration_minutes": 45,
    },
    {
        "name": "Follow-up Visit",
        "description": "Post-treatment follow-up appointment",
        "price": Decimal("75.00"),
        "duration_minutes": 20,
    },
]

# Applied to every seeded doctor, Monday to Friday
WEEKLY_SCHEDULE_DATA: dict[str, Any] = {
    "start_time": time(9, 0),
    "end_time": time(17, 0),
    "max_appointments": 16,
}

# Record templates
PATIENT_DATA_TEMPLATE: dict[str, Any] = {
    "first_name": "Test",
    "last_name": "Patient",
    "email": "patient@example.com",
    "phone": "555-0200",
}

DOCTOR_DATA_TEMPLATE: dict[str, Any] = {
    "name": "Dr. Locum",
    "specialization": "General Practice",
    "email": "locum@clinic.com",
    "phone": "555-0100",
}

DEFAULT_DATA_TEMPLATE: dict[str, dict[str, Any]] = {
    "patients": PATIENT_DATA_TEMPLATE,
}

__all__ = [
    "CLINIC_SETTINGS_DATA",
    "DOCTORS_DATA",
    "SERVICES_DATA",
    "WEEKLY_SCHEDULE_DATA",
    "DEFAULT_DATA_TEMPLATE",
    "DOCTOR_DATA_TEMPLATE",
    "PATIENT_DATA_TEMPLATE",
]
