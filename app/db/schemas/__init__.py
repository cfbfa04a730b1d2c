# app/db/schemas/__init__.py
from .patient_schema import *
from .doctor_schema import *
from .service_schema import *
from .schedule_schemas import *
from .appointment_schemas import *
from .clinic_settings_schema import *
