# app/api/v1/__init__.py
from .appointment_router import *
from .doctor_router import *
from .patient_router import *
from .schedule_router import *
from .service_router import *
