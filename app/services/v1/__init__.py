# app/services/v1/__init__.py
from .access import *
from .appointment_codes import *
from .availability_service import *
from .booking_service import *
from .doctor_service import *
from .catalog_service import *
from .schedule_service import *
from .patient_service import *
