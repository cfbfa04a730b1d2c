# common/api_error/__init__.py
from .ApiError import *
from .booking_error import *
from .config_error import *
