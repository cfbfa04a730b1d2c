# app/db/__init__.py
from .db_manager import *
from .deps import *
