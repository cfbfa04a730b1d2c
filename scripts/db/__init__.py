from .data_template import *
from .seed_db import seed_db, seed_reference_data
