import os

from .config import Config

SECRET_KEY = Config.SECRET_KEY
DB_CONFIG = Config.db_config()

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

SAMPLE_LIMIT = Config.SAMPLE_LIMIT
CREATED_ID_LIMIT = Config.CREATED_ID_LIMIT

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
