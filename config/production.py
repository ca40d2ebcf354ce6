import os

from .config import Config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
DB_CONFIG = Config.db_config()

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL

SAMPLE_LIMIT = Config.SAMPLE_LIMIT
CREATED_ID_LIMIT = Config.CREATED_ID_LIMIT

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
