# clientkeeper/config.py

import os
import warnings

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./clientkeeper.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

# Security - tokens signed with HS256
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

# Which existing appointments count against a booking: "global", "dog" or "customer"
CONFLICT_SCOPE = os.getenv("CONFLICT_SCOPE", "global").lower()

# Wall-clock timezone of the shop; aware timestamps are converted into it
SHOP_TIMEZONE = os.getenv("SHOP_TIMEZONE", "America/New_York")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
