"""Business settings, read from the environment at import time."""

import os

LOAN_PERIOD_DAYS = int(os.getenv("BOOKSHOP_LOAN_PERIOD_DAYS", "14"))
RESET_PASSWORD_LENGTH = int(os.getenv("BOOKSHOP_RESET_PASSWORD_LENGTH", "12"))
BCRYPT_ROUNDS = int(os.getenv("BOOKSHOP_BCRYPT_ROUNDS", "12"))
LOCK_TIMEOUT_SECONDS = float(os.getenv("BOOKSHOP_LOCK_TIMEOUT_SECONDS", "10"))
DEFAULT_ROLE = os.getenv("BOOKSHOP_DEFAULT_ROLE", "USER")
