# bookstore/config.py
"""
Runtime settings for the bookstore service.

Every value is read once from the environment at import time. Tests that
need different values patch the module attributes directly.
"""

import os
from pathlib import Path

VERSION = "1.0.0"

# Record store: JSON persistence when a data file is configured, otherwise
# a process-local in-memory collection.
DATA_FILE = os.getenv("BOOKSTORE_DATA_FILE") or None
SEED_FILE = os.getenv(
    "BOOKSTORE_SEED_FILE",
    str(Path(__file__).resolve().parent / "data" / "sample_books.json"),
)

# Pagination
DEFAULT_PAGE_SIZE = int(os.getenv("BOOKSTORE_DEFAULT_PAGE_SIZE", "10"))
MAX_PAGE_SIZE = int(os.getenv("BOOKSTORE_MAX_PAGE_SIZE", "100"))

# Run the role check before existence/uniqueness lookups on writes.
AUTHORIZE_FIRST = os.getenv("BOOKSTORE_AUTHORIZE_FIRST", "false").lower() == "true"

# Static token table: "token:user_id:role,token2:user_id2:role2"
API_TOKENS = os.getenv("BOOKSTORE_API_TOKENS", "")

LOG_LEVEL = os.getenv("BOOKSTORE_LOG_LEVEL", "INFO").upper()
