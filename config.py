"""Runtime configuration for the budget tracker.

Values come from environment variables, optionally loaded from a ``.env``
file. Factories elsewhere accept explicit overrides so tests never depend on
the process environment.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Record store (server side). Default to local SQLite, override for Postgres.
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///budget_tracker.db")

# Local document store, optionally mirrored to S3
DATA_DIR = Path(os.getenv("BUDGET_DATA_DIR", "budget_tracker_data"))
S3_BUCKET = os.environ.get("S3_BUCKET")
AWS_REGION = os.environ.get("AWS_REGION", "us-east-1")

# Remote record store. When set, clients talk to the HTTP API instead of local documents.
BUDGET_API_URL = os.getenv("BUDGET_API_URL")
BUDGET_API_TIMEOUT = float(os.getenv("BUDGET_API_TIMEOUT", "10"))

# 'keep' leaves an explicitly saved empty list alone, 'fallback' swaps in defaults
EMPTY_LIST_POLICY = os.getenv("EMPTY_LIST_POLICY", "keep")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8001"))
