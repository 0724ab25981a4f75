"""
Application-wide settings and environment configuration
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env before any constant below (or in sentwatch.config) reads the environment
load_dotenv()

# Environment
ENV = os.getenv("SENTWATCH_ENV", "development")

# API Configuration (PORT wins so the app runs unchanged on hosted platforms)
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("PORT", os.getenv("API_PORT", "3000")))

# Data directory for the flat-file stores (relative to the working directory)
DATA_DIR = Path(os.getenv("SENTWATCH_DATA_DIR", "data"))
