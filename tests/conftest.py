"""Pytest configuration: test environment first, then the shared fixtures."""

import os
from pathlib import Path

# Must be set before anything under src/ loads the configuration
os.environ["APP_ENVIRONMENT"] = "test"
os.environ["LOG_FILE"] = ""
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SESSION_SIGNING_SECRET"] = "test-signing-secret-for-library-api"
os.environ["LIBRARY_CONFIG_FILE"] = str(Path(__file__).resolve().parent.parent / "config.yaml")

from tests.fixtures import *  # noqa: E402,F401,F403
