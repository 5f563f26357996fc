# tests/conftest.py
"""
Global test bootstrap
- Pins the auth / admin / cron settings BEFORE the app package is imported
- Keeps every third-party integration disabled unless a test wires one in
- Pulls in the shared fixtures (db, app, auth, content, mocks)
"""

from __future__ import annotations

import os
import warnings

from sqlalchemy.exc import SAWarning

# ──────────────────────────────────────────────────────────────────────────────
# 🌱 Test env (set before importing subhub so `settings` picks it up)
# ──────────────────────────────────────────────────────────────────────────────
os.environ["SUPABASE_JWT_SECRET"] = "pytest-supabase-jwt-secret-0123456789"
os.environ["ADMIN_EMAILS"] = "admin@subhub.test,owner@subhub.test"
os.environ["CRON_SECRET"] = "pytest-cron-secret"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SITE_URL"] = "https://subhub.test"
os.environ.setdefault("LOG_LEVEL", "WARNING")
for _key in (
    "RESEND_API_KEY",
    "TMDB_API_KEY",
    "GEMINI_API_KEY",
    "GOOGLE_CLIENT_ID",
    "GOOGLE_CLIENT_SECRET",
    "GOOGLE_REFRESH_TOKEN",
):
    os.environ[_key] = ""

warnings.filterwarnings("ignore", category=SAWarning)

# ──────────────────────────────────────────────────────────────────────────────
# 📦 Fixtures
# ──────────────────────────────────────────────────────────────────────────────
from tests.fixtures.db import *            # noqa: E402,F401,F403
from tests.fixtures.content import *       # noqa: E402,F401,F403
from tests.fixtures.auth import *          # noqa: E402,F401,F403
from tests.fixtures.app import *           # noqa: E402,F401,F403
from tests.fixtures.mocks.email import *   # noqa: E402,F401,F403
from tests.fixtures.mocks.http import *    # noqa: E402,F401,F403
from tests.fixtures.mocks.drive import *   # noqa: E402,F401,F403
