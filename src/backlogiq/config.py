"""Local configuration for backlogiq."""

from __future__ import annotations

import os


DEFAULT_SUPABASE_URL = ""
DEFAULT_API_BASE_URL = "https://api.backlogiq.example.com"
DEFAULT_HTTP_TIMEOUT_S = 10.0
DEFAULT_HTTP_MAX_RETRIES = 2
DEFAULT_HTTP_BACKOFF_S = 0.5
DEFAULT_USER_AGENT = "backlogiq/0.1"
DEFAULT_DRAFT_TTL_S = 24 * 60 * 60

# Hosted backend (auth + REST data API). The anon key is public by design of the platform.
BACKLOGIQ_SUPABASE_URL = os.getenv("BACKLOGIQ_SUPABASE_URL", DEFAULT_SUPABASE_URL).rstrip("/")
BACKLOGIQ_SUPABASE_ANON_KEY = os.getenv("BACKLOGIQ_SUPABASE_ANON_KEY", "")

# Optional companion service; placeholder hosts disable it.
BACKLOGIQ_API_BASE_URL = os.getenv("BACKLOGIQ_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/")

BACKLOGIQ_HTTP_TIMEOUT_S = float(os.getenv("BACKLOGIQ_HTTP_TIMEOUT_S", str(DEFAULT_HTTP_TIMEOUT_S)))
BACKLOGIQ_HTTP_MAX_RETRIES = int(os.getenv("BACKLOGIQ_HTTP_MAX_RETRIES", str(DEFAULT_HTTP_MAX_RETRIES)))
BACKLOGIQ_HTTP_BACKOFF_S = float(os.getenv("BACKLOGIQ_HTTP_BACKOFF_S", str(DEFAULT_HTTP_BACKOFF_S)))
BACKLOGIQ_USER_AGENT = os.getenv("BACKLOGIQ_USER_AGENT", DEFAULT_USER_AGENT)

# Onboarding drafts idle for longer than this are treated as abandoned.
BACKLOGIQ_DRAFT_TTL_S = float(os.getenv("BACKLOGIQ_DRAFT_TTL_S", str(DEFAULT_DRAFT_TTL_S)))
