"""Shared service identity used when binding structured log records."""
from __future__ import annotations

SERVICE_NAME = "notification-worker"
