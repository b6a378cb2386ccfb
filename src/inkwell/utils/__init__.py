"""Shared helpers (logging, file IO, telemetry)."""
