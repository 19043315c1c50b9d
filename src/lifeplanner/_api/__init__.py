"""Endpoint helpers for the auth and table services (internal)."""
