"""Shared helpers for logging, environment flags and retries."""
