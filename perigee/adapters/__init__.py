"""Adapters between the session engine and the TUI event loop."""
