"""Core module - model orchestration: status, catalog, selection, generation and sessions."""
