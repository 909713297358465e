"""Shared infrastructure: settings, logging, database connection, observability."""
