"""Adapters binding the catalog domain to databases, HTTP APIs and vendor feeds."""
