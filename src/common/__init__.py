"""Shared helpers: errors, HTTP and logging utilities."""
