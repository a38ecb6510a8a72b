"""Ingest helpers: CSV file reading and row adapters."""
