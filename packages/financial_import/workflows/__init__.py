"""End-to-end import workflows."""
