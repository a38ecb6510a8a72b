"""Row adapters mapping raw CSV rows to transaction records."""
