"""Infrastructure adapters (database, storage)."""
