"""Application services shared across domain modules."""
