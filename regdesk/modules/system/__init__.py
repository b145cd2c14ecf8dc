"""Health and server clock endpoints."""
