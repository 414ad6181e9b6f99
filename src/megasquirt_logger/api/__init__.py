"""HTTP API for the latest decoded record."""
