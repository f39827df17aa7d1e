"""HTTP API for the knowledge assistant."""
