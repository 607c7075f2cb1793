"""Application layer: query tooling used by every front end."""
