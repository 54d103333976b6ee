"""JSON-lines storage and serialization."""
