"""Application layer - use cases built on the registry client."""
