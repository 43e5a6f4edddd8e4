"""Application layer - pipeline stages, sources and use cases."""
