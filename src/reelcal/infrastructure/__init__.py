"""Infrastructure layer - HTTP clients, providers, persistence and logging."""
