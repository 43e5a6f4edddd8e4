"""Domain layer - entities, value objects and exceptions for watch history."""
