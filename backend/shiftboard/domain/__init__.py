"""Domain layer: scheduling entities, value objects, services and errors."""
