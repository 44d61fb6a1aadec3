"""Domain layer: value objects, entities, geofence rules and exceptions."""
