"""Domain layer: entities, ports and exceptions for link resolution."""
