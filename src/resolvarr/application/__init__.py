"""Application layer: use cases orchestrating the domain ports."""
