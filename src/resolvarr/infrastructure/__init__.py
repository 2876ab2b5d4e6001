"""Infrastructure adapters: HTTP resolvers, config, logging."""
