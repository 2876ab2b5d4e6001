"""Interface adapters: HTTP API and CLI."""
