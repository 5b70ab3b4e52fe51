"""Quote application layer: commands, queries, handlers and the application service."""
