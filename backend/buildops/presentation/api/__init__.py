"""REST API for the BuildOps backend."""
