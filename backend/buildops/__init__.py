"""BuildOps backend: quote requests and job applications for a construction company."""

__version__ = "0.1.0"
