"""API routers."""

from buildops.presentation.api.routers import health, job_applications, quotes

__all__ = ["health", "job_applications", "quotes"]
