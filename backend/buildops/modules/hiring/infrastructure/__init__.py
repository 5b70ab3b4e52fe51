"""Hiring infrastructure adapters."""

from buildops.modules.hiring.infrastructure.repositories import InMemoryJobApplicationRepository

__all__ = ["InMemoryJobApplicationRepository"]
