"""Hiring application layer: commands, queries and the service facade."""
