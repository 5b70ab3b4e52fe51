"""Core infrastructure shared by every BuildOps module.

- cqrs: command/query dispatch, middleware and the query cache
- domain: value objects, entities, aggregates and collaborator ports
- Cross-cutting: configuration, errors, logging, monitoring
"""
