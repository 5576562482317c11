"""W3C Ladder Backend - ranking and head-to-head API.

This package provides a hexagonal architecture implementation over the
``ladder`` analytics package.

Layers:
- application: Use cases and port interfaces
- infrastructure: Adapters for external services
- api: REST endpoints and response transformers
"""

__version__ = "1.0.0"
