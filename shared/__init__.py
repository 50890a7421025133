"""
Shared utilities for the FitCoach Access Layer.

This package aggregates common building blocks consumed by the services:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request and caller correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- circuit_breaker: Resilient external call protection
- base_service: FastAPI app scaffold with health, metrics and error handlers
- test_helpers: Config, response and payload factories for tests

Any cross-service logic should live here to avoid import cycles across
service packages. Do not import from service packages into shared/.
"""
