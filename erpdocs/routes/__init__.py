"""
FastAPI routers for all API endpoints.

Each module defines a router for one area (health, documents). Routes only
authenticate, validate and map responses; every number comes from the services.
"""
