"""HTTP composition layer: controllers, request parsing and responders.

Modules in this package bridge FastAPI routes to operations without placing
business logic in the route functions.
"""
