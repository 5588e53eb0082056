"""Inventory metadata query layer.

Read-only lookups of registered services, service instances, endpoints and
databases stored in SQLite.
"""
