"""Inventory command-line interface."""
