"""
Shared utilities: configuration, logging, export and dependency wiring.
"""
