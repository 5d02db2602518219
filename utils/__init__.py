"""
Utilities Package for the Monitor Check Engine

Logging setup, small helpers and check-time validators.
"""
