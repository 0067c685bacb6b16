"""
Django project configuration.

Settings are the single configuration layer for the nlquery package and the
query service; values are read from environment variables.
"""
