"""
pytest configuration for the trace query assistant.

This file initializes Django before any pytest tests are collected or run,
so that modules reading django.conf.settings see the test settings.
"""

import os
import django


def pytest_configure():
    """Initialize Django with test settings before pytest collects tests."""
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.test_settings")
    django.setup()
