# checktable/__init__.py
"""Browser table editor backed by a single JSON document."""

__version__ = "1.0.0"
