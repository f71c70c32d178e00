# uritrack/__init__.py
"""
uritrack - personal urinary-health session tracker.
"""

__version__ = "1.2.0"
