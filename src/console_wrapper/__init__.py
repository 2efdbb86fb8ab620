"""
Console Wrapper - bootstrap updater for console artifacts.

Keeps one artifact in a content directory current with a Maven
repository, choosing between mirrors and an optional proxy.
"""

__version__ = "0.3.0"

__all__ = ["__version__"]
