"""
Version information for recordrepo.

This file is the single source of truth for version numbers.
setup.py reads it without importing the package.
"""

__version__ = "0.3.0"
__version_info__ = (0, 3, 0)
