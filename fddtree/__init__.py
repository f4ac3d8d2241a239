"""
fddtree: editor core for Feature Driven Development planning documents.
"""

__version__ = "0.1.0"
