"""Skillforge — turns unstructured content into versioned skill bundles."""

__version__ = "0.1.0"
