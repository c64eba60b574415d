"""Perennial - spaced repetition scheduling preview.

Projects the review intervals a profile's scheduling settings would
produce, and manages those settings through the Perennial REST API.
"""

__version__ = "0.3.0"
__all__ = ["__version__"]
