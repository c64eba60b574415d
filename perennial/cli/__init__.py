"""Command line interface for Perennial."""
