"""Core services shared by every layer: configuration, logging, errors."""
