"""Command-line interface for tfdc."""
