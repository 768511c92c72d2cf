"""Command line interface for sepadd."""
