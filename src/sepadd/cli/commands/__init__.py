"""CLI commands for sepadd."""
