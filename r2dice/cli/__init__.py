"""Command-line interface for r2dice."""
