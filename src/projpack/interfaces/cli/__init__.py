"""Command-line interface for projpack."""
