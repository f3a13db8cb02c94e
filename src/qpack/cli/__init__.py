"""Command-line interface for qpack."""
