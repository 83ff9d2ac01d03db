"""Command-line drivers. Run with ``python -m scripts.<name>``."""
