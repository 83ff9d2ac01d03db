"""Pydantic domain models for codebooks, concepts, and diagnostics."""
