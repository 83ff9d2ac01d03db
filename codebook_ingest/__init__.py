"""Codebook ingestion engine.

Reads versioned, spreadsheet-authored clinical codebooks and turns them into
a normalized, multi-language concept model indexed by numeric version.

Deterministic: no network access, no document output.
"""

__version__ = "0.3.0"
