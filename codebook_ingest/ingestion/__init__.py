"""Workbook ingestion: tabular adapter, sheet parsers, codebook aggregate and manager."""
