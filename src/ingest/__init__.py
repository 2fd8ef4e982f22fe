"""CSV ingestion pipeline.

This module streams uploaded files, normalizes rows into records,
and bulk-writes fixed-size batches to the record store.
"""
