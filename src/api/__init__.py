"""HTTP interface for the ingest service.

This module contains the FastAPI application factory and route
definitions. Uploads are acknowledged immediately and ingested in
background tasks.
"""
