"""Record storage layer.

This module defines the record store collaborator protocol and its
MongoDB implementation, plus the SDK client built on top of them.
"""
