"""Typed request-building client for S3-compatible object storage."""
