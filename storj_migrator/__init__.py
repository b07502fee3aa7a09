"""Chunked migration of Zenko (S3 compatible) objects to Storj."""

__version__ = '1.0.0'
