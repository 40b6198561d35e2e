"""authzcore - access-resolution engine for an IAM backend."""

__version__ = "0.1.0"
