"""Chronicle - tenant-isolated activity ingestion API."""

__version__ = "0.1.0"
