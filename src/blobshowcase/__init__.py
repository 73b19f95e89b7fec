"""Read-only showcase of project records stored on Sui Blob objects."""

__version__ = "0.3.0"
