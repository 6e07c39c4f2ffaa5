"""potr: translate PO catalogs with pluggable translation engines."""

__version__ = "0.3.0"
