"""Terminal browser for schema-less document stores."""

__version__ = "0.1.0"
