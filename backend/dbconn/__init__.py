"""pydbconn: cached database connections with explicit transaction control."""

__version__ = "0.1.0"
