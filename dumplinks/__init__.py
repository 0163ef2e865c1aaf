"""dumplinks: stream page records, links and categories out of XML dumps."""

__version__ = "0.1.0"
