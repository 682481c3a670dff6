"""PageFlow inserts a mapped reference page at the front of PDF files."""

__version__ = "0.1.0"
