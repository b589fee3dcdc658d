"""
Shared configuration resolution for the database command line tools.
"""

__version__ = "0.1.0"
