"""bookshare - peer-to-peer book lending catalog.

Owners list books, other members borrow, return and rate them.
"""

__version__ = "0.1.0"
