"""
HotelOps
Hotel audits, incidents, SOPs and analytics on a local object store.
"""

__version__ = "1.0.0"
