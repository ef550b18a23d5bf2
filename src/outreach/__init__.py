"""
Outreach dashboard backend: contacts, outbound calls and call-outcome ingestion.
"""

__version__ = "0.1.0"
