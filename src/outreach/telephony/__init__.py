"""
Telephony provider integration and call-outcome ingestion.
"""
