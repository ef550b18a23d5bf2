"""
Call-outcome webhook endpoint and processing.
"""
