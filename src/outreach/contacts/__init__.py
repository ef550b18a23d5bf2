"""
Contact records and their lifecycle.
"""

__all__: list[str] = []
