"""
Call-log trail and outbound call trigger.

NOTE:
This package __init__ MUST be lightweight.
Do NOT import SQLAlchemy models here, otherwise importing any submodule
triggers ORM mapping at import time.
"""

__all__: list[str] = []
