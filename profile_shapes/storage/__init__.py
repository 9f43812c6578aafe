# ==============================================
# TOPIC 3: STORAGE (MongoDB profiler source)
# ==============================================
#
# This package handles all database operations: connecting to
# MongoDB and streaming the system.profile collection.
#
# Modules:
# --------
# - mongo_client.py    → ProfileClient: connection + profiler stream
#
# ==============================================

from .mongo_client import ProfileClient

__all__ = [
    "ProfileClient",
]
