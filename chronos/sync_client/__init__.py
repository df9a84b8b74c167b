from .client import SyncError, push_records

__all__ = ["SyncError", "push_records"]
