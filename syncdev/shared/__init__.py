"""
SyncDev Shared Kernel
=====================

Pieces used by every SyncDev client front end.

Architecture:
- core: EventBus, event topics, configuration, logging, errors
- domain: Entities reported by the sync backend
"""

__all__ = []
