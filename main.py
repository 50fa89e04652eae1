"""Cloud Function Entry Point - Root Module.

This is the root-level entry point for Google Cloud Functions.
It imports from the quake_notifier package.
"""

from quake_notifier.main import (
    poll_cycle,
    poll_cycle_pubsub,
)

__all__ = [
    "poll_cycle",
    "poll_cycle_pubsub",
]
