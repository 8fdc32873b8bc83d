"""
Change notification: post-commit hooks, real-time hub and the notifier
that ties writes to search indexing and broadcasts.
"""

from stockapp.notifications.broadcaster import Broadcaster, ConnectionHub, NullBroadcaster
from stockapp.notifications.hooks import PostCommitHooks, post_commit_hooks
from stockapp.notifications.notifier import ChangeNotifier, Events

__all__ = [
    "Broadcaster",
    "ConnectionHub",
    "NullBroadcaster",
    "PostCommitHooks",
    "post_commit_hooks",
    "ChangeNotifier",
    "Events",
]
