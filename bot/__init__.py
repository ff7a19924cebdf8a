"""Bot layer — update sources, routing and delivery queues.

This package may import from ``core/`` and ``sdk/`` only.
"""

from bot.dispatcher import Bot
from bot.queues import DeliveryQueue
from bot.registry import Slot, Subscription, SubscriptionRegistry
from bot.router import Router
from bot.sources import PollSource, UpdateCursor, WebhookSource

__all__ = [
    # Root
    "Bot",
    # Routing
    "Router",
    "Slot",
    "Subscription",
    "SubscriptionRegistry",
    "DeliveryQueue",
    # Sources
    "PollSource",
    "UpdateCursor",
    "WebhookSource",
]
