from quotedesk.models.user import User
from quotedesk.models.agent import Agent
from quotedesk.models.client_info import ClientInfo
from quotedesk.models.item import Category, Item
from quotedesk.models.quote import Quote, QuoteItem
from quotedesk.models.order import Order
from quotedesk.models.circuit_tracking import CircuitTracking, CircuitMilestone
from quotedesk.models.deal import DealRegistration

__all__ = [
    "User",
    "Agent",
    "ClientInfo",
    "Category",
    "Item",
    "Quote",
    "QuoteItem",
    "Order",
    "CircuitTracking",
    "CircuitMilestone",
    "DealRegistration",
]
