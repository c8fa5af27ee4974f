from quotedesk.routes.auth import router as auth_router
from quotedesk.routes.agents import router as agents_router
from quotedesk.routes.clients import router as clients_router
from quotedesk.routes.quotes import router as quotes_router
from quotedesk.routes.circuit_tracking import router as circuit_tracking_router
from quotedesk.routes.deals import router as deals_router

__all__ = [
    'auth_router',
    'agents_router',
    'clients_router',
    'quotes_router',
    'circuit_tracking_router',
    'deals_router',
]
