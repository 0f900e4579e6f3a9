from .accounts import router as accounts_router
from .admin import router as admin_router
from .bookings import router as bookings_router
from .creators import router as creators_router
from .edge_functions import router as edge_functions_router
from .fans import router as fans_router
from .site import router as site_router

ROUTERS = [
    edge_functions_router,
    bookings_router,
    accounts_router,
    admin_router,
    fans_router,
    creators_router,
    site_router,
]
