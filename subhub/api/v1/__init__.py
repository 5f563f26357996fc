"""Site routes.

Import the aggregated router from the routers subpackage:

    from subhub.api.v1.routers import router
"""

__all__ = []
