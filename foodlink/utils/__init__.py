# foodlink/utils/__init__.py
from .route_optimization import (
    RouteOptimizer,
    Location,
    get_route_optimizer
)
from .activity import notify, record_audit

__all__ = [
    'RouteOptimizer',
    'Location',
    'get_route_optimizer',
    'notify',
    'record_audit',
]
