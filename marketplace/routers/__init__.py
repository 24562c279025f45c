from . import health, profiles, catalog, enrollments, certificates, events
from .admin import payments, stats

__all__ = [
    "health",
    "profiles",
    "catalog",
    "enrollments",
    "certificates",
    "events",
    "payments",
    "stats"
]
