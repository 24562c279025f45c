from .base_service import BaseService
from .profile_service import ProfileService
from .enrollment_service import EnrollmentService
from .catalog_service import CatalogService
from .admin_stats_service import AdminStatsService
from .certificate_service import CertificateService
from .event_service import EventService

__all__ = [
    "BaseService",
    "ProfileService",
    "EnrollmentService",
    "CatalogService",
    "AdminStatsService",
    "CertificateService",
    "EventService",
]
