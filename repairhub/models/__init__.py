"""
Import all models here so that:
1. Alembic can auto-detect them when generating migrations
2. Relationships between models resolve correctly
"""

from repairhub.models.role import UserRole, TRANSITION_TARGETS, ADMIN_ASSIGNABLE
from repairhub.models.user import User
from repairhub.models.truck_owner import TruckOwner
from repairhub.models.company import Company, ProfileStatus
from repairhub.models.driver import Driver
from repairhub.models.truck import Truck, TruckMilestone, TruckStatus, RepairStage
from repairhub.models.job_card import JobCard, JobCardStatus
from repairhub.models.store_item import StoreItem, StoreCategory, StoreItemStatus
from repairhub.models.cart import Cart, CartItem, CartStatus
from repairhub.models.notification import Notification, NotificationStatus
from repairhub.models.audit_log import AuditLog

__all__ = [
    "UserRole",
    "TRANSITION_TARGETS",
    "ADMIN_ASSIGNABLE",
    "User",
    "TruckOwner",
    "Company",
    "ProfileStatus",
    "Driver",
    "Truck",
    "TruckMilestone",
    "TruckStatus",
    "RepairStage",
    "JobCard",
    "JobCardStatus",
    "StoreItem",
    "StoreCategory",
    "StoreItemStatus",
    "Cart",
    "CartItem",
    "CartStatus",
    "Notification",
    "NotificationStatus",
    "AuditLog",
]
