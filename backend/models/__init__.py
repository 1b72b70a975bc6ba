"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  NH Console - Models Package                                                 ║
║                                                                              ║
║  Exports all request models for easy import                                 ║
║  from models import OrderCreate, LeadCreate, ProductUpdate, etc.             ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

# Auth
from .auth import (
    VALID_ROLES,
    UserLogin,
    UserCreate,
    UserUpdate,
)

# Products, suppliers, categories
from .product import (
    ProductCreate,
    ProductUpdate,
    SupplierCreate,
    CategoryCreate,
    RenameRequest,
)

# Orders / invoices
from .order import (
    PaymentStatus,
    PaymentMethod,
    VALID_PAYMENT_TRANSITIONS,
    OrderItemCreate,
    OrderCreate,
    OrderStatusUpdate,
)

# Customers
from .customer import (
    CustomerCreate,
    CustomerUpdate,
    is_valid_email_format,
)

# Leads
from .lead import (
    LeadStatus,
    VALID_LEAD_STATUSES,
    LeadCreate,
    LeadUpdate,
    LeadBulkDelete,
)

# Referrals
from .referral import (
    ReferralStatus,
    VALID_REFERRAL_TRANSITIONS,
)

# Settings
from .settings import (
    DEFAULT_BRANDING,
    BrandingSettings,
)

__all__ = [
    # Auth
    "VALID_ROLES",
    "UserLogin",
    "UserCreate",
    "UserUpdate",
    # Products
    "ProductCreate",
    "ProductUpdate",
    "SupplierCreate",
    "CategoryCreate",
    "RenameRequest",
    # Orders
    "PaymentStatus",
    "PaymentMethod",
    "VALID_PAYMENT_TRANSITIONS",
    "OrderItemCreate",
    "OrderCreate",
    "OrderStatusUpdate",
    # Customers
    "CustomerCreate",
    "CustomerUpdate",
    "is_valid_email_format",
    # Leads
    "LeadStatus",
    "VALID_LEAD_STATUSES",
    "LeadCreate",
    "LeadUpdate",
    "LeadBulkDelete",
    # Referrals
    "ReferralStatus",
    "VALID_REFERRAL_TRANSITIONS",
    # Settings
    "DEFAULT_BRANDING",
    "BrandingSettings",
]
