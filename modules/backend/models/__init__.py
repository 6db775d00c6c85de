# Database models package. Importing it registers every table on Base.metadata
# (used by alembic autogenerate and by the test fixtures' create_all).
from modules.backend.models.base import Base
from modules.backend.models.cabling import (
    Building,
    CablingSurvey,
    CentralRack,
    Device,
    Floor,
    FloorRack,
    ImageAsset,
    Room,
)
from modules.backend.models.catalog import (
    Brand,
    BrandTranslation,
    Category,
    CategoryTranslation,
    Product,
)
from modules.backend.models.customer import Contact, Customer
from modules.backend.models.file import File
from modules.backend.models.lead import Lead, LeadStatusChange
from modules.backend.models.menu import MenuGroup, MenuItem, MenuItemPermission
from modules.backend.models.site_survey import SiteSurvey
from modules.backend.models.user import Branch, Department, User, WorkPosition

__all__ = [
    "Base",
    "Branch",
    "Brand",
    "BrandTranslation",
    "Building",
    "CablingSurvey",
    "Category",
    "CategoryTranslation",
    "CentralRack",
    "Contact",
    "Customer",
    "Department",
    "Device",
    "File",
    "Floor",
    "FloorRack",
    "ImageAsset",
    "Lead",
    "LeadStatusChange",
    "MenuGroup",
    "MenuItem",
    "MenuItemPermission",
    "Product",
    "Room",
    "SiteSurvey",
    "User",
    "WorkPosition",
]
