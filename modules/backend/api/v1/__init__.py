"""
API Version 1 Router.

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from modules.backend.api.v1.endpoints import (
    auth,
    brands,
    cabling,
    categories,
    customers,
    documents,
    emails,
    files,
    leads,
    menu,
    products,
    site_surveys,
    users,
)

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(customers.router, prefix="/customers", tags=["customers"])

# Catalog
router.include_router(brands.router, prefix="/brands", tags=["brands"])
router.include_router(categories.router, prefix="/categories", tags=["categories"])
router.include_router(products.router, prefix="/products", tags=["products"])

# Site surveys
router.include_router(site_surveys.router, prefix="/site-surveys", tags=["site-surveys"])
router.include_router(cabling.router, prefix="/cabling", tags=["cabling"])
router.include_router(documents.router, prefix="/documents", tags=["documents"])
router.include_router(files.router, prefix="/files", tags=["files"])

# Sales
router.include_router(leads.router, prefix="/leads", tags=["leads"])

# Mail and navigation
router.include_router(emails.router, prefix="/emails", tags=["emails"])
router.include_router(menu.router, prefix="/menu", tags=["menu"])
