"""Aggregate all v1 sub-routers."""

from fastapi import APIRouter, Depends

from templecms.api.v1.admin_crud import router as admin_crud_router
from templecms.api.v1.admin_lists import router as admin_lists_router
from templecms.api.v1.auth import router as auth_router
from templecms.api.v1.contact import router as contact_router
from templecms.api.v1.donations import router as donations_router
from templecms.api.v1.health import router as health_router
from templecms.api.v1.media import router as media_router
from templecms.api.v1.payments import router as payments_router
from templecms.api.v1.public_site import router as public_site_router
from templecms.api.v1.users import router as users_router
from templecms.core.dependencies import require_admin

# Every /admin route passes through the same role check.
admin_router = APIRouter(dependencies=[Depends(require_admin)])
admin_router.include_router(admin_lists_router, tags=["admin"])
admin_router.include_router(media_router, prefix="/uploads", tags=["admin-uploads"])
admin_router.include_router(admin_crud_router, tags=["admin-content"])

api_v1_router = APIRouter()

api_v1_router.include_router(health_router, tags=["health"])
api_v1_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_v1_router.include_router(users_router, prefix="/users", tags=["users"])
api_v1_router.include_router(payments_router, prefix="/payments", tags=["payments"])
api_v1_router.include_router(donations_router, tags=["donations"])
api_v1_router.include_router(contact_router, tags=["contact"])
api_v1_router.include_router(public_site_router, tags=["site"])
api_v1_router.include_router(admin_router, prefix="/admin")
