"""Service catalog router - public listing and dashboard management"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import Profile
from ...policies import require_dashboard_access
from .schemas import ServiceCreate, ServiceResponse, ServiceUpdate
from .service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/services", tags=["Services"])


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


@router.get("", response_model=list[ServiceResponse])
async def list_active_services(service: CatalogService = Depends(get_catalog_service)):
    """Active services in display order"""
    return service.get_public_services()


@router.get("/all", response_model=list[ServiceResponse])
async def list_all_services(
    current_user: Profile = Depends(require_dashboard_access),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.get_all_services()


@router.post("", response_model=ServiceResponse, status_code=201)
async def create_service(
    data: ServiceCreate,
    current_user: Profile = Depends(require_dashboard_access),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.create_service(data)


@router.post("/import-defaults")
async def import_default_services(
    current_user: Profile = Depends(require_dashboard_access),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.import_default_services()


@router.patch("/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: str,
    data: ServiceUpdate,
    current_user: Profile = Depends(require_dashboard_access),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.update_service(service_id, data)


@router.post("/{service_id}/toggle", response_model=ServiceResponse)
async def toggle_service(
    service_id: str,
    current_user: Profile = Depends(require_dashboard_access),
    service: CatalogService = Depends(get_catalog_service),
):
    """Show or hide a service on the public site"""
    return service.toggle_service(service_id)


@router.delete("/{service_id}")
async def delete_service(
    service_id: str,
    current_user: Profile = Depends(require_dashboard_access),
    service: CatalogService = Depends(get_catalog_service),
):
    return service.delete_service(service_id)
