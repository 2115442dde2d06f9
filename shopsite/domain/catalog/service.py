"""Service catalog - business logic"""

import logging
from decimal import Decimal

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Service
from .repository import ServiceRepository
from .schemas import ServiceCreate, ServiceUpdate

logger = logging.getLogger(__name__)

DEFAULT_SERVICES = [
    (
        "Data Recovery",
        "Professional data recovery from hard drives, SSDs, USB drives, memory cards and RAID arrays.",
        999,
    ),
    (
        "Windows Upgrade",
        "Upgrade any Windows version to Windows 11 while keeping your files, apps and settings.",
        999,
    ),
    ("Password Recovery", "Reset or remove Windows passwords without losing data.", 499),
    ("Computer Repair", "Hardware and software repairs for laptops and desktops of all brands.", 299),
    ("Virus Removal", "Malware, virus and spyware removal, followed by protection setup.", 599),
    ("Backup Solutions", "Automated cloud or local backups for your important data.", 799),
    (
        "Software Installation",
        "Operating system and application installation with configuration and tuning.",
        399,
    ),
    ("Network Setup", "Home and small office networking, WiFi configuration and security.", 699),
]


class CatalogService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ServiceRepository()

    def get_public_services(self) -> list[Service]:
        return self.repo.get_services(self.db, active_only=True)

    def get_all_services(self) -> list[Service]:
        return self.repo.get_services(self.db)

    def get_service(self, service_id: str) -> Service:
        service = self.repo.get_service_by_id(self.db, service_id)
        if not service:
            raise HTTPException(status_code=404, detail="Service not found")
        return service

    def create_service(self, data: ServiceCreate) -> Service:
        service = self.repo.create_service(
            self.db,
            name=data.name,
            description=data.description,
            price=data.price,
            is_active=data.is_active,
            display_order=self.repo.next_display_order(self.db),
        )
        logger.info(f"✅ Service created: {service.name}")
        return service

    def update_service(self, service_id: str, data: ServiceUpdate) -> Service:
        service = self.get_service(service_id)
        return self.repo.update_service(self.db, service, **data.model_dump(exclude_unset=True))

    def toggle_service(self, service_id: str) -> Service:
        service = self.get_service(service_id)
        return self.repo.update_service(self.db, service, is_active=not service.is_active)

    def delete_service(self, service_id: str) -> dict:
        service = self.get_service(service_id)
        self.repo.delete_service(self.db, service)
        return {"message": "Service deleted"}

    def import_default_services(self) -> dict:
        """Append the stock service list, skipping names that already exist"""
        order = self.repo.next_display_order(self.db)
        imported = []
        for name, description, price in DEFAULT_SERVICES:
            if self.repo.get_service_by_name(self.db, name):
                continue
            self.db.add(
                Service(
                    name=name,
                    description=description,
                    price=Decimal(price),
                    display_order=order,
                    is_active=True,
                )
            )
            imported.append(name)
            order += 1
        self.db.commit()
        logger.info(f"✅ Imported {len(imported)} default services")
        return {"imported": imported, "count": len(imported)}
