"""Service catalog repository"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Service


class ServiceRepository:
    @staticmethod
    def get_services(db: Session, active_only: bool = False) -> list[Service]:
        query = db.query(Service)
        if active_only:
            query = query.filter(Service.is_active.is_(True))
        return query.order_by(Service.display_order.asc(), Service.created_at.asc()).all()

    @staticmethod
    def get_service_by_id(db: Session, service_id: str) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()

    @staticmethod
    def get_service_by_name(db: Session, name: str) -> Optional[Service]:
        return db.query(Service).filter(func.lower(Service.name) == name.strip().lower()).first()

    @staticmethod
    def next_display_order(db: Session) -> int:
        current = db.query(func.max(Service.display_order)).scalar()
        return (current or 0) + 1

    @staticmethod
    def create_service(db: Session, **data) -> Service:
        service = Service(**data)
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def update_service(db: Session, service: Service, **updates) -> Service:
        for key, value in updates.items():
            if value is not None and hasattr(service, key):
                setattr(service, key, value)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def delete_service(db: Session, service: Service) -> None:
        db.delete(service)
        db.commit()
