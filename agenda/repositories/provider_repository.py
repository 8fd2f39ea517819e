from sqlalchemy.orm import Session

from agenda.core.clock import ensure_utc
from agenda.domain.service import Provider, Service
from agenda.models.service import Service as ServiceModel
from agenda.models.user import User


def _to_provider(row: User) -> Provider:
    return Provider(
        id=row.id,
        name=row.name,
        email=row.email,
        slug=row.slug,
        business_name=row.business_name,
        phone=row.phone,
    )


def _to_service(row: ServiceModel) -> Service:
    return Service(
        id=row.id,
        provider_id=row.provider_id,
        name=row.name,
        description=row.description,
        duration_in_minutes=row.duration_in_minutes,
        price_in_cents=row.price_in_cents or 0,
        is_active=bool(row.is_active),
        created_at=ensure_utc(row.created_at) if row.created_at else None,
        updated_at=ensure_utc(row.updated_at) if row.updated_at else None,
    )


class SqlAlchemyProviderRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_id(self, provider_id: str) -> Provider | None:
        row = self.db.get(User, provider_id)
        return _to_provider(row) if row is not None else None

    def find_by_slug(self, slug: str) -> Provider | None:
        row = self.db.query(User).filter(User.slug == slug.strip().lower()).first()
        return _to_provider(row) if row is not None else None


class SqlAlchemyServiceRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_id(self, service_id: str) -> Service | None:
        row = self.db.get(ServiceModel, service_id)
        return _to_service(row) if row is not None else None

    def find_active_by_provider_id(self, provider_id: str) -> list[Service]:
        rows = self.db.query(ServiceModel).filter(
            ServiceModel.provider_id == provider_id,
            ServiceModel.is_active.is_(True),
        ).order_by(ServiceModel.name.asc()).all()
        return [_to_service(row) for row in rows]
