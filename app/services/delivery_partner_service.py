import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import Conflict
from app.models.delivery_partner import DeliveryPartner
from app.repositories.partner_directory import PartnerDirectory
from app.schemas.delivery_partner import DeliveryPartnerCreate, DeliveryPartnerUpdate

logger = logging.getLogger(__name__)


class DeliveryPartnerService:
    """Admin management of delivery partners and their own availability toggle."""

    def __init__(self, db: Session):
        self.db = db
        self.directory = PartnerDirectory(db)

    def list_partners(self) -> List[DeliveryPartner]:
        return self.db.query(DeliveryPartner).order_by(DeliveryPartner.id).all()

    def get_partner(self, partner_id: int) -> DeliveryPartner:
        return self.directory.find_by_id(partner_id)

    def add_partner(self, data: DeliveryPartnerCreate) -> DeliveryPartner:
        exists = self.db.query(DeliveryPartner).filter(DeliveryPartner.phone == data.phone).first()
        if exists:
            raise Conflict("Phone number already exists.")

        partner = DeliveryPartner(**data.model_dump())
        self.db.add(partner)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise Conflict("Phone number already exists.")
        self.db.refresh(partner)

        logger.info("Delivery partner %s added", partner.id)
        return partner

    def update_partner(self, partner_id: int, data: DeliveryPartnerUpdate) -> DeliveryPartner:
        partner = self.get_partner(partner_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(partner, key, value)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise Conflict("Phone number already exists.")
        self.db.refresh(partner)
        return partner

    def approve_partner(self, partner_id: int) -> DeliveryPartner:
        partner = self.get_partner(partner_id)
        partner.is_approved = True
        self.db.commit()
        self.db.refresh(partner)

        logger.info("Delivery partner %s approved", partner_id)
        return partner

    def set_availability(self, partner_id: int, is_available: bool) -> DeliveryPartner:
        partner = self.get_partner(partner_id)
        partner.is_available = is_available
        self.db.commit()
        self.db.refresh(partner)
        return partner

    def delete_partner(self, partner_id: int) -> None:
        partner = self.get_partner(partner_id)
        if partner.orders:
            raise Conflict("Delivery partner has orders assigned and cannot be deleted.")
        self.db.delete(partner)
        self.db.commit()
        logger.info("Delivery partner %s deleted", partner_id)
