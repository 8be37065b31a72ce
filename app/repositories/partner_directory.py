from sqlalchemy.orm import Session

from app.core.exceptions import NotFound
from app.models.delivery_partner import DeliveryPartner


class PartnerDirectory:
    """Read-only view of delivery partners for the order workflow."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, partner_id: int) -> DeliveryPartner:
        partner = self.db.query(DeliveryPartner).filter(DeliveryPartner.id == partner_id).first()
        if not partner:
            raise NotFound("Delivery partner not found", partner_id=partner_id)
        return partner
