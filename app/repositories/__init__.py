from app.repositories.order_repository import IOrderRepository, SqlAlchemyOrderRepository
from app.repositories.partner_directory import PartnerDirectory

__all__ = ["IOrderRepository", "SqlAlchemyOrderRepository", "PartnerDirectory"]
