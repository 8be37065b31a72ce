import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import Conflict, Forbidden, NotFound, Unauthorized
from app.core.security import (
    ROLE_ADMIN,
    ROLE_DELIVERY,
    ROLE_STORE,
    ROLE_USER,
    AccessPolicy,
    hash_password,
    verify_password,
)
from app.models.delivery_partner import DeliveryPartner
from app.models.store import Store
from app.models.user import Admin, User
from app.schemas.delivery_partner import DeliveryPartnerRegister
from app.schemas.user import UserSignup

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session, policy: AccessPolicy):
        self.db = db
        self.policy = policy

    # ============================================
    # END USERS
    # ============================================

    def signup_user(self, data: UserSignup) -> User:
        existing = self.db.query(User).filter(User.email == data.email).first()
        if existing:
            raise Conflict("User already exists")

        user = User(
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password),
            phone=data.phone,
            address=data.address,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise Conflict("User already exists")
        self.db.refresh(user)

        logger.info("User %s signed up", user.id)
        return user

    def authenticate_user(self, email: str, password: str) -> str:
        user = self.db.query(User).filter(User.email == email).first()
        if not user or not verify_password(password, user.password_hash):
            raise Unauthorized("Incorrect email or password")
        return self.policy.create_access_token(user.id, ROLE_USER)

    # ============================================
    # STORES
    # ============================================

    def authenticate_store(self, phone: str, password: str) -> str:
        store = self.db.query(Store).filter(Store.phone == phone).first()
        if not store or not verify_password(password, store.password_hash):
            raise Unauthorized("Incorrect phone or password")
        if store.is_suspended:
            raise Forbidden("Store is suspended")
        return self.policy.create_access_token(store.id, ROLE_STORE)

    # ============================================
    # DELIVERY PARTNERS
    # ============================================

    def register_partner(self, data: DeliveryPartnerRegister) -> DeliveryPartner:
        exists = self.db.query(DeliveryPartner).filter(
            (DeliveryPartner.phone == data.phone) | (DeliveryPartner.email == data.email)
        ).first()
        if exists:
            raise Conflict("A delivery partner with this phone or email already exists.")

        partner = DeliveryPartner(
            name=data.name,
            phone=data.phone,
            email=data.email,
            password_hash=hash_password(data.password),
            address=data.address,
            vehicle_number=data.vehicle_details.number_plate,
            id_proof=data.identity_proof_document.document_url,
            license_number=data.license_number,
            is_approved=False,
            is_available=True,
        )
        self.db.add(partner)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise Conflict("A delivery partner with this phone or email already exists.")
        self.db.refresh(partner)

        logger.info("Delivery partner %s registered, awaiting approval", partner.id)
        return partner

    def authenticate_partner(self, email: str, password: str) -> str:
        partner = self.db.query(DeliveryPartner).filter(DeliveryPartner.email == email).first()
        if not partner or not partner.password_hash or not verify_password(password, partner.password_hash):
            raise Unauthorized("Incorrect email or password")
        return self.policy.create_access_token(partner.id, ROLE_DELIVERY)

    # ============================================
    # ADMIN
    # ============================================

    def authenticate_admin(self, email: str, password: str) -> str:
        admin = self.db.query(Admin).filter(Admin.email == email).first()
        if not admin or not verify_password(password, admin.password_hash):
            raise Unauthorized("Incorrect email or password")
        return self.policy.create_access_token(admin.id, ROLE_ADMIN)

    def update_admin_password(self, admin_id: int, current_password: str, new_password: str) -> None:
        admin = self.db.get(Admin, admin_id)
        if not admin:
            raise NotFound("Admin not found")
        if not verify_password(current_password, admin.password_hash):
            raise Unauthorized("Current password is incorrect")

        admin.password_hash = hash_password(new_password)
        self.db.commit()
        logger.info("Admin %s changed password", admin_id)

    def ensure_admin(self, email: str, password: str) -> Optional[Admin]:
        """Create the admin account unless one with this email exists."""
        if self.db.query(Admin).filter(Admin.email == email).first():
            return None

        admin = Admin(email=email, password_hash=hash_password(password))
        self.db.add(admin)
        self.db.commit()
        self.db.refresh(admin)
        return admin
