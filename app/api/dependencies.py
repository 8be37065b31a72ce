"""
Auth dependencies: resolve the bearer token to an identity and load the
acting user, store, delivery partner or admin.
"""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.exceptions import Forbidden, Unauthorized
from app.core.security import (
    ROLE_ADMIN,
    ROLE_DELIVERY,
    ROLE_STORE,
    ROLE_USER,
    AccessPolicy,
    Identity,
)
from app.models.delivery_partner import DeliveryPartner
from app.models.store import Store
from app.models.user import Admin, User

bearer_scheme = HTTPBearer(auto_error=False)


def get_access_policy(request: Request) -> AccessPolicy:
    return request.app.state.access_policy


def get_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    policy: AccessPolicy = Depends(get_access_policy),
) -> Identity:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise Unauthorized("Unauthorized: No token provided")
    return policy.resolve(credentials.credentials)


def require_role(*roles: str):
    def dependency(identity: Identity = Depends(get_identity)) -> Identity:
        if identity.role not in roles:
            raise Forbidden("Forbidden: Invalid role")
        return identity
    return dependency


def get_current_user(
    identity: Identity = Depends(require_role(ROLE_USER)),
    db: Session = Depends(get_db),
) -> User:
    user = db.get(User, identity.identity_id)
    if not user:
        raise Unauthorized("User no longer exists")
    return user


def get_current_store(
    identity: Identity = Depends(require_role(ROLE_STORE)),
    db: Session = Depends(get_db),
) -> Store:
    store = db.get(Store, identity.identity_id)
    if not store:
        raise Unauthorized("Store no longer exists")
    if store.is_suspended:
        raise Forbidden("Store is suspended")
    return store


def get_current_partner(
    identity: Identity = Depends(require_role(ROLE_DELIVERY)),
    db: Session = Depends(get_db),
) -> DeliveryPartner:
    partner = db.get(DeliveryPartner, identity.identity_id)
    if not partner:
        raise Unauthorized("Delivery partner no longer exists")
    return partner


def get_current_admin(
    identity: Identity = Depends(require_role(ROLE_ADMIN)),
    db: Session = Depends(get_db),
) -> Admin:
    admin = db.get(Admin, identity.identity_id)
    if not admin:
        raise Unauthorized("Admin no longer exists")
    return admin
