"""
End-user accounts: signup, signin and profile
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.dependencies import get_access_policy, get_current_user
from app.core.database import get_db
from app.core.security import ROLE_USER, AccessPolicy
from app.models.user import User
from app.schemas.user import TokenResponse, UserSignIn, UserSignup
from app.services.auth_service import AuthService
from app.utils.responses import success_response

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/signup", status_code=201)
def signup(
    data: UserSignup,
    db: Session = Depends(get_db),
    policy: AccessPolicy = Depends(get_access_policy),
):
    user = AuthService(db, policy).signup_user(data)
    return success_response("Signup successful", {"id": user.id, "email": user.email})


@router.post("/signin")
def signin(
    data: UserSignIn,
    db: Session = Depends(get_db),
    policy: AccessPolicy = Depends(get_access_policy),
):
    token = AuthService(db, policy).authenticate_user(data.email, data.password)
    return success_response("Login successful", TokenResponse(access_token=token, role=ROLE_USER))


@router.get("/me")
def get_current_user_info(current_user: User = Depends(get_current_user)):
    return success_response("Profile fetched", {
        "id": current_user.id,
        "name": current_user.name,
        "email": current_user.email,
        "phone": current_user.phone,
        "address": current_user.address,
    })
