"""Admin authentication endpoints (API JWT)."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ordering.core.security import authenticate_admin, create_access_token, get_current_admin
from ordering.db.session import get_db
from ordering.models.admin_user import AdminUser
from ordering.schemas.auth import AdminResponse, LoginRequest, TokenResponse

router: APIRouter = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    admin = authenticate_admin(db, payload.email, payload.password)
    if admin is None:
        logger.info("[AUTH] Failed admin login for %s", payload.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect email or password")
    token = create_access_token(data={"sub": str(admin.id), "type": "admin", "role": admin.role})
    return TokenResponse(access_token=token)


@router.get("/me", response_model=AdminResponse)
def me(current_admin: AdminUser = Depends(get_current_admin)) -> AdminResponse:
    return AdminResponse.model_validate(current_admin)
