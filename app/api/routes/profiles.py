import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.auth import Principal, get_principal, invalidate_role, require_roles
from app.core.errors import InternalError, NotFound
from app.models.profile import Profile
from app.schemas.profile import ProfileOut, RoleUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("/me", response_model=ProfileOut)
def get_my_profile(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    profile = db.query(Profile).filter(Profile.id == principal.id).first()
    if not profile:
        raise NotFound("Profile not found")
    return profile


@router.get("", response_model=List[ProfileOut])
def list_profiles(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles("admin", "manager")),
):
    return db.query(Profile).order_by(Profile.full_name.asc()).all()


@router.patch("/{profile_id}/role", response_model=ProfileOut)
def update_role(
    profile_id: str,
    payload: RoleUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles("admin")),
):
    profile = db.query(Profile).filter(Profile.id == profile_id).first()
    if not profile:
        raise NotFound("Profile not found")

    old_role = profile.role
    profile.role = payload.role
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise InternalError(str(e))
    db.refresh(profile)

    invalidate_role(profile_id)
    logger.info("Role of %s changed %s -> %s by %s", profile_id, old_role, profile.role, principal.id)
    return profile
