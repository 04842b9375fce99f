from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, require_admin
from app.db.models.user import User
from app.schemas.misc import AdminStats
from app.services.admin_service import get_admin_stats

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/stats", response_model=AdminStats)
def admin_stats(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return get_admin_stats(db)
