from typing import List, Optional
from fastapi import APIRouter, Query

from app.schemas.misc import CancellationScriptOut
from app.services.cancellation_service import search_scripts, get_script

router = APIRouter(prefix="/cancellation", tags=["Cancellation"])


@router.get("/scripts", response_model=List[CancellationScriptOut])
def list_scripts(search: Optional[str] = Query(None, description="Filter by service name")):
    return search_scripts(search)


@router.get("/scripts/{service}", response_model=CancellationScriptOut)
def script_for_service(service: str):
    """Script for a service; unknown services get the generic script with their name filled in."""
    return get_script(service)
