from fastapi import APIRouter, Depends
from shelfbook.database.supabase_client import get_supabase
from shelfbook.core.dependencies import get_current_token
from shelfbook.core.errors import NotFoundError
from shelfbook.modules.dashboard.schemas import DashboardResponse
from shelfbook.modules.dashboard.session import DashboardSession
from supabase import Client

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
async def load_dashboard(
    token: str = Depends(get_current_token),
    supabase: Client = Depends(get_supabase)
):
    """Profile and sections for the dashboard; creates a placeholder profile on first visit"""
    session = DashboardSession(supabase, token)
    profile = session.load()
    if profile is None:
        raise NotFoundError("Profile not found")
    return DashboardResponse(profile=profile, sections=session.editor.sections)
