from fastapi import APIRouter

from app.utils.sample_data import admin_dashboard, consultants, partner_dashboard
from models.dashboard import AdminDashboardOut, ConsultantsOut, PartnerDashboardOut

router = APIRouter(tags=["dashboards"])


@router.get("/dashboards/partner", response_model=PartnerDashboardOut)
async def get_partner_dashboard():
    """Leads for a consultancy partner (sample data)."""
    return partner_dashboard()


@router.get("/dashboards/admin", response_model=AdminDashboardOut)
async def get_admin_dashboard():
    """Platform overview: partners, direct applicants and monthly revenue (sample data)."""
    return admin_dashboard()


@router.get("/consultants", response_model=ConsultantsOut)
async def list_consultants():
    """Bookable consultants with the next three days of time slots."""
    return consultants()
