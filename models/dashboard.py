"""Schemas for the partner / admin dashboards and consultant booking."""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

from models.profile import ApplicantType

LeadStatus = Literal["New", "Consultation Booked", "In Progress", "Visa Approved"]


class Lead(BaseModel):
    id: str
    name: str
    email: str
    status: LeadStatus
    score: int = Field(..., ge=0, le=100)
    type: ApplicantType
    last_active: str


class PartnerOrganization(BaseModel):
    id: str
    agency_name: str
    contact_person: str
    email: str
    subscription_plan: Literal["Basic", "Pro", "Enterprise"]
    status: Literal["Active", "Pending", "Suspended"]
    client_count: int = Field(0, ge=0)
    revenue_generated: int = Field(0, ge=0, description="CAD")


class RevenuePoint(BaseModel):
    month: str
    partners: int
    direct: int


class PartnerDashboardOut(BaseModel):
    leads: list[Lead]
    total_leads: int
    new_leads: int
    average_score: float
    status_counts: dict[str, int] = Field(default_factory=dict)


class AdminDashboardOut(BaseModel):
    partners: list[PartnerOrganization]
    direct_users: list[Lead]
    revenue: list[RevenuePoint]
    total_revenue: int
    active_partners: int
    direct_applicants: int
    partner_clients: int


class Consultant(BaseModel):
    id: str
    name: str
    type: Literal["RCIC", "Immigration Lawyer"]
    specialization: str
    rating: float
    reviews: int
    fee: int = Field(..., description="CAD per session")
    image: str
    available: bool = True


class BookingDay(BaseModel):
    day: str = Field(..., description="Short weekday, e.g. 'Mon'")
    day_of_month: int
    full_date: date


class ConsultantsOut(BaseModel):
    consultants: list[Consultant]
    days: list[BookingDay]
    time_slots: list[str]
