"""
Static sample data behind the partner / admin dashboards and the consultant
booking list. Read-only; summary figures are derived from the rows.
"""

from collections import Counter
from datetime import date, timedelta
from typing import List, Optional

from models.dashboard import (
    AdminDashboardOut,
    BookingDay,
    Consultant,
    ConsultantsOut,
    Lead,
    PartnerDashboardOut,
    PartnerOrganization,
    RevenuePoint,
)
from models.profile import ApplicantType

PARTNER_LEADS: List[Lead] = [
    Lead(id="201", name="Arjun Mehta", email="arjun.m@gmail.com", status="New", score=72, type=ApplicantType.STUDENT, last_active="2 hrs ago"),
    Lead(id="202", name="Li Wei", email="li.wei@outlook.com", status="Consultation Booked", score=84, type=ApplicantType.WORKER, last_active="Yesterday"),
    Lead(id="203", name="Fatima Khan", email="fatima.k@yahoo.com", status="In Progress", score=69, type=ApplicantType.WORKER, last_active="2 days ago"),
    Lead(id="204", name="Carlos Ruiz", email="c.ruiz@gmail.com", status="Visa Approved", score=91, type=ApplicantType.STUDENT, last_active="1 week ago"),
    Lead(id="205", name="Grace Okafor", email="grace.o@gmail.com", status="New", score=58, type=ApplicantType.STUDENT, last_active="3 hrs ago"),
]

PARTNERS: List[PartnerOrganization] = [
    PartnerOrganization(id="1", agency_name="Global Pathways Inc.", contact_person="Alice Johnson", email="alice@globalpath.com", subscription_plan="Enterprise", status="Active", client_count=145, revenue_generated=4500),
    PartnerOrganization(id="2", agency_name="Maple Visa Experts", contact_person="Raj Patel", email="raj@maplevisa.ca", subscription_plan="Pro", status="Active", client_count=62, revenue_generated=1200),
    PartnerOrganization(id="3", agency_name="Student Connect", contact_person="Maria Garcia", email="maria@connect.org", subscription_plan="Basic", status="Pending", client_count=0, revenue_generated=0),
    PartnerOrganization(id="4", agency_name="FastTrack Immigration", contact_person="John Smith", email="john@fasttrack.com", subscription_plan="Pro", status="Suspended", client_count=12, revenue_generated=400),
]

DIRECT_USERS: List[Lead] = [
    Lead(id="101", name="Emily Chen", email="emily.c@gmail.com", status="New", score=78, type=ApplicantType.STUDENT, last_active="1 hr ago"),
    Lead(id="102", name="David Miller", email="david.m@outlook.com", status="In Progress", score=88, type=ApplicantType.WORKER, last_active="3 days ago"),
    Lead(id="103", name="Sarah O-Connor", email="sarah.o@gmail.com", status="New", score=65, type=ApplicantType.WORKER, last_active="1 week ago"),
]

REVENUE: List[RevenuePoint] = [
    RevenuePoint(month="Jan", partners=4000, direct=2400),
    RevenuePoint(month="Feb", partners=3000, direct=1398),
    RevenuePoint(month="Mar", partners=2000, direct=9800),
    RevenuePoint(month="Apr", partners=2780, direct=3908),
    RevenuePoint(month="May", partners=1890, direct=4800),
    RevenuePoint(month="Jun", partners=2390, direct=3800),
    RevenuePoint(month="Jul", partners=3490, direct=4300),
]

CONSULTANTS: List[Consultant] = [
    Consultant(id="1", name="Sarah Jenkins", type="RCIC", specialization="Student Visas & Express Entry", rating=4.9, reviews=124, fee=150, image="https://api.dicebear.com/7.x/avataaars/svg?seed=Sarah"),
    Consultant(id="2", name="David Ross, JD", type="Immigration Lawyer", specialization="Refusals, Appeals & Business Immigration", rating=5.0, reviews=89, fee=300, image="https://api.dicebear.com/7.x/avataaars/svg?seed=David"),
    Consultant(id="3", name="Priya Patel", type="RCIC", specialization="PNP & Family Sponsorship", rating=4.8, reviews=210, fee=120, image="https://api.dicebear.com/7.x/avataaars/svg?seed=Priya"),
]

TIME_SLOTS = ["10:00 AM", "11:00 AM", "01:00 PM", "02:30 PM", "04:00 PM"]


def partner_dashboard() -> PartnerDashboardOut:
    scores = [lead.score for lead in PARTNER_LEADS]
    return PartnerDashboardOut(
        leads=PARTNER_LEADS,
        total_leads=len(PARTNER_LEADS),
        new_leads=sum(1 for lead in PARTNER_LEADS if lead.status == "New"),
        average_score=round(sum(scores) / len(scores), 1) if scores else 0.0,
        status_counts=dict(Counter(lead.status for lead in PARTNER_LEADS)),
    )


def admin_dashboard() -> AdminDashboardOut:
    return AdminDashboardOut(
        partners=PARTNERS,
        direct_users=DIRECT_USERS,
        revenue=REVENUE,
        total_revenue=sum(point.partners + point.direct for point in REVENUE),
        active_partners=sum(1 for p in PARTNERS if p.status == "Active"),
        direct_applicants=len(DIRECT_USERS),
        partner_clients=sum(p.client_count for p in PARTNERS),
    )


def next_booking_days(today: Optional[date] = None, count: int = 3) -> List[BookingDay]:
    """The ``count`` days after ``today`` (bookings start tomorrow)."""
    today = today or date.today()
    days = []
    for i in range(1, count + 1):
        d = today + timedelta(days=i)
        days.append(BookingDay(day=d.strftime("%a"), day_of_month=d.day, full_date=d))
    return days


def consultants(today: Optional[date] = None) -> ConsultantsOut:
    return ConsultantsOut(
        consultants=[c for c in CONSULTANTS if c.available],
        days=next_booking_days(today),
        time_slots=TIME_SLOTS,
    )
