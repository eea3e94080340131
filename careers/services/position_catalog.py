"""Static catalog of open positions shown on the jobs and apply pages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from careers.utils.text import normalize_position


@dataclass(frozen=True)
class Position:
    key: str
    title: str
    posted: str
    description: str
    location: str
    type: str
    salary: str
    experience: str
    benefits: Tuple[str, ...]
    applicants: int
    category: str


_FULL_OR_PART_TIME = "Full-time / Part-time"

POSITIONS: Dict[str, Position] = {
    position.key: position
    for position in (
        Position(
            key="logistics-coordinator",
            title="Logistics Coordinator / Dispatcher",
            posted="one month ago",
            description=(
                "Coordinate and dispatch logistics operations, ensuring timely delivery and efficient "
                "scheduling. Communicate with drivers and clients to resolve issues."
            ),
            location="Bakersfield, CA",
            type=_FULL_OR_PART_TIME,
            salary="$65-80 per hour",
            experience="3-5 years",
            benefits=("Health Insurance", "401(k) Match", "Flexible Schedule"),
            applicants=18,
            category="Logistics",
        ),
        Position(
            key="supply-chain-analyst",
            title="Supply Chain Analyst",
            posted="one month ago",
            description=(
                "Analyze supply chain data, identify trends, and recommend process improvements. Work with "
                "teams to optimize inventory and logistics operations."
            ),
            location="Remote",
            type=_FULL_OR_PART_TIME,
            salary="$75-85 per hour",
            experience="2-4 years",
            benefits=("Health Insurance", "401(k) Match", "Remote Work"),
            applicants=22,
            category="Analytics",
        ),
        Position(
            key="customer-support-client-relations",
            title="Customer Support / Client Relations",
            posted="2 weeks ago",
            description=(
                "Provide outstanding customer service, assist with inquiries, and resolve client issues. "
                "Maintain positive relationships and ensure client satisfaction."
            ),
            location="Remote",
            type=_FULL_OR_PART_TIME,
            salary="$65-80 per hour",
            experience="Entry level",
            benefits=("Health Insurance", "Employee Discounts", "Flexible Schedule"),
            applicants=45,
            category="Customer Service",
        ),
        Position(
            key="hr-recruitment",
            title="HR / Recruitment / Talent Acquisition",
            posted="4 days ago",
            description=(
                "Manage the recruitment process, conduct interviews, and onboard new hires. Develop talent "
                "acquisition strategies and support HR operations."
            ),
            location="Chicago, IL",
            type=_FULL_OR_PART_TIME,
            salary="$75-85 per hour",
            experience="2+ years",
            benefits=("Health Insurance", "401(k) Match", "Professional Development"),
            applicants=14,
            category="Human Resources",
        ),
        Position(
            key="it-software-support",
            title="IT / Software Support",
            posted="three weeks ago",
            description=(
                "Provide technical support for logistics and warehouse software systems. Troubleshoot "
                "issues and assist staff with IT needs."
            ),
            location="Remote",
            type=_FULL_OR_PART_TIME,
            salary="$65-80 per hour",
            experience="1-3 years",
            benefits=("Health Insurance", "401(k) Match", "Remote Work"),
            applicants=11,
            category="IT",
        ),
        Position(
            key="drivers",
            title="Drivers (truck, delivery, fleet)",
            posted="a week ago",
            description=(
                "Deliver goods safely and on time. Maintain vehicle logs, inspect vehicles, and follow "
                "company safety policies. CDL preferred for truck drivers."
            ),
            location="Milwaukee, WI",
            type=_FULL_OR_PART_TIME,
            salary="$45-65 per hour",
            experience="1-2 years",
            benefits=("Health Insurance", "401(k) Match", "Mileage Reimbursement"),
            applicants=32,
            category="Logistics",
        ),
        Position(
            key="warehouse-staff-forklift",
            title="Warehouse Staff & Forklift Operators",
            posted="a week ago",
            description=(
                "Manage inventory, pick/pack orders, and operate forklifts. Ensure a safe and organized "
                "warehouse environment."
            ),
            location="Bakersfield, CA",
            type=_FULL_OR_PART_TIME,
            salary="$35-50 per hour",
            experience="1-2 years",
            benefits=("Health Insurance", "401(k) Match", "Shift Differentials"),
            applicants=28,
            category="Warehouse",
        ),
        Position(
            key="fleet-maintenance-supervisors",
            title="Fleet & Maintenance Supervisors",
            posted="a week ago",
            description=(
                "Supervise fleet maintenance operations, schedule vehicle servicing, and manage "
                "maintenance staff. Ensure compliance with safety standards."
            ),
            location="Bakersfield, CA",
            type=_FULL_OR_PART_TIME,
            salary="$60-70 per hour",
            experience="3-5 years",
            benefits=("Health Insurance", "401(k) Match", "Continuing Education"),
            applicants=12,
            category="Logistics",
        ),
        Position(
            key="virtual-assistance",
            title="Virtual Assistance",
            posted="6 days ago",
            description=(
                "Provide remote administrative support, manage schedules, handle email correspondence, "
                "and assist with day-to-day operations."
            ),
            location="Remote",
            type=_FULL_OR_PART_TIME,
            salary="$35-50 per hour",
            experience="Entry level",
            benefits=("Health Insurance", "401(k) Match", "Remote Work"),
            applicants=38,
            category="Admin",
        ),
        Position(
            key="account-manager",
            title="Account Manager",
            posted="a month ago",
            description=(
                "Oversee client accounts, manage relationships, and coordinate with internal teams to "
                "ensure customer satisfaction."
            ),
            location="Remote",
            type=_FULL_OR_PART_TIME,
            salary="$65-80 per hour",
            experience="2-4 years",
            benefits=("Health Insurance", "401(k) Match", "Flexible Schedule"),
            applicants=17,
            category="Customer Service",
        ),
        Position(
            key="project-manager",
            title="Project Manager",
            posted="two weeks ago",
            description=(
                "Lead logistics and warehouse projects from initiation to completion. Manage teams, track "
                "milestones, and ensure project goals are met."
            ),
            location="Remote",
            type=_FULL_OR_PART_TIME,
            salary="$65-80 per hour",
            experience="3-5 years",
            benefits=("Health Insurance", "401(k) Match", "Professional Development"),
            applicants=15,
            category="Management",
        ),
        Position(
            key="data-entry",
            title="Data Entry",
            posted="a month ago",
            description=(
                "Accurately input logistics and warehouse data into electronic systems. Ensure data "
                "integrity and compliance with regulations."
            ),
            location="Remote",
            type=_FULL_OR_PART_TIME,
            salary="$60-80 per hour",
            experience="Entry level",
            benefits=("Health Insurance", "401(k) Match", "Remote Work"),
            applicants=38,
            category="Admin",
        ),
        Position(
            key="customer-support",
            title="Customer Support",
            posted="6 weeks ago",
            description=(
                "Assist customers with inquiries, process orders, and resolve issues. Provide excellent "
                "service and maintain a positive company image."
            ),
            location="Remote",
            type=_FULL_OR_PART_TIME,
            salary="$60-75 per hour",
            experience="Entry level",
            benefits=("Health Insurance", "Employee Discounts", "Flexible Schedule"),
            applicants=45,
            category="Customer Service",
        ),
    )
}


def list_positions() -> List[Position]:
    """Return every open position in display order."""
    return list(POSITIONS.values())


def get_position(key: str) -> Optional[Position]:
    return POSITIONS.get(key)


def find_by_title(text: Optional[str]) -> Optional[Position]:
    """Match a submitted position string against catalog titles or keys.

    Returns None for free-text positions; those are still accepted by the
    application form.
    """
    normalized = normalize_position(text)
    if not normalized:
        return None
    for position in POSITIONS.values():
        if normalize_position(position.title) == normalized or normalize_position(position.key) == normalized:
            return position
    return None
