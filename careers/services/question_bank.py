"""Interview questions keyed by normalized position name.

The mapping below is deliberately incomplete: Supply Chain Analyst, HR /
Recruitment, Fleet & Maintenance Supervisors, Account Manager, Project Manager
and Customer Support have no dedicated set and fall through to
``DEFAULT_QUESTIONS``. Add an entry here to give a position its own set; the
lookup itself should not guess.
"""

from __future__ import annotations

from typing import Dict, NamedTuple, Tuple

from careers.utils.text import normalize_position


class Question(NamedTuple):
    key: str
    prompt: str


QuestionSet = Tuple[Question, ...]


DEFAULT_QUESTIONS: QuestionSet = (
    Question("motivation", "Why are you interested in joining CoreCrew Logistics?"),
    Question("experience", "Describe your most relevant work experience for this role."),
    Question("availability", "What days and hours are you available to work?"),
    Question("strengths", "What strengths would you bring to our team?"),
    Question("start_date", "When would you be able to start?"),
)

QUESTION_BANK: Dict[str, QuestionSet] = {
    "logistics coordinator dispatcher": (
        Question("dispatch_experience", "How many years have you worked in dispatch or logistics coordination?"),
        Question("dispatch_software", "Which dispatch, TMS, or routing software have you used?"),
        Question("delay_handling", "A driver reports a two-hour delay on a priority load. What do you do first?"),
        Question("multitasking", "How do you keep track of many simultaneous shipments?"),
        Question("availability", "What days and hours are you available to work?"),
    ),
    "customer support client relations": (
        Question("support_experience", "Describe your experience in customer-facing support roles."),
        Question("difficult_customer", "Tell us about a time you turned around an unhappy client."),
        Question("support_tools", "Which ticketing or CRM tools have you used?"),
        Question("response_time", "How do you prioritize when several customers need help at once?"),
        Question("availability", "What days and hours are you available to work?"),
    ),
    "it software support": (
        Question("support_experience", "Describe your help-desk or technical support experience."),
        Question("systems", "Which operating systems and business applications are you comfortable supporting?"),
        Question("troubleshooting", "Walk us through how you troubleshoot a user who cannot log in."),
        Question("remote_tools", "Which remote support tools have you used?"),
        Question("certifications", "List any IT certifications you hold."),
        Question("availability", "What days and hours are you available to work?"),
    ),
    "drivers (truck, delivery, fleet)": (
        Question("license_class", "What class of driver's license do you hold (e.g. CDL-A, CDL-B, Class C)?"),
        Question("driving_experience", "How many years of professional driving experience do you have?"),
        Question("driving_record", "Have you had any moving violations or accidents in the past three years?"),
        Question("vehicle_types", "Which vehicle types have you operated?"),
        Question("overnight_routes", "Are you willing to take overnight or multi-day routes?"),
        Question("availability", "What days and hours are you available to work?"),
    ),
    "warehouse staff forklift operators": (
        Question("forklift_certified", "Do you hold a current forklift certification? If so, which equipment?"),
        Question("warehouse_experience", "How many years have you worked in a warehouse environment?"),
        Question("lifting", "Are you able to lift 50 lbs and stand for long periods?"),
        Question("safety", "Describe a time you identified and resolved a safety hazard."),
        Question("shifts", "Which shifts (day, night, weekend) can you work?"),
        Question("inventory_systems", "Which inventory or WMS systems have you used?"),
    ),
    "virtual assistance": (
        Question("assistant_experience", "Describe your experience providing administrative or virtual support."),
        Question("tools", "Which calendar, email, and office tools do you use daily?"),
        Question("workspace", "Describe your home workspace and internet connection."),
        Question("time_zone", "Which time zone do you work in, and what hours can you cover?"),
        Question("confidentiality", "How do you handle confidential information?"),
    ),
    "data entry": (
        Question("typing_speed", "What is your typing speed (words per minute) and accuracy?"),
        Question("data_tools", "Which spreadsheet or data entry systems have you used?"),
        Question("accuracy", "How do you check your work for errors?"),
        Question("volume", "Describe the largest volume of records you have processed in a day."),
        Question("availability", "What days and hours are you available to work?"),
    ),
}


def questions_for(normalized_position: str) -> QuestionSet:
    """Return the question set for an already normalized position name."""
    return QUESTION_BANK.get(normalized_position, DEFAULT_QUESTIONS)


def questions_for_position(position: str) -> QuestionSet:
    """Normalize a raw position string and look up its question set."""
    return questions_for(normalize_position(position))
