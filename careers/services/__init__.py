"""Service layer modules for the CoreCrew careers site."""

from . import (
    application_service,
    contact_service,
    draft_service,
    idme_service,
    mail_service,
    notification_service,
    position_catalog,
    question_bank,
    wizard,
)

__all__ = [
    "application_service",
    "contact_service",
    "draft_service",
    "idme_service",
    "mail_service",
    "notification_service",
    "position_catalog",
    "question_bank",
    "wizard",
]
