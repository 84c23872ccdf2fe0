"""Lead capture: the contact form and the quick consultation request.

Both are validate-and-log only; nothing is persisted and the content store is
never touched.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

from landing.config import settings

logger = logging.getLogger("leads")

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

QUICK_SOURCE = "hero_cta_button"
QUICK_OFFER = "discount_20_percent_today"


class LeadValidationError(ValueError):
    """Raised when lead fields are missing or malformed; ``key`` names the message."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key


def _clean(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ContactLead:
    name: str
    email: str
    phone: str
    company: str = ""
    plan: str = ""
    message: str = ""


@dataclass
class QuickLead:
    phone: str | None
    email: str | None


def validate_contact(
    name: object,
    email: object,
    phone: object,
    company: object = None,
    plan: object = None,
    message: object = None,
) -> ContactLead:
    lead = ContactLead(
        name=_clean(name),
        email=_clean(email),
        phone=_clean(phone),
        company=_clean(company),
        plan=_clean(plan),
        message=_clean(message),
    )
    if not lead.name or not lead.email or not lead.phone:
        raise LeadValidationError("leads.contact.missing_fields")
    if not EMAIL_RE.match(lead.email):
        raise LeadValidationError("leads.invalid_email")
    return lead


def validate_quick(phone: object, email: object) -> QuickLead:
    phone_value = _clean(phone)
    email_value = _clean(email)
    if not phone_value and not email_value:
        raise LeadValidationError("leads.quick.missing_contact")
    if email_value and not EMAIL_RE.match(email_value):
        raise LeadValidationError("leads.invalid_email")
    return QuickLead(phone=phone_value or None, email=email_value or None)


async def submit_contact(lead: ContactLead) -> None:
    logger.info("new contact request: %s", {**asdict(lead), "timestamp": _now()})
    await asyncio.sleep(settings.CONTACT_DELAY_SECONDS)


async def submit_quick(lead: QuickLead) -> None:
    logger.info(
        "quick consultation request: %s",
        {**asdict(lead), "source": QUICK_SOURCE, "timestamp": _now(), "offer": QUICK_OFFER},
    )
    await asyncio.sleep(settings.QUICK_CONSULTATION_DELAY_SECONDS)


__all__ = [
    "ContactLead",
    "LeadValidationError",
    "QuickLead",
    "submit_contact",
    "submit_quick",
    "validate_contact",
    "validate_quick",
]
