from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from landing import leads
from landing.i18n import gettext
from landing.routers.deps import request_locale

logger = logging.getLogger("leads")

router = APIRouter(prefix="/api", tags=["leads"])


class ContactRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    plan: str | None = None
    message: str | None = None
    lang: str | None = None


class QuickConsultationRequest(BaseModel):
    phone: str | None = None
    email: str | None = None
    lang: str | None = None


def _error(message: str, status: int) -> JSONResponse:
    return JSONResponse(status_code=status, content={"success": False, "error": message})


@router.post("/contact")
async def contact(payload: ContactRequest, request: Request) -> JSONResponse:
    locale = request_locale(request, payload.lang)
    try:
        lead = leads.validate_contact(
            payload.name,
            payload.email,
            payload.phone,
            payload.company,
            payload.plan,
            payload.message,
        )
    except leads.LeadValidationError as exc:
        return _error(gettext(exc.key, locale), 400)

    try:
        await leads.submit_contact(lead)
    except Exception:  # noqa: BLE001 - report failure to the visitor
        logger.exception("contact request failed")
        return _error(gettext("leads.failed", locale), 500)
    return JSONResponse({"success": True, "message": gettext("leads.contact.success", locale)})


@router.post("/quick-consultation")
async def quick_consultation(payload: QuickConsultationRequest, request: Request) -> JSONResponse:
    locale = request_locale(request, payload.lang)
    try:
        lead = leads.validate_quick(payload.phone, payload.email)
    except leads.LeadValidationError as exc:
        return _error(gettext(exc.key, locale), 400)

    try:
        await leads.submit_quick(lead)
    except Exception:  # noqa: BLE001 - report failure to the visitor
        logger.exception("quick consultation request failed")
        return _error(gettext("leads.failed", locale), 500)
    return JSONResponse({"success": True, "message": gettext("leads.quick.success", locale)})
