"""Contact form endpoint - validates and relays website enquiries."""

import logging
import re
import time
import uuid

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import settings as app_settings
from app.effects import ActionResult, run_actions
from app.errors import ApiError
from app.integrations import Integrations, get_integrations
from app.providers import EmailMessage
from app.timeutil import iso_timestamp

router = APIRouter()
logger = logging.getLogger(__name__)

# Deliberately permissive: local@domain.tld, no whitespace, one @
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Max-Age": "86400",
}


class ContactSubmission(BaseModel):
    name: str
    email: str
    company: str
    employees: str = ""
    phone: str = ""
    message: str


class StoredSubmission(ContactSubmission):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    timestamp: str
    ip: str | None = None
    user_agent: str | None = None


def validate_submission(submission: ContactSubmission) -> None:
    """Raise ApiError(400) for missing required fields or a bad email."""
    required = (submission.name, submission.email, submission.company, submission.message)
    if not all(required):
        raise ApiError(400, "Required fields missing")
    if not EMAIL_PATTERN.match(submission.email):
        raise ApiError(400, "Invalid email format")


def submission_key() -> str:
    return f"contact_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def _client_ip(request: Request, header: str) -> str | None:
    forwarded = request.headers.get(header) if header else None
    if forwarded:
        return forwarded
    return request.client.host if request.client else None


def rate_limit_key(request: Request) -> str:
    """Bucket per visitor: the proxy-supplied client IP, else the socket peer."""
    return _client_ip(request, app_settings.client_ip_header) or get_remote_address(request)


limiter = Limiter(key_func=rate_limit_key)


def _email_text(submission: ContactSubmission, submitted_at: str) -> str:
    return "\n".join(
        [
            "New Contact Form Submission",
            "",
            f"Name: {submission.name}",
            f"Email: {submission.email}",
            f"Company: {submission.company}",
            f"Employees: {submission.employees or 'Not specified'}",
            f"Phone: {submission.phone or 'Not provided'}",
            "",
            "Message:",
            submission.message,
            "",
            f"Submitted: {submitted_at}",
        ]
    )


async def relay_submission(
    submission: ContactSubmission,
    integrations: Integrations,
    ip: str | None,
    user_agent: str | None,
) -> list[ActionResult]:
    """Email and/or store a validated submission; failures are only logged."""
    settings = integrations.settings
    submitted_at = iso_timestamp()

    actions = {}
    if integrations.email:
        actions["notify"] = integrations.email.send(
            EmailMessage(
                to=settings.contact_email,
                sender=settings.contact_from_email,
                subject=f"New Contact: {submission.name} from {submission.company}",
                text=_email_text(submission, submitted_at),
                reply_to=submission.email,
            )
        )
    if integrations.contacts:
        record = StoredSubmission(
            **submission.model_dump(), timestamp=submitted_at, ip=ip, user_agent=user_agent
        )
        actions["store"] = integrations.contacts.put(submission_key(), record.model_dump(by_alias=True))
    return await run_actions(actions)


@router.post("/contact")
@limiter.limit(app_settings.contact_rate_limit)
async def submit_contact(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    company: str = Form(""),
    employees: str = Form(""),
    phone: str = Form(""),
    message: str = Form(""),
    integrations: Integrations = Depends(get_integrations),
):
    """Accept a contact form post."""
    submission = ContactSubmission(
        name=name,
        email=email,
        company=company,
        employees=employees,
        phone=phone,
        message=message,
    )
    validate_submission(submission)

    try:
        results = await relay_submission(
            submission,
            integrations,
            ip=_client_ip(request, integrations.settings.client_ip_header),
            user_agent=request.headers.get("user-agent"),
        )
    except Exception:
        logger.exception("Contact form error")
        raise ApiError(500, "Internal server error")

    failed = [r.action for r in results if not r.ok]
    if failed:
        logger.warning("Contact submission accepted with failed actions: %s", failed)

    return JSONResponse(
        {"success": True, "message": "Contact form submitted successfully"},
        headers={"Access-Control-Allow-Origin": "*"},
    )


@router.options("/contact")
async def contact_preflight():
    return Response(status_code=200, headers=PREFLIGHT_HEADERS)
