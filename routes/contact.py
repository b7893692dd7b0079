import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from config.database import ContactSessionDep
from models.contact_message import ContactMessage
from schemas.contact import ContactForm
from utils.mailer import Mailer, get_mailer
from utils.rate_limit import client_ip
from utils.sanitize import (
    sanitize_email,
    sanitize_html,
    sanitize_subject,
    sanitize_text,
)
from validation.subscriber_error import is_valid_email

logger = logging.getLogger(__name__)

contact_router = APIRouter(prefix="/api/contact", tags=["contact"])


@contact_router.post("")
async def submit_contact_form(
    request: Request,
    session: ContactSessionDep,
    mailer: Mailer | None = Depends(get_mailer),
):
    """Store a contact message and forward it to the site owner"""
    limiter = request.app.state.contact_limiter
    result = limiter.check(client_ip(request))
    rate_headers = result.headers()

    if not result.allowed:
        return JSONResponse(
            {
                "error": "Too many requests. Please try again later.",
                "limit": result.limit,
                "reset": int(result.reset_time),
                "remaining": result.remaining,
            },
            status_code=429,
            headers={**rate_headers, "Retry-After": str(result.retry_after())},
        )

    try:
        form = ContactForm.model_validate(await request.json())
    except (ValueError, ValidationError):
        # json.JSONDecodeError is a ValueError too
        return JSONResponse({"error": "All fields are required"}, status_code=400)

    if not form.is_complete():
        return JSONResponse({"error": "All fields are required"}, status_code=400)

    email = sanitize_email(form.email.strip())
    if not is_valid_email(email):
        return JSONResponse({"error": "Invalid email format"}, status_code=400)

    name = sanitize_text(form.name.strip())
    subject = sanitize_subject(form.subject.strip())
    message = sanitize_html(form.message)

    try:
        session.add(
            ContactMessage(name=name, email=email, subject=subject, message=message)
        )
        session.commit()

        if mailer is None:
            logger.warning("Mail is not configured, contact notification skipped")
        else:
            await mailer.send_contact_email(name, email, subject, message)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error saving contact message: {e}")
        return JSONResponse({"error": "Failed to send message"}, status_code=500)
    except Exception:
        logger.exception("Error sending contact notification")
        return JSONResponse({"error": "Failed to send message"}, status_code=500)

    return JSONResponse(
        {
            "message": "Message sent successfully",
            "limit": result.limit,
            "reset": int(result.reset_time),
            "remaining": result.remaining,
        },
        status_code=201,
        headers=rate_headers,
    )
