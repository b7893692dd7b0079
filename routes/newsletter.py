import csv
import io
import logging
import secrets
import uuid
from datetime import timedelta

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from config.database import SessionDep
from config.settings import Settings, get_settings
from models.newsletter_subscriber import NewsletterSubscriber, default_preferences
from schemas.newsletter import SubscribeRequest
from utils.clock import utcnow
from utils.mailer import Mailer, get_mailer
from utils.rate_limit import client_ip
from utils.sanitize import sanitize_input
from validation.subscriber_error import SubscriberError, _validate_subscriber

logger = logging.getLogger(__name__)

newsletter_router = APIRouter(prefix="/api", tags=["newsletter"])

TOKEN_LIFETIME = timedelta(days=30)


@newsletter_router.post("/newsletter/subscribe")
async def subscribe(
    request: Request,
    session: SessionDep,
    mailer: Mailer | None = Depends(get_mailer),
):
    result = request.app.state.api_limiter.check(
        f"{client_ip(request)}:newsletter-subscribe"
    )
    if not result.allowed:
        return JSONResponse(
            {"error": "Too many requests", "retryAfter": result.retry_after()},
            status_code=429,
            headers={**result.headers(), "Retry-After": str(result.retry_after())},
        )

    try:
        body = SubscribeRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        return JSONResponse(
            {"error": "Please provide a valid email address"}, status_code=400
        )

    email = sanitize_input(body.email)
    name = sanitize_input(body.name) if body.name else ""

    try:
        _validate_subscriber(email, name)
    except SubscriberError as e:
        logger.info(f"Rejected subscription for {email!r}: {e.errors}")
        return JSONResponse({"error": e.first_message}, status_code=400)

    try:
        subscriber = session.exec(
            select(NewsletterSubscriber).where(NewsletterSubscriber.email == email)
        ).first()

        if subscriber and subscriber.is_subscribed:
            return JSONResponse(
                {"error": "You are already subscribed to our newsletter"},
                status_code=400,
            )

        now = utcnow()
        unsubscribe_token = str(uuid.uuid4())
        preferences_token = str(uuid.uuid4())

        if subscriber is None:
            subscriber = NewsletterSubscriber(email=email, subscription_count=1)
        else:
            subscriber.subscription_count = (subscriber.subscription_count or 0) + 1

        subscriber.name = name
        subscriber.is_subscribed = True
        subscriber.unsubscribe_token = unsubscribe_token
        subscriber.preferences_token = preferences_token
        subscriber.unsubscribe_token_expires_at = now + TOKEN_LIFETIME
        subscriber.preferences_token_expires_at = now + TOKEN_LIFETIME
        subscriber.preferences = default_preferences()
        subscriber.last_updated_at = now

        session.add(subscriber)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error upserting subscriber: {e}")
        return JSONResponse(
            {"error": "Failed to subscribe to newsletter"}, status_code=500
        )

    if mailer is None:
        logger.warning("Mail is not configured, welcome email skipped")
    else:
        try:
            await mailer.send_welcome_email(
                email, name, unsubscribe_token, preferences_token
            )
            await mailer.send_admin_notification(email, name)
        except Exception:
            logger.exception(f"Error sending newsletter emails to {email}")
            return JSONResponse({"error": "Internal server error"}, status_code=500)

    return {"message": "Successfully subscribed to newsletter"}


def require_admin_key(
    settings: Settings = Depends(get_settings),
    x_admin_key: str | None = Header(default=None),
):
    if not settings.admin_api_key:
        raise HTTPException(status_code=503, detail="Export is not configured")
    if not x_admin_key or not secrets.compare_digest(
        x_admin_key, settings.admin_api_key
    ):
        raise HTTPException(status_code=401, detail="Invalid admin key")


@newsletter_router.get(
    "/subscribers/export", dependencies=[Depends(require_admin_key)]
)
def export_subscribers(session: SessionDep):
    """CSV of all subscribers, newest first"""
    subscribers = session.exec(
        select(NewsletterSubscriber).order_by(NewsletterSubscriber.created_at.desc())
    ).all()

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(["Email", "Name", "Subscribed At"])
    for subscriber in subscribers:
        writer.writerow(
            [subscriber.email, subscriber.name, subscriber.created_at.isoformat()]
        )

    buffer.seek(0)
    return StreamingResponse(
        iter([buffer.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=subscribers.csv"},
    )
