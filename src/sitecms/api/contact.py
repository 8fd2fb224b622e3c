# src/sitecms/api/contact.py
import logging

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from src.sitecms.core.email import EmailService, get_email_service
from src.sitecms.core.exceptions import EmailDeliveryError
from src.sitecms.schemas.contact import ContactRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contact", tags=["contact"])


@router.post("/send")
async def send_contact_message(
    body: ContactRequest,
    email_service: EmailService = Depends(get_email_service),
):
    try:
        await run_in_threadpool(email_service.send_contact_email, body.name, body.email, body.message)
    except Exception as e:
        logger.error("Error in contact endpoint: %s", e)
        raise EmailDeliveryError() from e

    logger.info("Contact email received from %s (%s)", body.name, body.email)
    return {"success": True, "message": "Your message has been sent successfully"}
