"""
Call report email sent through the Resend API.
"""

import logging
from typing import Dict

import resend

from voice_relay.config.constants import LOGGER_NAME
from voice_relay.config.settings import Settings

logger = logging.getLogger(LOGGER_NAME)


def build_email_body(
    business_name: str,
    listen_link: str,
    summary: str,
    transcript: str,
    metadata: Dict[str, str],
) -> str:
    """Render the plain-text body of a call report."""
    body = f"""
{business_name} - Call processed

Listen:
{listen_link}

Recording meta:
- RecordingSid: {metadata.get("RecordingSid") or ""}
- CallSid: {metadata.get("CallSid") or ""}
- Duration: {metadata.get("RecordingDuration") or ""} seconds

Summary:
{summary}

Transcript:
{transcript}
"""
    return body.strip()


def send_call_report(
    settings: Settings,
    subject: str,
    summary: str,
    transcript: str,
    listen_link: str,
    metadata: Dict[str, str],
) -> bool:
    """
    Email a call report to the configured recipient.

    Returns:
        bool: False if email is not configured and nothing was sent
    """
    if not settings.email_configured:
        logger.info("Email not configured (RESEND_API_KEY / EMAIL_FROM / EMAIL_TO missing). Skipping email.")
        return False

    resend.api_key = settings.resend_api_key
    response = resend.Emails.send({
        "from": settings.email_from,
        "to": [settings.email_to],
        "subject": subject,
        "text": build_email_body(settings.business_name, listen_link, summary, transcript, metadata),
    })
    logger.info(f"Call report email sent: {response.get('id') if isinstance(response, dict) else response}")
    return True
