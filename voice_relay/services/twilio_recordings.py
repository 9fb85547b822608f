"""
Download of finished call recordings from Twilio.
"""

import logging
from typing import Optional

import requests

from voice_relay.config.constants import LOGGER_NAME
from voice_relay.services.errors import RecordingPipelineError

logger = logging.getLogger(LOGGER_NAME)

DOWNLOAD_TIMEOUT = 60  # seconds


def recording_mp3_url(recording_url: str) -> str:
    """Twilio serves a recording as MP3 when ``.mp3`` is appended to its URL."""
    return f"{recording_url}.mp3"


def download_recording(
    recording_url: str,
    auth_token: str,
    account_sid: Optional[str] = None,
    session: requests.Session = None,
) -> bytes:
    """
    Download a recording as MP3 using HTTP Basic auth.

    Args:
        recording_url: RecordingUrl from the status callback (without extension)
        auth_token: Twilio auth token, used as the password
        account_sid: Twilio account SID, used as the username when configured
        session: Optional requests session to send through

    Raises:
        RecordingPipelineError: If Twilio answers with an error status
    """
    http = session or requests
    url = recording_mp3_url(recording_url)
    response = http.get(url, auth=(account_sid or "", auth_token), timeout=DOWNLOAD_TIMEOUT)
    if not response.ok:
        raise RecordingPipelineError("Twilio download", response.status_code, response.text)

    logger.info(f"Downloaded recording ({len(response.content)} bytes)")
    return response.content
