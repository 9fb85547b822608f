"""
Handles the Twilio voice webhook and the recording status callback.

The voice webhook answers an inbound call with TwiML that starts a dual-channel
recording and connects the call audio to the relay WebSocket. When the recording
is complete, Twilio calls back; the recording is then downloaded, transcribed,
summarized, stored behind a private listen link and emailed.
"""

import logging
from html import escape
from urllib.parse import quote

import requests

from voice_relay.config.constants import LOGGER_NAME
from voice_relay.config.settings import Settings
from voice_relay.models.message_schemas import RecordingStatusCallback
from voice_relay.services.email_service import send_call_report
from voice_relay.services.errors import RecordingPipelineError
from voice_relay.services.openai_client import summarize_transcript, transcribe_mp3
from voice_relay.services.recording_store import RecordingStore
from voice_relay.services.twilio_recordings import download_recording

logger = logging.getLogger(LOGGER_NAME)

MEDIA_STREAM_PATH = "/media"


def build_voice_twiml(settings: Settings, host: str) -> str:
    """
    Build the TwiML answering an inbound call.

    Args:
        settings: Must carry public_base_url and recording_webhook_secret
        host: Host the media stream WebSocket is reachable on

    Returns:
        str: TwiML document
    """
    callback_url = (
        f"{settings.public_base_url.rstrip('/')}/recording-status"
        f"?secret={quote(settings.recording_webhook_secret, safe='')}"
    )
    stream_url = f"wss://{host}{MEDIA_STREAM_PATH}"

    return f"""<?xml version="1.0" encoding="UTF-8"?>
<Response>
  <Start>
    <Recording
      channels="dual"
      recordingStatusCallback="{escape(callback_url)}"
      recordingStatusCallbackEvent="completed"
    />
  </Start>
  <Connect>
    <Stream url="{escape(stream_url)}"/>
  </Connect>
</Response>"""


def process_recording(
    callback: RecordingStatusCallback,
    settings: Settings,
    store: RecordingStore,
) -> None:
    """
    Download, transcribe, summarize, store and email a finished recording.

    Runs as a background task after the webhook has been acknowledged, so
    failures are logged rather than raised.
    """
    if not callback.is_complete:
        return

    logger.info(
        f"Recording completed: {callback.RecordingSid} duration: {callback.RecordingDuration}"
    )

    if not settings.twilio_auth_token:
        logger.warning("Missing TWILIO_AUTH_TOKEN; cannot download recording.")
        return
    if not settings.openai_api_key:
        logger.warning("Missing OPENAI_API_KEY; cannot transcribe recording.")
        return

    metadata = {
        "CallSid": callback.CallSid or "",
        "RecordingSid": callback.RecordingSid or "",
        "RecordingDuration": callback.RecordingDuration or "",
    }

    try:
        audio = download_recording(
            callback.RecordingUrl,
            settings.twilio_auth_token,
            account_sid=settings.twilio_account_sid,
        )
        transcript = transcribe_mp3(audio, settings.openai_api_key)
        summary = summarize_transcript(transcript, settings.openai_api_key)

        token = store.put(audio, metadata)
        listen_link = f"{(settings.public_base_url or '').rstrip('/')}/listen/{token}"

        sent = send_call_report(
            settings,
            subject=f"Call Recording + Transcript ({callback.RecordingDuration or '?'}s)",
            summary=summary,
            transcript=transcript,
            listen_link=listen_link,
            metadata=metadata,
        )
        if sent:
            logger.info(f"Email sent for RecordingSid: {callback.RecordingSid}")
    except (RecordingPipelineError, requests.RequestException) as e:
        logger.error(f"Recording pipeline failed for {callback.RecordingSid}: {e}")
    except Exception as e:
        logger.error(f"Unexpected error processing recording {callback.RecordingSid}: {e}", exc_info=True)
