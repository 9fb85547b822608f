"""
HTTP client for the OpenAI endpoints used after a call: audio transcription
and transcript summarization.
"""

import logging

import requests

from voice_relay.bot.prompts import build_summary_prompt
from voice_relay.config.constants import (
    CHAT_COMPLETIONS_API_URL,
    DEFAULT_SUMMARY_MODEL,
    DEFAULT_TRANSCRIPTION_MODEL,
    LOGGER_NAME,
    TRANSCRIPTION_API_URL,
)
from voice_relay.services.errors import RecordingPipelineError

logger = logging.getLogger(LOGGER_NAME)

REQUEST_TIMEOUT = 120  # seconds; long recordings take a while to transcribe


def transcribe_mp3(
    audio: bytes,
    api_key: str,
    model: str = DEFAULT_TRANSCRIPTION_MODEL,
    session: requests.Session = None,
) -> str:
    """
    Transcribe an MP3 recording.

    Args:
        audio: MP3 bytes
        api_key: OpenAI API key
        model: Transcription model
        session: Optional requests session to send through

    Returns:
        str: The transcript text, stripped

    Raises:
        RecordingPipelineError: If the API answers with an error status
    """
    http = session or requests
    response = http.post(
        TRANSCRIPTION_API_URL,
        headers={"Authorization": f"Bearer {api_key}"},
        files={"file": ("call.mp3", audio, "audio/mpeg")},
        data={"model": model},
        timeout=REQUEST_TIMEOUT,
    )
    if not response.ok:
        raise RecordingPipelineError("OpenAI transcription", response.status_code, response.text)

    transcript = (response.json().get("text") or "").strip()
    logger.info(f"Transcribed recording: {len(transcript)} characters")
    return transcript


def summarize_transcript(
    transcript: str,
    api_key: str,
    model: str = DEFAULT_SUMMARY_MODEL,
    session: requests.Session = None,
) -> str:
    """
    Summarize a call transcript into bullets, action items and key details.

    Raises:
        RecordingPipelineError: If the API answers with an error status
    """
    http = session or requests
    response = http.post(
        CHAT_COMPLETIONS_API_URL,
        headers={
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        },
        json={
            "model": model,
            "messages": [{"role": "user", "content": build_summary_prompt(transcript)}],
            "temperature": 0.2,
            "max_tokens": 500,
        },
        timeout=REQUEST_TIMEOUT,
    )
    if not response.ok:
        raise RecordingPipelineError("OpenAI summarize", response.status_code, response.text)

    choices = response.json().get("choices") or [{}]
    content = (choices[0].get("message") or {}).get("content") or ""
    return content.strip()
