"""
FastAPI server relaying Twilio phone calls to the OpenAI Realtime API.

This module initializes and configures the FastAPI application that serves as
the Twilio voice webhook, the Media Streams WebSocket endpoint, and the recording
status callback whose results are emailed with a private listen link.
"""

import asyncio
import contextlib
import os
import secrets
from pathlib import Path

import dotenv
from fastapi import BackgroundTasks, Depends, FastAPI, Request, WebSocket
from fastapi.responses import PlainTextResponse, Response

from voice_relay.config.logging_config import configure_logging
from voice_relay.config.settings import Settings, get_settings
from voice_relay.handlers.recording_handlers import build_voice_twiml, process_recording
from voice_relay.models.message_schemas import RecordingStatusCallback
from voice_relay.services.recording_store import RecordingStore, run_periodic_sweep
from voice_relay.websocket_manager import MediaStreamManager

# Load environment variables from .env file if it exists
env_path = Path(".") / ".env"
if env_path.exists():
    dotenv.load_dotenv(env_path)

logger = configure_logging()

PORT = int(os.getenv("PORT", "3000"))
HOST = os.getenv("HOST", "0.0.0.0")

media_stream_manager = MediaStreamManager()
recording_store = RecordingStore()


def get_recording_store() -> RecordingStore:
    return recording_store


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    sweeper = asyncio.create_task(run_periodic_sweep(recording_store))
    try:
        yield
    finally:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper


app = FastAPI(
    title="Voice Relay",
    description="Relay between Twilio Media Streams and the OpenAI Realtime API",
    version="1.0.0",
    lifespan=lifespan,
)


@app.websocket("/media")
async def media_stream_endpoint(websocket: WebSocket):
    """WebSocket endpoint for Twilio Media Streams.

    Each connection is one phone call: caller audio is relayed to the OpenAI
    Realtime API and synthesized audio is streamed back until either side hangs up.
    """
    await media_stream_manager.handle_websocket(websocket)


@app.post("/voice")
async def voice_webhook(request: Request, settings: Settings = Depends(get_settings)):
    """Answer an inbound call with TwiML that records it and opens the media stream."""
    if not settings.public_base_url:
        return PlainTextResponse("Missing PUBLIC_BASE_URL env var.", status_code=500)
    if not settings.recording_webhook_secret:
        return PlainTextResponse("Missing RECORDING_WEBHOOK_SECRET env var.", status_code=500)

    host = request.headers.get("host") or request.url.netloc
    return Response(content=build_voice_twiml(settings, host), media_type="text/xml")


@app.post("/recording-status")
async def recording_status_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
    store: RecordingStore = Depends(get_recording_store),
):
    """Acknowledge a recording status callback and process the recording in the background."""
    secret = request.query_params.get("secret") or ""
    expected = settings.recording_webhook_secret
    if not expected or not secrets.compare_digest(secret.encode(), expected.encode()):
        return PlainTextResponse("Forbidden", status_code=403)

    form = await request.form()
    callback = RecordingStatusCallback(**{key: value for key, value in form.items() if isinstance(value, str)})
    background_tasks.add_task(process_recording, callback, settings, store)
    return PlainTextResponse("OK")


@app.get("/listen/{token}")
async def listen(token: str, store: RecordingStore = Depends(get_recording_store)):
    """Serve a stored recording as MP3."""
    item = store.get(token)
    if item is None:
        return PlainTextResponse("Not found (expired or invalid).", status_code=404)
    return Response(
        content=item.audio,
        media_type="audio/mpeg",
        headers={"Content-Disposition": 'inline; filename="call.mp3"'},
    )


@app.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """Health check endpoint for monitoring system status.

    Returns:
        dict: Status, whether the OpenAI API key is configured and the number of active calls
    """
    return {
        "status": "healthy",
        "openai_api_key_configured": bool(settings.openai_api_key),
        "active_calls": len(media_stream_manager.active_calls),
        "stored_recordings": len(recording_store),
    }


@app.get("/")
async def root():
    """Root endpoint to display basic information about the API."""
    return {
        "name": "Voice Relay",
        "description": "Relay between Twilio Media Streams and the OpenAI Realtime API",
        "version": "1.0.0",
        "endpoints": {
            "/voice": "Twilio voice webhook (TwiML)",
            "/media": "WebSocket endpoint for Twilio Media Streams",
            "/recording-status": "Twilio recording status callback",
            "/listen/{token}": "Private recording playback",
            "/health": "Health check endpoint",
        },
    }


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server on http://{HOST}:{PORT}")
    uvicorn.run(
        app,
        host=HOST,
        port=PORT,
        ws_ping_interval=20,
        ws_ping_timeout=20,
        http="h11",
    )
