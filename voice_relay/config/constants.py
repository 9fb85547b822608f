"""
Constants and configuration values used throughout the application.

This module defines constants that are used across different parts of the application,
providing a centralized location for protocol names, audio timing values and default
model settings so that the telephony and provider sides agree on them.
"""

# Logger name used throughout the application
LOGGER_NAME = "voice_relay"

# Default OpenAI models
DEFAULT_REALTIME_MODEL = "gpt-4o-realtime-preview-2024-12-17"
DEFAULT_TRANSCRIPTION_MODEL = "gpt-4o-mini-transcribe"
DEFAULT_SUMMARY_MODEL = "gpt-4o-mini"
DEFAULT_VOICE = "alloy"

# OpenAI endpoints
REALTIME_API_URL = "wss://api.openai.com/v1/realtime"
TRANSCRIPTION_API_URL = "https://api.openai.com/v1/audio/transcriptions"
CHAT_COMPLETIONS_API_URL = "https://api.openai.com/v1/chat/completions"

# Audio format constants (8 kHz G.711 mu-law on both legs)
AUDIO_FORMAT_G711_ULAW = "g711_ulaw"
FRAME_DURATION_MS = 20  # Twilio media frames carry 20 ms of audio

# Turn-taking thresholds
MIN_COMMIT_AUDIO_MS = 100  # provider rejects commits on a near-empty buffer
SPEECH_STOP_DEBOUNCE_SECONDS = 0.4

# Frame relay buffer capacities
MAX_INBOUND_FRAMES = 200
MAX_OUTBOUND_FRAMES = 300

# Telephony (Twilio Media Streams) event names
TELEPHONY_EVENT_START = "start"
TELEPHONY_EVENT_MEDIA = "media"
TELEPHONY_EVENT_STOP = "stop"
TELEPHONY_EVENT_CLEAR = "clear"

# Realtime API client directives
REALTIME_SESSION_UPDATE = "session.update"
REALTIME_RESPONSE_CREATE = "response.create"
REALTIME_RESPONSE_CANCEL = "response.cancel"
REALTIME_INPUT_AUDIO_APPEND = "input_audio_buffer.append"
REALTIME_INPUT_AUDIO_COMMIT = "input_audio_buffer.commit"

# Realtime API server events
REALTIME_AUDIO_DELTA = "response.audio.delta"
REALTIME_OUTPUT_AUDIO_DELTA = "response.output_audio.delta"
REALTIME_RESPONSE_CREATED = "response.created"
REALTIME_RESPONSE_DONE = "response.done"
REALTIME_SPEECH_STARTED = "input_audio_buffer.speech_started"
REALTIME_SPEECH_STOPPED = "input_audio_buffer.speech_stopped"
REALTIME_ERROR = "error"

# Recording store
RECORDING_TTL_SECONDS = 7 * 24 * 60 * 60  # 7 days
RECORDING_SWEEP_INTERVAL_SECONDS = 60 * 60  # 1 hour
