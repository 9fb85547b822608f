"""
Voice Relay - Twilio Media Streams to OpenAI Realtime API Bridge

This application answers phone calls with a real-time, speech-to-speech voice agent.
Twilio streams the caller's audio over a WebSocket; the application relays it to
OpenAI's Realtime API and streams the synthesized reply back onto the call.

Architecture Overview:
- FastAPI server exposing the Twilio voice webhook and the Media Streams WebSocket
- OpenAI Realtime API integration with server-side voice activity detection
- Turn taking: greeting, commit/response on end of speech, barge-in on caller speech
- Recording pipeline: each call is recorded, transcribed, summarized and emailed
  together with a private, expiring listen link

Key Components:
- bot: Per-call relay components (Realtime session, turn taking, call bridge)
- config: Application-wide configuration, constants, and logging setup
- handlers: Telephony stream handling and recording webhooks
- models: Message schemas, per-call state and frame relay buffers
- services: Clients for OpenAI, Twilio and Resend, and the recording store
- websocket_manager: Central handler for Media Streams WebSocket connections

Getting Started:
1. Set up environment variables:
   - OPENAI_API_KEY: Your OpenAI API key
   - PUBLIC_BASE_URL: Public HTTPS base URL of this server
   - RECORDING_WEBHOOK_SECRET: Shared secret for the recording callback
   - TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN: To download recordings
   - RESEND_API_KEY / EMAIL_FROM / EMAIL_TO: To email call reports

2. Start the server:
   ```bash
   python run.py
   ```

3. Point the Twilio phone number's voice webhook to https://your-server/voice
"""
