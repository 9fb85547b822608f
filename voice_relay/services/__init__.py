"""
Services module for external API integrations in the voice relay.

Key components:
- openai_client: Transcription and summarization of finished recordings
- twilio_recordings: Authenticated download of recordings from Twilio
- email_service: Call report emails sent through Resend
- recording_store: In-memory store of recordings behind expiring listen tokens
- errors: Exceptions raised by the recording pipeline
"""
