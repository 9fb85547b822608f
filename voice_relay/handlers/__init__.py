"""
Handlers module for Twilio communication in the voice relay.

Key components:
- stream_handlers: Telephony side of a call. Parses Media Streams events (start,
  media, stop), writes synthesized audio back to the call and clears playback on
  barge-in.
- recording_handlers: Builds the TwiML answering a call and processes finished
  recordings (download, transcribe, summarize, store, email).
"""
