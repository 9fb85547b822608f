"""
Bot module for relaying Twilio media streams to the OpenAI Realtime API.

This module provides the per-call components of the relay.

Key components:
- RealtimeSession: Client for one OpenAI Realtime API conversation; configures the
  session, forwards caller audio once configured and interprets provider events.
- TurnTakingController: Decides when to greet, commit caller audio, request a reply
  and cancel a reply the caller talks over.
- CallBridge: Creates and wires the above for one call and tears both connections
  down when the call ends.

Usage examples:
```python
from voice_relay.bot import CallBridge
from voice_relay.config.settings import get_settings

async def handle_call(websocket):
    bridge = CallBridge(websocket, get_settings())
    if not await bridge.start():
        return
    try:
        while not bridge.closed:
            await bridge.handle_telephony_message(await websocket.receive_text())
    finally:
        await bridge.cleanup()
```
"""

from voice_relay.bot.call_bridge import CallBridge
from voice_relay.bot.realtime_api import RealtimeSession
from voice_relay.bot.turn_taking import TurnTakingController

__all__ = ["CallBridge", "RealtimeSession", "TurnTakingController"]
