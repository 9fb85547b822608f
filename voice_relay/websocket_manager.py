"""
WebSocket connection manager for Twilio Media Streams.

This module implements the server side of the relay endpoint, providing the
infrastructure to:
- Accept the telephony WebSocket connection of every call
- Create a CallBridge for it and pump incoming messages into the bridge
- Keep a registry of active calls for health reporting
- Guarantee teardown when the telephony side disconnects or fails
"""

import logging
from typing import Callable, Dict

from fastapi import WebSocket, WebSocketDisconnect

from voice_relay.bot.call_bridge import CallBridge
from voice_relay.config.constants import LOGGER_NAME
from voice_relay.config.settings import Settings, get_settings

logger = logging.getLogger(LOGGER_NAME)


class MediaStreamManager:
    """Accepts media stream connections and runs one CallBridge per connection.

    Args:
        settings_provider: Returns the settings to use for a new call
    """

    def __init__(self, settings_provider: Callable[[], Settings] = get_settings):
        self.settings_provider = settings_provider
        self.active_calls: Dict[str, CallBridge] = {}

    async def handle_websocket(self, websocket: WebSocket) -> None:
        """Handle a telephony WebSocket connection throughout its lifecycle.

        Args:
            websocket: The FastAPI WebSocket connection object

        The connection stays open until Twilio sends stop, either side closes,
        or either side fails; in every case the bridge tears both sides down.
        """
        await websocket.accept()
        logger.info("Telephony media stream connected")

        bridge = CallBridge(websocket, self.settings_provider())
        call_id = bridge.session.call_id
        self.active_calls[call_id] = bridge

        try:
            if not await bridge.start():
                return

            while not bridge.closed:
                data = await websocket.receive_text()
                await bridge.handle_telephony_message(data)

        except WebSocketDisconnect:
            logger.info(f"Telephony media stream disconnected for call {bridge.session.label}")
        except Exception as e:
            if bridge.closed:
                logger.debug(f"Telephony receive ended after teardown: {e}")
            else:
                logger.error(f"Error in telephony WebSocket connection: {e}", exc_info=True)
        finally:
            await bridge.cleanup()
            self.active_calls.pop(call_id, None)
            logger.info(f"Call {bridge.session.label} closed")
