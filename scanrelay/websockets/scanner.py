"""
==============================================================================
Scanner WebSocket Module
==============================================================================

Real-time barcode and QR scanning via WebSocket connection.

Protocol:
---------
1. Client sends init message with an optional scan_type
2. Client sends camera frames as base64, or already decoded strings
3. Server answers each code, or the first symbol found in a frame, with a
   scan or duplicate message
4. Client sends stop to end the session

Messages:
---------
    → {"type": "init", "scan_type": "normal"}
    ← {"type": "init", "scan_type": "normal"}
    → {"type": "frame", "frame": "<base64 jpeg>"}
    → {"type": "code", "code": "8801234567890"}
    ← {"type": "scan", "scan": {...}}
    ← {"type": "duplicate", "code": "8801234567890"}
    → {"type": "stop"}

==============================================================================
"""

import logging
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Depends

from scanrelay.config import SCAN_TYPES
from scanrelay.core.exceptions import AppException
from scanrelay.scanner import FrameDecoder
from scanrelay.schemas.scan import ScanEventDetail
from scanrelay.services.scan_service import ScanService, get_scan_service


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter()


def get_frame_decoder() -> FrameDecoder:
    """Decoder dependency for the scan socket."""
    return FrameDecoder()


class ScannerWebSocketHandler:
    """
    Handler for scanning WebSocket connections.

    Manages the lifecycle of a scanning session including:
    - Session scan type
    - Frame decoding
    - Scan submission and duplicate reporting
    """

    def __init__(
        self,
        websocket: WebSocket,
        service: ScanService,
        decoder: FrameDecoder
    ):
        self._websocket = websocket
        self._service = service
        self._decoder = decoder
        self._scan_type: Optional[str] = None

    async def send_error(self, message: str, code: str = "ERROR") -> None:
        """Send error message to client."""
        await self._websocket.send_json({
            "type": "error",
            "code": code,
            "message": message
        })

    async def handle_init(self, data: dict) -> bool:
        """Handle init message from client."""
        if data.get("type") != "init":
            await self.send_error("First message must be init", "INIT_REQUIRED")
            return False

        scan_type = data.get("scan_type")
        if scan_type is not None:
            scan_type = str(scan_type).lower().strip()
            if scan_type not in SCAN_TYPES:
                await self.send_error(
                    f"Invalid scan type: {scan_type}",
                    "INVALID_SCAN_TYPE"
                )
                return False

        self._scan_type = scan_type
        logger.info(f"Init: scan_type={scan_type or 'default'}")

        await self._websocket.send_json({
            "type": "init",
            "scan_type": scan_type
        })
        return True

    async def handle_code(self, code: str) -> None:
        """Submit one decoded string and report the outcome."""
        try:
            event = await self._service.submit(code, self._scan_type)
        except AppException as e:
            await self.send_error(e.message, e.code)
            return

        if event is None:
            await self._websocket.send_json({"type": "duplicate", "code": code})
            return

        await self._websocket.send_json({
            "type": "scan",
            "scan": ScanEventDetail.from_event(event).model_dump(mode="json")
        })

    async def handle_frame(self, data: dict) -> None:
        """Handle frame message from client."""
        frame = data.get("frame")
        if not isinstance(frame, str):
            await self.send_error("Frame must be a base64 string", "INVALID_FRAME")
            return

        codes = self._decoder.decode_base64(frame)

        # One scan per frame: first symbol only
        if codes:
            await self.handle_code(codes[0])

    async def run(self) -> None:
        """Main handler loop."""
        await self._websocket.accept()
        logger.info("📱 Scanner WebSocket connected")

        try:
            # Wait for init message
            init_data = await self._websocket.receive_json()
            if not await self.handle_init(init_data):
                await self._websocket.close()
                return

            while True:
                data = await self._websocket.receive_json()
                message_type = data.get("type")

                if message_type == "frame":
                    await self.handle_frame(data)

                elif message_type == "code":
                    await self.handle_code(str(data.get("code") or ""))

                elif message_type == "stop":
                    logger.info("🛑 Client requested stop")
                    break

                else:
                    await self.send_error(
                        f"Unknown message type: {message_type}",
                        "UNKNOWN_MESSAGE"
                    )

            await self._websocket.close()

        except WebSocketDisconnect:
            logger.info("📱 Client disconnected")
        finally:
            logger.info("✅ Scanner WebSocket closed")


@router.websocket("/ws/scan")
async def websocket_scan(
    websocket: WebSocket,
    service: ScanService = Depends(get_scan_service),
    decoder: FrameDecoder = Depends(get_frame_decoder)
):
    """Real-time scanning via WebSocket."""
    handler = ScannerWebSocketHandler(websocket, service, decoder)
    await handler.run()
