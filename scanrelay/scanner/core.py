"""
==============================================================================
Barcode Decoder Adapter Module
==============================================================================

Turns camera frames into decoded strings for the scan pipeline.

Features:
---------
- Frame decoding with pyzbar (EAN/UPC, Code 39/93/128, ITF, QR, ...)
- Base64 image decoding for WebSocket clients
- Live camera source yielding decoded strings

The adapter does not filter symbologies or deduplicate: every non-empty
string it finds is handed on, in frame order.

==============================================================================
"""

from __future__ import annotations

import base64
import binascii
import logging
import threading
import time
from typing import Callable, Iterator, List, Optional

import cv2
import numpy as np


# Module logger
logger = logging.getLogger(__name__)


def _load_pyzbar_decode() -> Callable:
    # pyzbar needs the zbar shared library; load it only when decoding
    from pyzbar.pyzbar import decode
    return decode


class FrameDecoder:
    """
    Decode barcodes from OpenCV frames.

    Attributes:
        _decode: Symbol decoder returning objects with a ``data`` bytes field

    Example:
        >>> decoder = FrameDecoder()
        >>> codes = decoder.decode_frame(frame)
        >>> codes
        ['8801234567890']
    """

    def __init__(self, decode: Optional[Callable] = None) -> None:
        """
        Initialize decoder.

        Args:
            decode: Symbol decoder, pyzbar's ``decode`` when omitted
        """
        self._decode = decode

    @property
    def decode(self) -> Callable:
        if self._decode is None:
            self._decode = _load_pyzbar_decode()
        return self._decode

    def decode_frame(self, frame: Optional[np.ndarray]) -> List[str]:
        """
        Decode every symbol in one frame.

        Args:
            frame: OpenCV image (numpy array)

        Returns:
            Decoded strings in detection order
        """
        if frame is None or frame.size == 0:
            return []

        try:
            symbols = self.decode(frame)
        except Exception as e:
            logger.error(f"Decode error: {e}")
            return []

        codes = []

        for symbol in symbols:
            try:
                value = symbol.data.decode("utf-8")
            except UnicodeDecodeError:
                logger.warning("Skipping symbol with non UTF-8 payload")
                continue

            if value.strip():
                codes.append(value)

        return codes

    def decode_base64(self, data: str) -> List[str]:
        """
        Decode symbols from a base64 encoded JPEG/PNG image.

        Args:
            data: Base64 image, optionally with a data URL prefix

        Returns:
            Decoded strings, empty if the image is unreadable
        """
        if not data:
            return []

        if data.startswith("data:") and "," in data:
            data = data.split(",", 1)[1]

        try:
            img_data = base64.b64decode(data, validate=False)
        except (binascii.Error, ValueError) as e:
            logger.warning(f"Invalid base64 frame: {e}")
            return []

        if not img_data:
            return []

        nparr = np.frombuffer(img_data, np.uint8)
        frame = cv2.imdecode(nparr, cv2.IMREAD_COLOR)

        if frame is None:
            logger.debug("Frame could not be decoded as an image")
            return []

        return self.decode_frame(frame)


class CameraSource:
    """
    Live camera producing decoded strings.

    Example:
        >>> source = CameraSource(camera_index=0)
        >>> for code in source.iter_codes(duration_seconds=30):
        ...     service.accept(code)
    """

    def __init__(
        self,
        camera_index: int = 0,
        decoder: Optional[FrameDecoder] = None
    ) -> None:
        self._camera_index = camera_index
        self._decoder = decoder or FrameDecoder()
        self._cap = None
        self._stop_requested = threading.Event()

        logger.debug(f"Camera source created (camera {camera_index})")

    def iter_codes(self, duration_seconds: float = 0) -> Iterator[str]:
        """
        Yield decoded strings from the camera.

        Args:
            duration_seconds: How long to scan (0 = until the consumer stops)

        Yields:
            Decoded strings, the first symbol of each frame
        """
        self._cap = cv2.VideoCapture(self._camera_index)

        if not self._cap.isOpened():
            logger.error(f"Cannot open camera {self._camera_index}")
            self.close()
            return

        logger.info(f"📷 Camera {self._camera_index} streaming")
        started = time.monotonic()

        try:
            while not self._stop_requested.is_set():
                ret, frame = self._cap.read()
                if not ret:
                    logger.warning("Failed to read frame")
                    break

                codes = self._decoder.decode_frame(frame)
                if codes:
                    # One scan per frame: first symbol only
                    yield codes[0]

                if duration_seconds > 0 and time.monotonic() - started >= duration_seconds:
                    logger.info(f"Duration {duration_seconds}s reached")
                    break
        finally:
            self.close()

    def stop(self) -> None:
        """
        Ask a running iter_codes() to finish after the current frame.

        Safe to call from another thread; the generator releases the camera
        itself.
        """
        self._stop_requested.set()

    def close(self) -> None:
        """Release the camera."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.debug("Camera released")
