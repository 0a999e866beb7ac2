import logging
import os
import time
from typing import Optional

import serial

from core.event_hub import event_hub, EventHub
from core.services.sensor_feed import BarometerFeed

logger = logging.getLogger(__name__)
PORT_PREFIX = "/dev/serial/by-id/"


def parse_pressure_line(line: str) -> Optional[float]:
    """
    Extract a pressure in hPa from one serial line.
    Accepts a bare number ("1013.25") or a key=value pair ("P=1013.25").
    Returns None when the line carries no number.
    """
    text = line.strip()
    if not text:
        return None
    if "=" in text:
        text = text.rsplit("=", 1)[1].strip()
    try:
        return float(text)
    except ValueError:
        return None


class SerialBarometer(BarometerFeed):
    """
    Pressure readings from an external board printing one value per line.
    Lines arriving faster than the update interval are skipped.
    """

    def __init__(self, port: str, baudrate: int = 9600, update_interval_ms: int = 1000,
                 hub: EventHub = event_hub):
        super().__init__(update_interval_ms, hub)
        self.port = port if not port or port.startswith("/") else PORT_PREFIX + port
        self.baudrate = baudrate
        self._last_emit: Optional[float] = None

    def is_available(self) -> bool:
        return bool(self.port) and os.path.exists(self.port) and not os.path.isdir(self.port)

    def handle_line(self, line: str):
        """Parse one line and emit it if the update interval has elapsed."""
        pressure = parse_pressure_line(line)
        if pressure is None:
            logger.warning(f"Unparseable line from {self.port}: {line!r}")
            return
        now = time.monotonic()
        if self._last_emit is not None and now - self._last_emit < self.update_interval_ms / 1000:
            return
        self._last_emit = now
        self._emit(pressure)

    def _run(self):
        ser = None
        connected = False
        while not self._stop_event.is_set():
            try:
                if ser is None:
                    ser = serial.Serial(self.port, self.baudrate, timeout=0.1)
                    if not connected:
                        logger.info(f"[Serial] Barometer connected on {self.port} @ {self.baudrate} baud")
                        connected = True
                raw = ser.readline()
                if not raw:
                    continue
                try:
                    self.handle_line(raw.decode('utf-8'))
                except UnicodeDecodeError:
                    logger.warning(f"Error decoding serial data from {self.port}")
            except (serial.SerialException, OSError) as e:
                if connected:
                    logger.warning(f"[Serial] Barometer disconnected from {self.port}: {e}")
                    connected = False
                if ser is not None:
                    try:
                        ser.close()
                    except (serial.SerialException, OSError):
                        pass
                    ser = None
                self._stop_event.wait(1.0)
        if ser is not None:
            ser.close()
