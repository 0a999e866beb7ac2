import asyncio
import logging
from typing import Callable, Dict, List, Any, Optional

logger = logging.getLogger(__name__)

# Topics
PRESSURE_SAMPLE = "pressure_sample"
ALTITUDE_SAMPLE = "altitude_sample"
CONNECTION_STATE = "connection_state"
CONNECTION_ERROR = "connection_error"
BROKER_MESSAGE = "broker_message"
PUBLISH_OUTCOME = "publish_outcome"
SENSOR_STATUS = "sensor_status"
LOCATION_FIX = "location_fix"


class EventHub:
    """
    Topic based observer channel shared by sensor threads, the broker
    network thread and the asyncio app. Once a loop is attached, work
    coming from other threads is queued onto it so handlers run there.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def init(self, loop: Optional[asyncio.AbstractEventLoop]):
        self._loop = loop

    def subscribe(self, topic: str, handler: Callable):
        handlers = self._subscribers.setdefault(topic, [])
        if handler not in handlers:
            handlers.append(handler)
        logger.debug(f"Subscribed to {topic}")

    def unsubscribe(self, topic: str, handler: Callable):
        handlers = self._subscribers.get(topic, [])
        if handler in handlers:
            handlers.remove(handler)
            logger.debug(f"Unsubscribed from {topic}")

    def unsubscribe_all(self):
        self._subscribers.clear()

    def _inline(self) -> bool:
        """True when work can run right here: no loop attached, or already on it."""
        if self._loop is None:
            return True
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False

    def call_in_loop(self, callback: Callable, *args: Any):
        """Run a plain callback on the hub's loop."""
        if self._inline():
            callback(*args)
        else:
            self._loop.call_soon_threadsafe(callback, *args)

    def send_all_on_topic(self, topic: str, message: Any):
        inline = self._inline()
        for handler in list(self._subscribers.get(topic, [])):
            try:
                if asyncio.iscoroutinefunction(handler):
                    if self._loop is None:
                        logger.warning(f"No loop attached, async handler for {topic} not run")
                    elif inline:
                        self._loop.create_task(handler(topic, message))
                    else:
                        asyncio.run_coroutine_threadsafe(handler(topic, message), self._loop)
                elif inline:
                    handler(topic, message)
                else:
                    self._loop.call_soon_threadsafe(self._run_handler, handler, topic, message)
            except Exception as e:
                logger.error(f"Error handling message on topic {topic}: {e}")

    @staticmethod
    def _run_handler(handler: Callable, topic: str, message: Any):
        try:
            handler(topic, message)
        except Exception as e:
            logger.error(f"Error handling message on topic {topic}: {e}")


# Global instance
event_hub = EventHub()


def init_event_hub(loop: Optional[asyncio.AbstractEventLoop]):
    """Attach the global event hub to the given loop (None detaches it)."""
    event_hub.init(loop)
