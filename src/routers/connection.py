from fastapi import APIRouter

from core.services.connection_manager import connection_manager
from schemas import ConnectionStatusResponse, MessageResponse

router = APIRouter(prefix="/connection", tags=["connection"])


def _status() -> ConnectionStatusResponse:
    config = connection_manager.config
    return ConnectionStatusResponse(
        state=connection_manager.state,
        host=config.host,
        port=config.port,
        client_id=connection_manager.client_id,
        subscribe_topic=config.subscribe_topic,
        publish_topic=config.publish_topic,
        last_error=connection_manager.last_error,
    )


@router.get("", response_model=ConnectionStatusResponse)
async def get_connection_status() -> ConnectionStatusResponse:
    """Current broker session state and parameters."""
    return _status()


@router.put("/connect", status_code=204)
async def connect() -> None:
    """
    Start a broker session. Has no effect while a session is connecting or connected.
    The outcome arrives asynchronously; poll GET /connection for the resulting state.
    """
    connection_manager.connect()


@router.put("/disconnect", status_code=204)
async def disconnect() -> None:
    """Close the broker session. Has no effect when not connected."""
    connection_manager.disconnect()


@router.put("/toggle", response_model=ConnectionStatusResponse)
async def toggle() -> ConnectionStatusResponse:
    """Disconnect when connected, otherwise connect."""
    connection_manager.toggle()
    return _status()


@router.get("/message", response_model=MessageResponse)
async def get_last_message() -> MessageResponse:
    """Most recent payload received on the subscribe topic."""
    return MessageResponse(message=connection_manager.last_message)
