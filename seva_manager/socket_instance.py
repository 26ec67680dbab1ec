import socketio
from seva_manager.core.config import settings

# Same origins as the FastAPI CORS settings
sio = socketio.AsyncServer(
    async_mode='asgi',
    cors_allowed_origins=settings.ALLOWED_ORIGINS
)
