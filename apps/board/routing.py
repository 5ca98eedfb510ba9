# apps/board/routing.py

from django.urls import re_path
from . import consumers

# Rotas WebSocket para a aplicação board
websocket_urlpatterns = [
    # Broadcast Channel - o cliente escolhe o projeto com join_project
    re_path(r'ws/board/$', consumers.ProjectConsumer.as_asgi()),
]
