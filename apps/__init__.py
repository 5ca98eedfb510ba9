# apps/__init__.py

"""
Kanboard - Aplicações Django

Este pacote contém as aplicações do sistema:
- core: Models (usuários, projetos, tarefas) e API de projetos
- board: API de tarefas, Broadcast Channel (WebSockets) e cliente de sincronização
"""

__version__ = '0.1.0'
