# apps/board/__init__.py

"""
Board - Sincronização em tempo real do Kanban

Funcionalidades:
- API de mutação de tarefas (criar, atualizar, remover)
- Broadcast Channel por projeto via WebSockets
- Cliente: projeção local e drag-and-drop otimista
"""
