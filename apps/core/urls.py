# apps/core/urls.py

from django.urls import path
from . import views

app_name = 'core'

urlpatterns = [
    # === PROJETOS ===
    path('projects/<int:pk>', views.projects_resource, name='projects'),
    path('projects/<int:project_id>/collaborators', views.project_collaborators, name='collaborators'),

    # === MONITORAMENTO ===
    path('health/', views.health_check, name='health'),
]
