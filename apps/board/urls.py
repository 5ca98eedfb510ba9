# apps/board/urls.py

from django.urls import path
from . import views

app_name = 'board'

urlpatterns = [
    # API de mutação de tarefas
    path('tasks', views.create_task, name='create_task'),
    path('tasks/<int:pk>', views.task_resource, name='task_resource'),
]
