# apps/core/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.db import transaction
from django.utils.html import format_html

from apps.board import broadcast
from .models import User, Project, Task


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin customizado para o modelo User"""

    list_display = ['username', 'email', 'get_full_name', 'identity_id', 'is_active', 'date_joined']
    search_fields = ['username', 'first_name', 'last_name', 'email', 'identity_id']
    ordering = ['-date_joined']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Provedor de identidade', {
            'fields': ('identity_id',)
        }),
    )


class TaskInline(admin.TabularInline):
    """Tarefas do projeto (somente leitura - mudanças passam pelo TaskAdmin)"""
    model = Task
    extra = 0
    fields = ['title', 'status', 'assigned_to']
    readonly_fields = ['title', 'status', 'assigned_to']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    """Admin para gerenciamento de projetos"""

    list_display = ['name', 'owner', 'collaborators_count', 'tasks_count', 'created_at']
    search_fields = ['name', 'owner__username']
    filter_horizontal = ['collaborators']
    readonly_fields = ['created_at']
    inlines = [TaskInline]

    def collaborators_count(self, obj):
        """Conta quantidade de colaboradores"""
        return obj.collaborators.count()

    collaborators_count.short_description = 'Colaboradores'

    def tasks_count(self, obj):
        """Conta tarefas do projeto"""
        return obj.tasks.count()

    tasks_count.short_description = 'Tarefas'


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    """
    Admin para tarefas

    Alterações feitas aqui também são transmitidas para o board
    """

    list_display = ['title', 'project', 'status_badge', 'assigned_to', 'updated_at']
    list_filter = ['status', 'project']
    search_fields = ['title', 'description', 'project__name']
    readonly_fields = ['created_at', 'updated_at']

    def get_readonly_fields(self, request, obj=None):
        """project é imutável depois da criação (mesma regra da API)"""
        fields = list(super().get_readonly_fields(request, obj))
        if obj is not None:
            fields.append('project')
        return fields

    def status_badge(self, obj):
        """Exibe o status com badge colorido"""
        cores = {
            'todo': '#6B7280',  # cinza
            'in progress': '#3B82F6',  # azul
            'review': '#F59E0B',  # amarelo
            'done': '#10B981',  # verde
        }
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 3px 8px; border-radius: 4px; font-size: 11px;">{}</span>',
            cores.get(obj.status, '#6B7280'), obj.get_status_display()
        )

    status_badge.short_description = 'Status'

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        event = broadcast.TASK_UPDATED if change else broadcast.TASK_CREATED
        payload = obj.to_dict()
        transaction.on_commit(lambda: broadcast.notify_project(obj.project_id, event, payload))

    def delete_model(self, request, obj):
        payload = {'id': obj.pk, 'project_id': obj.project_id}
        super().delete_model(request, obj)
        transaction.on_commit(lambda: broadcast.notify_project(payload['project_id'], broadcast.TASK_DELETED, payload))
