# apps/core/models.py

from django.contrib.auth.models import AbstractUser
from django.db import models

from .choices import TaskStatus


class User(AbstractUser):
    """
    Modelo de usuário customizado

    A autenticação é delegada ao provedor de identidade externo;
    aqui guardamos apenas o identificador estável que ele fornece.
    """

    identity_id = models.CharField(
        max_length=128,
        unique=True,
        null=True,
        blank=True,
        help_text="Identificador estável fornecido pelo provedor de identidade"
    )

    class Meta:
        db_table = 'usuario'

    @property
    def display_name(self):
        """Nome usado em assigned_user_name"""
        return self.get_full_name() or self.username

    def __str__(self):
        return self.display_name


class Project(models.Model):
    """Projeto - agrupa as tarefas de um board"""

    name = models.CharField(max_length=200)
    owner = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='owned_projects'
    )
    collaborators = models.ManyToManyField(
        User,
        related_name='projects',
        blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'project'
        ordering = ['id']

    def __str__(self):
        return self.name

    def is_collaborator(self, user_id):
        """Verifica se o usuário pode ser responsável por tarefas do projeto"""
        if user_id == self.owner_id:
            return True
        return self.collaborators.filter(id=user_id).exists()


class Task(models.Model):
    """
    Tarefa do board - registro canônico

    Pertence a exatamente um projeto e a exatamente uma coluna (status).
    A ordem dentro da coluna não é persistida.
    """

    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')
    status = models.CharField(
        max_length=20,
        choices=TaskStatus.choices,
        default=TaskStatus.TODO
    )
    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='tasks'
    )
    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_tasks'
    )
    assigned_to = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_tasks'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tasks'
        ordering = ['id']
        indexes = [
            models.Index(fields=['project', 'status'], name='tasks_project_status_idx'),
        ]

    def __str__(self):
        return f"#{self.pk} {self.title} [{self.status}]"

    @property
    def assigned_user_name(self):
        """Campo derivado - resolvido na leitura, nunca gravado"""
        if self.assigned_to is None:
            return None
        return self.assigned_to.display_name

    def to_dict(self):
        """Representação canônica enviada pela API e pelo broadcast"""
        return {
            'id': self.pk,
            'title': self.title,
            'description': self.description,
            'status': self.status,
            'project_id': self.project_id,
            'user_id': self.user_id,
            'assigned_to': self.assigned_to_id,
            'assigned_user_name': self.assigned_user_name,
        }
