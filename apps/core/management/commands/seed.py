# apps/core/management/commands/seed.py

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.core.choices import BOARD_COLUMNS
from apps.core.models import Project, Task, User


class Command(BaseCommand):
    help = 'Cria dados demo: um usuário, um projeto e uma tarefa por coluna (idempotente)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--username',
            default='demo',
            help='Usuário dono do projeto demo'
        )

    def handle(self, *args, **options):
        self.stdout.write('🌱 Populando banco com dados demo...')

        with transaction.atomic():
            user, created = User.objects.get_or_create(
                username=options['username'],
                defaults={'first_name': 'Demo', 'email': f"{options['username']}@kanboard.local"}
            )
            if created:
                user.set_unusable_password()
                user.save()
                self.stdout.write(f'  👤 Usuário criado: {user.username}')

            project, created = Project.objects.get_or_create(name='Projeto Demo', owner=user)
            project.collaborators.add(user)
            if created:
                self.stdout.write(f'  📁 Projeto criado: {project.name}')

            for status in BOARD_COLUMNS:
                _, created = Task.objects.get_or_create(
                    project=project,
                    status=status,
                    title=f'Exemplo - {status.label}',
                    defaults={'user': user, 'assigned_to': user}
                )
                if created:
                    self.stdout.write(f"  📝 Tarefa criada em '{status.value}'")

        self.stdout.write(
            self.style.SUCCESS(f'✅ Dados demo prontos (projeto {project.pk})')
        )
