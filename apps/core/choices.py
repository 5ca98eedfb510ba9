# apps/core/choices.py

from django.db import models


class TaskStatus(models.TextChoices):
    """
    Colunas fixas do board

    Conjunto fechado compartilhado entre o servidor (validação) e o
    cliente (projeção), para que os dois lados nunca divirjam.
    """

    TODO = 'todo', 'To do'
    IN_PROGRESS = 'in progress', 'In progress'
    REVIEW = 'review', 'Review'
    DONE = 'done', 'Done'


# Ordem de exibição das colunas
BOARD_COLUMNS = tuple(TaskStatus)
