# apps/board/exceptions.py


class BoardError(Exception):
    """Erro base da API de mutação - carrega o status HTTP correspondente"""

    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class TaskValidationError(BoardError):
    """Campos obrigatórios ausentes ou inválidos (antes de tocar no banco)"""

    status_code = 400


class TaskNotFound(BoardError):
    """Tarefa ou projeto referenciado não existe"""

    status_code = 404


class StoreUnavailable(BoardError):
    """Falha de conexão/transação com o banco"""

    status_code = 500
