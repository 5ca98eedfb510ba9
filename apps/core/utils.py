# apps/core/utils.py

import json
import logging
from functools import wraps
from typing import Dict

from django.http import JsonResponse

from apps.board.exceptions import BoardError, TaskValidationError

logger = logging.getLogger(__name__)


def parse_json_body(request) -> Dict:
    """
    Lê o corpo JSON da requisição
    Corpo vazio vira dict vazio; qualquer coisa que não seja objeto é inválida
    """
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise TaskValidationError('JSON inválido')
    if not isinstance(data, dict):
        raise TaskValidationError('Corpo deve ser um objeto JSON')
    return data


def error_response(error: BoardError) -> JsonResponse:
    """Converte um erro da API no JSON {'error': ...} com o status certo"""
    return JsonResponse({'error': error.message}, status=error.status_code)


def api_view(view_func):
    """
    Decorador para as views JSON
    Traduz BoardError em resposta HTTP; erros 5xx vão para o log
    """

    @wraps(view_func)
    def wrapped_view(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except BoardError as e:
            if e.status_code >= 500:
                logger.error(f"❌ {request.method} {request.path}: {e.message}")
            else:
                logger.info(f"⚠️ {request.method} {request.path} rejeitado: {e.message}")
            return error_response(e)

    return wrapped_view
