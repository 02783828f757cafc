"""
Geração do número legível do ticket.

Formato: ``YYYY-MM-NNNNNN``, sequencial dentro do mês. A leitura do
último número e a inserção não são serializadas aqui: colisões sob
concorrência são detectadas pela constraint única do repositório e o
caso de uso gera um novo número e tenta de novo.
"""

from datetime import datetime
from typing import Optional

SEQUENCIA_DIGITOS = 6


def prefixo_do_mes(momento: datetime) -> str:
    """Prefixo ``YYYY-MM-`` do mês do momento informado."""
    return f"{momento.year:04d}-{momento.month:02d}-"


def proximo_numero(momento: datetime, ultimo_numero: Optional[str]) -> str:
    """
    Calcula o próximo número do mês.

    Args:
        momento: Momento da criação (define o mês)
        ultimo_numero: Maior número existente com o mesmo prefixo

    Example:
        >>> proximo_numero(datetime(2025, 7, 1), "2025-07-000041")
        '2025-07-000042'
    """
    prefixo = prefixo_do_mes(momento)
    sequencia = 0
    if ultimo_numero and ultimo_numero.startswith(prefixo):
        try:
            sequencia = int(ultimo_numero[len(prefixo):])
        except ValueError:
            sequencia = 0
    return f"{prefixo}{sequencia + 1:0{SEQUENCIA_DIGITOS}d}"
