"""
Domínio de Notificações - Fan-out e Caixa de Entrada.

- entities: NotificationEntity e efeitos de entrega
- fan_out: destinatários por evento de ciclo de vida
- use_cases: despacho pós-commit e serviços da caixa de entrada
"""

from .entities import (
    NotificationEntity,
    NotificationKind,
    EnviarEmailEffect,
    EnviarRelatorioFechamentoEffect,
)
from .fan_out import NotificationFanOut, ResultadoFanOut
from .ports import NotificationRepository, NotificationDelivery
from .use_cases import EffectDispatcher, DespacharNotificacoesService

__all__ = [
    "NotificationEntity",
    "NotificationKind",
    "EnviarEmailEffect",
    "EnviarRelatorioFechamentoEffect",
    "NotificationFanOut",
    "ResultadoFanOut",
    "NotificationRepository",
    "NotificationDelivery",
    "EffectDispatcher",
    "DespacharNotificacoesService",
]
