"""
Event Publishers - Publicadores de Eventos de Domínio.

Recebem os eventos do Unit of Work depois do commit.
Implementações:
- LoggingEventPublisher: Loga e executa handlers em processo (modo "sync")
- CeleryEventPublisher: Publica via Celery (modo "celery")
- InMemoryEventPublisher: Para testes

Nenhum publisher propaga erro de handler ou de fila: a operação de
ciclo de vida já foi confirmada quando o evento chega aqui.
"""

from typing import Callable, Dict, List
import json
import logging

from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventPublisher

logger = logging.getLogger(__name__)


EventHandler = Callable[[DomainEvent], None]


class _HandlerRegistry:
    """Handlers síncronos por tipo de evento ("*" recebe todos)."""

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = {}

    def register_handler(self, event_type: str, handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def _dispatch_to_handlers(self, event: DomainEvent) -> None:
        handlers = self._handlers.get(event.event_type, []) + self._handlers.get("*", [])
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Erro em handler para {event.event_type}: {e}", exc_info=True)


class LoggingEventPublisher(_HandlerRegistry, EventPublisher):
    """
    Publisher que loga eventos e executa os handlers registrados no
    próprio processo.

    Usado em desenvolvimento e nos testes de integração, sem
    infraestrutura de mensageria.
    """

    def __init__(self, log_level: int = logging.INFO):
        super().__init__()
        self._log_level = log_level

    def publish(self, event: DomainEvent) -> None:
        logger.log(
            self._log_level,
            f"[EVENT] {event.event_type} | "
            f"aggregate={event.aggregate_id} | "
            f"data={json.dumps(event.to_dict()['data'], default=str)}"
        )
        self._dispatch_to_handlers(event)


class CeleryEventPublisher(EventPublisher):
    """
    Publisher que envia eventos para Celery.

    Usado em produção para processamento assíncrono. Se o broker
    estiver fora, o erro é registrado e o evento continua pendente na
    outbox (ver `reprocessar_outbox`).
    """

    def __init__(self, also_log: bool = True):
        self._also_log = also_log

    def publish(self, event: DomainEvent) -> None:
        if self._also_log:
            logger.info(f"[EVENT->CELERY] {event.event_type} | aggregate={event.aggregate_id}")

        from src.adapters.django_app.events.handlers import dispatch_domain_event
        dispatch_domain_event.delay(event.event_type, event.to_dict())


class InMemoryEventPublisher(_HandlerRegistry, EventPublisher):
    """
    Publisher em memória para testes.

    Armazena eventos publicados para verificação em testes.
    """

    def __init__(self):
        super().__init__()
        self._published_events: List[DomainEvent] = []

    def publish(self, event: DomainEvent) -> None:
        self._published_events.append(event)
        self._dispatch_to_handlers(event)

    @property
    def published_events(self) -> List[DomainEvent]:
        return self._published_events.copy()

    def clear(self) -> None:
        self._published_events.clear()

    def get_events_by_type(self, event_type: str) -> List[DomainEvent]:
        return [e for e in self._published_events if e.event_type == event_type]


def get_event_publisher(mode: str = "sync") -> EventPublisher:
    """
    Factory para obter publisher apropriado.

    Args:
        mode: "celery" (worker assíncrono), "sync" (handlers em
            processo) ou "log" (apenas loga)

    Returns:
        Publisher configurado
    """
    if mode == "celery":
        return CeleryEventPublisher()

    publisher = LoggingEventPublisher()
    if mode == "sync":
        from src.adapters.django_app.events.handlers import processar_evento
        publisher.register_handler("*", processar_evento)
    return publisher
