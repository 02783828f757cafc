"""
Unit of Work - Implementação Django.

Gerencia transações atômicas entre múltiplos repositórios,
garantindo consistência de dados.

Responsabilidades:
- Iniciar/finalizar transações
- Commit/Rollback coordenado
- Gravar eventos na outbox dentro da transação
- Publicar eventos após commit bem-sucedido

Garantias:
- Atomicidade: ticket, histórico e outbox são gravados juntos
- Efeitos só saem do processo depois do commit
- Falha ao publicar nunca desfaz a transação confirmada
"""

from typing import List, Optional
import logging

from django.db import transaction

from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventPublisher, OutboxStore, UnitOfWork

logger = logging.getLogger(__name__)


class DjangoUnitOfWork(UnitOfWork):
    """
    Implementação Django do Unit of Work.

    Usa django.db.transaction.atomic; quando aninhado em outro bloco
    atômico vira um savepoint. A mesma instância pode ser reutilizada
    em vários blocos `with` sequenciais (ex: novas tentativas de
    numeração).

    Example:
        with DjangoUnitOfWork(event_publisher, outbox) as uow:
            repo.update_if_status(ticket, status_anterior)
            uow.publish_event(StatusAlteradoEvent(...))
        # Commit automático + eventos publicados

    Example com rollback:
        with DjangoUnitOfWork() as uow:
            repo.add(ticket)
            uow.publish_event(TicketCriadoEvent(...))
            raise Exception("Erro!")
        # Rollback automático, eventos descartados
    """

    def __init__(
        self,
        event_publisher: Optional[EventPublisher] = None,
        outbox: Optional[OutboxStore] = None,
    ):
        """
        Args:
            event_publisher: Publicador de eventos (síncrono ou Celery)
            outbox: Store onde os eventos são gravados antes do commit
        """
        super().__init__()
        self._event_publisher = event_publisher
        self._outbox = outbox
        self._atomic = None
        self._committed = False
        self._rolled_back = False

    def _begin_transaction(self) -> None:
        if self._atomic is not None:
            raise RuntimeError("Unit of Work já está em uma transação")
        self.clear_events()
        self._committed = False
        self._rolled_back = False
        self._atomic = transaction.atomic()
        self._atomic.__enter__()
        logger.debug("Transaction started")

    def commit(self) -> None:
        """
        Ordem de execução:
        1. Gravar eventos na outbox (mesma transação)
        2. Commit da transação no banco
        3. Publicar eventos enfileirados
        """
        if self._atomic is None:
            logger.warning("Commit sem transação ativa")
            return

        try:
            if self._outbox:
                for event in self._events:
                    self._outbox.append(event)
        except Exception as e:
            logger.error(f"Falha ao gravar outbox: {e}", exc_info=True)
            self.rollback()
            raise

        atomic, self._atomic = self._atomic, None
        atomic.__exit__(None, None, None)
        self._committed = True
        logger.debug("Transaction committed")

        events, self._events = list(self._events), []
        self._publish_events(events)

    def rollback(self) -> None:
        """Desfaz todas as mudanças e descarta eventos."""
        if self._atomic is None:
            self.clear_events()
            return

        atomic, self._atomic = self._atomic, None
        transaction.set_rollback(True)
        atomic.__exit__(None, None, None)
        self._rolled_back = True
        self.clear_events()
        logger.debug("Transaction rolled back")

    def _publish_events(self, events: List[DomainEvent]) -> None:
        """
        Eventos só são publicados após commit bem-sucedido. Erros do
        publisher são registrados e descartados: o evento continua
        pendente na outbox.
        """
        for event in events:
            logger.info(f"Publicando evento: {event.event_type} para {event.aggregate_id}")
            if not self._event_publisher:
                continue
            try:
                self._event_publisher.publish(event)
            except Exception as e:
                logger.error(f"Falha ao publicar evento {event.event_id}: {e}", exc_info=True)
                continue
            if self._outbox:
                self._outbox.mark_dispatched(event.event_id)

    @property
    def is_committed(self) -> bool:
        return self._committed

    @property
    def is_rolled_back(self) -> bool:
        return self._rolled_back


class InMemoryUnitOfWork(UnitOfWork):
    """
    Unit of Work em memória para testes.

    Não persiste nada - apenas simula o comportamento para testes
    sem banco de dados. Com `event_publisher`, publica os eventos após
    o "commit" como a versão Django.

    Example:
        uow = InMemoryUnitOfWork()
        with uow:
            uow.publish_event(event)

        assert uow.committed
        assert len(uow.published_events) == 1
    """

    def __init__(self, event_publisher: Optional[EventPublisher] = None):
        super().__init__()
        self._event_publisher = event_publisher
        self._committed = False
        self._rolled_back = False
        self._published_events: List[DomainEvent] = []

    def _begin_transaction(self) -> None:
        self.clear_events()

    def commit(self) -> None:
        self._committed = True
        events, self._events = list(self._events), []
        self._published_events.extend(events)
        if self._event_publisher:
            for event in events:
                try:
                    self._event_publisher.publish(event)
                except Exception as e:
                    logger.error(f"Falha ao publicar evento {event.event_id}: {e}")

    def rollback(self) -> None:
        self._rolled_back = True
        self.clear_events()

    @property
    def committed(self) -> bool:
        return self._committed

    @property
    def rolled_back(self) -> bool:
        return self._rolled_back

    @property
    def published_events(self) -> List[DomainEvent]:
        return self._published_events

    def reset(self) -> None:
        """Reset para próximo teste."""
        self._committed = False
        self._rolled_back = False
        self._published_events.clear()
        self.clear_events()
