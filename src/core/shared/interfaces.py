"""
Interfaces (Ports) - Contratos entre Core e Adapters.

Este módulo define as interfaces transversais que os Adapters devem
implementar. Os ports específicos de cada domínio ficam em
`<dominio>/ports.py`.

Ports definidos aqui:
- UnitOfWork: fronteira transacional + outbox de eventos
- EventPublisher: entrega dos eventos após o commit
- OutboxStore: persistência dos eventos dentro da transação

Princípio: Core define interfaces; Adapters implementam.
"""

from abc import ABC, abstractmethod
from typing import List

from .events import DomainEvent


class UnitOfWork(ABC):
    """
    Unit of Work - Coordena transações atômicas.

    Garante que a atualização do ticket, a entrada de histórico e o
    registro dos eventos sejam persistidos juntos ou descartados juntos.

    Pattern: Context Manager
        with uow:
            ticket_repo.update_if_status(ticket, status_esperado)
            uow.publish_event(event)
        # Commit automático ao sair sem erro
        # Rollback automático se exceção

    Os eventos enfileirados formam a outbox da operação: são os
    efeitos a despachar (notificações, emails, relatórios) e só
    deixam o processo depois do commit. Falhas na publicação nunca
    desfazem a transação já confirmada.
    """

    def __init__(self):
        self._events: List[DomainEvent] = []

    def __enter__(self) -> "UnitOfWork":
        self._begin_transaction()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            self.rollback()
        else:
            self.commit()
        return False  # Não suprime exceções

    @abstractmethod
    def _begin_transaction(self) -> None:
        """Inicia uma nova transação."""
        raise NotImplementedError

    @abstractmethod
    def commit(self) -> None:
        """
        Persiste todas as mudanças e publica eventos.

        Ordem de execução:
        1. Gravação dos eventos na outbox (mesma transação)
        2. Commit da transação no banco
        3. Publicação dos eventos enfileirados
        4. Limpeza de estado interno
        """
        raise NotImplementedError

    @abstractmethod
    def rollback(self) -> None:
        """Desfaz todas as mudanças e descarta eventos."""
        raise NotImplementedError

    def publish_event(self, event: DomainEvent) -> None:
        """
        Enfileira evento para publicação após commit.

        Args:
            event: Evento de domínio a ser publicado
        """
        self._events.append(event)

    def clear_events(self) -> None:
        self._events.clear()


class EventPublisher(ABC):
    """
    Interface para publicação de eventos.

    Adapters implementam para despachar em processo (handlers
    síncronos) ou via Celery.
    """

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        raise NotImplementedError


class OutboxStore(ABC):
    """
    Interface da outbox de eventos.

    Os eventos são gravados na mesma transação da mutação, o que
    permite reprocessar efeitos cuja publicação falhou.
    """

    @abstractmethod
    def append(self, event: DomainEvent) -> None:
        """Grava o evento como pendente."""
        raise NotImplementedError

    @abstractmethod
    def mark_dispatched(self, event_id: str) -> None:
        """Marca o evento como entregue ao publisher."""
        raise NotImplementedError

