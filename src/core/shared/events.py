"""
Domain Events - Comunicação Assíncrona entre Domínios.

Este módulo define a infraestrutura base para Domain Events. Eventos
são os "efeitos a despachar" de cada operação de ciclo de vida: o caso
de uso os enfileira no UnitOfWork e eles só saem do processo depois
do commit.

Características:
- Auto-geração de ID e timestamp
- Serializáveis para outbox/transporte (Celery)
- Registro por nome para reconstrução no worker
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Type
import uuid

from .clock import agora


_EVENT_REGISTRY: Dict[str, Type["DomainEvent"]] = {}


def register_event(cls: Type["DomainEvent"]) -> Type["DomainEvent"]:
    """
    Decorator que registra a classe do evento pelo nome.

    Permite que o worker Celery reconstrua o evento tipado a partir
    do dicionário recebido da fila.
    """
    _EVENT_REGISTRY[cls.__name__] = cls
    return cls


def event_from_dict(data: Dict[str, Any]) -> "DomainEvent":
    """
    Reconstrói um evento registrado a partir de `DomainEvent.to_dict()`.

    Raises:
        ValueError: Se o tipo do evento não foi registrado
    """
    event_type = data.get("event_type")
    event_cls = _EVENT_REGISTRY.get(event_type)
    if event_cls is None:
        raise ValueError(f"Tipo de evento desconhecido: {event_type}")
    return event_cls.from_dict(data)


@dataclass
class DomainEvent(ABC):
    """
    Classe base abstrata para Domain Events.

    Um Domain Event representa algo significativo que aconteceu
    no domínio e que pode ser relevante para outras partes do sistema.

    Attributes:
        event_id: Identificador único do evento
        aggregate_id: ID do agregado que gerou o evento
        ator_id: ID do ator que executou a ação (opcional)
        occurred_at: Momento em que o evento ocorreu
        version: Versão do schema do evento (para evolução)

    Example:
        @register_event
        @dataclass
        class TicketCriadoEvent(DomainEvent):
            numero: str = ""

            @property
            def aggregate_type(self) -> str:
                return "Ticket"
    """

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    aggregate_id: str = ""
    ator_id: Optional[str] = None
    occurred_at: datetime = field(default_factory=agora)
    version: int = 1

    def __post_init__(self):
        if not self.aggregate_id:
            raise ValueError("aggregate_id é obrigatório")

    @property
    @abstractmethod
    def aggregate_type(self) -> str:
        """Nome do tipo do agregado (ex: "Ticket")."""
        ...

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializa evento para dicionário.

        Usado pela outbox, pelo envio via Celery e por logs.
        """
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "aggregate_id": self.aggregate_id,
            "aggregate_type": self.aggregate_type,
            "ator_id": self.ator_id,
            "occurred_at": self.occurred_at.isoformat(),
            "version": self.version,
            "data": self._get_event_data(),
        }

    def _get_event_data(self) -> Dict[str, Any]:
        """Campos específicos da subclasse."""
        base_fields = {"event_id", "aggregate_id", "ator_id", "occurred_at", "version"}
        return {
            key: value
            for key, value in self.__dict__.items()
            if key not in base_fields and not key.startswith("_")
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DomainEvent":
        event_data = data.get("data", {})
        return cls(
            event_id=data.get("event_id", str(uuid.uuid4())),
            aggregate_id=data["aggregate_id"],
            ator_id=data.get("ator_id"),
            occurred_at=datetime.fromisoformat(data["occurred_at"]),
            version=data.get("version", 1),
            **event_data,
        )

    def __repr__(self) -> str:
        return (
            f"{self.event_type}("
            f"event_id={self.event_id[:8]}..., "
            f"aggregate_id={self.aggregate_id}, "
            f"occurred_at={self.occurred_at.isoformat()}"
            f")"
        )
