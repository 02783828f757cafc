"""
Shared Domain Components.

Contém componentes compartilhados entre todos os domínios:
- Exceções de domínio
- Interfaces (Ports) transversais
- Base classes para Domain Events
"""

from .exceptions import (
    DomainException,
    ValidationError,
    EntityNotFoundError,
    PermissionDeniedError,
    BusinessRuleViolationError,
    InvalidTransitionError,
    ConcurrencyError,
    DuplicateTicketNumberError,
    DependencyFailureError,
)
from .events import DomainEvent, event_from_dict, register_event
from .interfaces import UnitOfWork, EventPublisher, OutboxStore

__all__ = [
    "DomainException",
    "ValidationError",
    "EntityNotFoundError",
    "PermissionDeniedError",
    "BusinessRuleViolationError",
    "InvalidTransitionError",
    "ConcurrencyError",
    "DuplicateTicketNumberError",
    "DependencyFailureError",
    "DomainEvent",
    "event_from_dict",
    "register_event",
    "UnitOfWork",
    "EventPublisher",
    "OutboxStore",
]
