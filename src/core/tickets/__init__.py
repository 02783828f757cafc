"""
Domínio de Tickets - Ciclo de Vida de Chamados.

Este módulo contém toda a lógica de negócio relacionada a tickets
de help-desk, incluindo:
- Entidades (TicketEntity, HistoryEntry, WorkLogEntry, CommentEntity)
- Use Cases (CriarTicket, TransicionarTicket, AtribuirTicket, RegistrarTrabalho)
- Domain Events (TicketCriado, TicketAtribuido, StatusAlterado, ComentarioAdicionado)
- DTOs (Input/Output Data Transfer Objects)
- Ports (Interfaces para repositórios)

Características do Domínio:
- Status privado, alterado apenas pela máquina de estados
- Uma HistoryEntry por mudança de status, gravada na mesma transação
- Update condicional por status (concorrência otimista)
- Incremento atômico de horas_reais
- Eventos disparados para side-effects após commit
"""

from .entities import (
    TicketEntity,
    TicketStatus,
    TicketPriority,
    HistoryEntry,
    WorkLogEntry,
    CommentEntity,
    DepartmentEntity,
    CategoryEntity,
)
from .events import (
    TicketCriadoEvent,
    TicketAtribuidoEvent,
    StatusAlteradoEvent,
    ComentarioAdicionadoEvent,
    TrabalhoRegistradoEvent,
)
from .dtos import (
    CriarTicketInputDTO,
    EditarTicketInputDTO,
    RegistrarTrabalhoInputDTO,
    ListarTicketsQueryDTO,
    TicketOutputDTO,
    TicketListItemDTO,
    PaginatedResultDTO,
    ResultadoLoteDTO,
)
from .ports import (
    TicketRepository,
    WorkLogRepository,
    CommentRepository,
    DepartmentRepository,
    CategoryRepository,
)
from .use_cases import (
    CriarTicketService,
    ListarTicketsService,
    ObterTicketService,
    ObterHistoricoService,
    TransicionarTicketService,
    ReabrirTicketService,
    AtribuirTicketService,
    RegistrarTrabalhoService,
)

__all__ = [
    # Entities
    "TicketEntity",
    "TicketStatus",
    "TicketPriority",
    "HistoryEntry",
    "WorkLogEntry",
    "CommentEntity",
    "DepartmentEntity",
    "CategoryEntity",
    # Events
    "TicketCriadoEvent",
    "TicketAtribuidoEvent",
    "StatusAlteradoEvent",
    "ComentarioAdicionadoEvent",
    "TrabalhoRegistradoEvent",
    # DTOs
    "CriarTicketInputDTO",
    "EditarTicketInputDTO",
    "RegistrarTrabalhoInputDTO",
    "ListarTicketsQueryDTO",
    "TicketOutputDTO",
    "TicketListItemDTO",
    "PaginatedResultDTO",
    "ResultadoLoteDTO",
    # Ports
    "TicketRepository",
    "WorkLogRepository",
    "CommentRepository",
    "DepartmentRepository",
    "CategoryRepository",
    # Use Cases
    "CriarTicketService",
    "ListarTicketsService",
    "ObterTicketService",
    "ObterHistoricoService",
    "TransicionarTicketService",
    "ReabrirTicketService",
    "AtribuirTicketService",
    "RegistrarTrabalhoService",
]
