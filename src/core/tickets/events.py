"""
Domain Events do Domínio de Tickets.

Este módulo define os eventos de domínio disparados pelas operações
de ciclo de vida. São eles que alimentam o fan-out de notificações.

Eventos:
- TicketCriadoEvent: Novo ticket foi criado
- TicketAtribuidoEvent: Ticket foi atribuído a um agente
- StatusAlteradoEvent: Status mudou (inclui reabertura)
- ComentarioAdicionadoEvent: Comentário adicionado
- TrabalhoRegistradoEvent: Horas registradas no ledger

Uso:
    Eventos são criados nos use cases e publicados através do
    UnitOfWork após commit bem-sucedido.

    with uow:
        ticket = TicketEntity.criar(...)
        repo.add(ticket)
        uow.publish_event(TicketCriadoEvent(...))

Os campos são valores simples (str, bool, float) para que o evento
atravesse a outbox e a fila do Celery sem conversões.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from src.core.shared.events import DomainEvent, register_event


@register_event
@dataclass
class TicketCriadoEvent(DomainEvent):
    """
    Evento: Ticket foi criado.

    Destinatários: chefes ativos do departamento + admins ativos.

    Attributes:
        numero: Número legível (YYYY-MM-NNNNNN)
        assunto: Assunto do ticket
        criador_id: ID do criador
        departamento_id: Departamento do ticket
        prioridade: Prioridade (valor do enum)
    """

    numero: str = ""
    assunto: str = ""
    criador_id: str = ""
    departamento_id: str = ""
    prioridade: str = ""

    def __post_init__(self):
        super().__post_init__()

    @property
    def aggregate_type(self) -> str:
        return "Ticket"


@register_event
@dataclass
class TicketAtribuidoEvent(DomainEvent):
    """
    Evento: Ticket foi atribuído a um agente.

    Destinatários: novo responsável + criador.

    Attributes:
        responsavel_id: ID do novo responsável
        responsavel_anterior_id: ID do responsável anterior (se havia)
        criador_id: ID do criador do ticket
    """

    numero: str = ""
    assunto: str = ""
    responsavel_id: str = ""
    responsavel_anterior_id: Optional[str] = None
    criador_id: str = ""

    def __post_init__(self):
        super().__post_init__()

    @property
    def aggregate_type(self) -> str:
        return "Ticket"

    def _get_event_data(self) -> Dict[str, Any]:
        data = {
            "numero": self.numero,
            "assunto": self.assunto,
            "responsavel_id": self.responsavel_id,
            "criador_id": self.criador_id,
        }
        if self.responsavel_anterior_id:
            data["responsavel_anterior_id"] = self.responsavel_anterior_id
        return data


@register_event
@dataclass
class StatusAlteradoEvent(DomainEvent):
    """
    Evento: Status do ticket mudou.

    Também disparado para transições de mesmo status (registradas no
    histórico) e para reabertura (reaberto=True).

    Destinatários: criador. Quando status_novo é FECHADO, dispara
    também o relatório de fechamento.
    """

    numero: str = ""
    assunto: str = ""
    status_anterior: str = ""
    status_novo: str = ""
    nota: Optional[str] = None
    criador_id: str = ""
    reaberto: bool = False

    def __post_init__(self):
        super().__post_init__()

    @property
    def aggregate_type(self) -> str:
        return "Ticket"


@register_event
@dataclass
class ComentarioAdicionadoEvent(DomainEvent):
    """
    Evento: Comentário foi adicionado ao ticket.

    Attributes:
        comentario_id: ID do comentário
        autor_id: ID do autor do comentário
        interno: Se é comentário interno (não gera notificação)
        criador_id: Criador do ticket
        responsavel_id: Responsável atual do ticket
    """

    numero: str = ""
    assunto: str = ""
    comentario_id: str = ""
    autor_id: str = ""
    conteudo_preview: str = ""
    interno: bool = False
    criador_id: str = ""
    responsavel_id: Optional[str] = None

    def __post_init__(self):
        super().__post_init__()

    @property
    def aggregate_type(self) -> str:
        return "Ticket"


@register_event
@dataclass
class TrabalhoRegistradoEvent(DomainEvent):
    """Evento: Horas registradas (sem destinatários de notificação)."""

    numero: str = ""
    registro_id: str = ""
    agente_id: str = ""
    horas: float = 0.0
    data_trabalho: str = ""

    def __post_init__(self):
        super().__post_init__()

    @property
    def aggregate_type(self) -> str:
        return "Ticket"
