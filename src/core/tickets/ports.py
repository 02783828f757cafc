"""
Ports (Interfaces) do Domínio de Tickets.

Define os contratos que os Adapters de infraestrutura devem implementar
para persistência de tickets e do ledger (histórico, horas, comentários).

Tipos de Ports:
- TicketRepository: tickets + histórico, com update condicional
- WorkLogRepository: registro de horas com incremento atômico
- CommentRepository: comentários
- DepartmentRepository / CategoryRepository: organização

Princípio:
    Core define interfaces → Adapters implementam
    Dependências sempre apontam para o Core

Example:
    # No Adapter (Django)
    class DjangoTicketRepository:
        def update_if_status(self, ticket, status_esperado) -> bool:
            atualizados = TicketModel.objects.filter(
                id=ticket.id, status=status_esperado.value
            ).update(...)
            return atualizados == 1
"""

from typing import Dict, List, Optional, Protocol, Tuple, runtime_checkable
import copy

from src.core.shared.exceptions import DuplicateTicketNumberError

from .entities import (
    CategoryEntity,
    CommentEntity,
    DepartmentEntity,
    HistoryEntry,
    TicketEntity,
    TicketStatus,
    WorkLogEntry,
)
from .dtos import ListarTicketsQueryDTO


@runtime_checkable
class TicketRepository(Protocol):
    """
    Interface para persistência de Tickets.

    Toda escrita grava junto as HistoryEntry pendentes da entidade
    (`coletar_historico`), na mesma transação. Não existe um `save`
    genérico: o status só é gravado por update condicional.

    Implementações:
    - DjangoTicketRepository (ORM)
    - InMemoryTicketRepository (para testes)
    """

    def add(self, ticket: TicketEntity) -> None:
        """
        Insere ticket novo com seu histórico de criação.

        Raises:
            DuplicateTicketNumberError: Se o número já existe
        """
        ...

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        """Busca ticket por ID (sem aplicar escopo)."""
        ...

    def update_if_status(self, ticket: TicketEntity, status_esperado: TicketStatus) -> bool:
        """
        Update condicional (concorrência otimista).

        Grava os campos mutáveis e o histórico pendente apenas se o
        status persistido ainda é `status_esperado`. horas_reais e
        responsavel_id nunca são sobrescritos aqui.

        Returns:
            True se gravou, False se o status mudou desde a leitura
        """
        ...

    def assign_if_status(
        self,
        ticket: TicketEntity,
        status_esperado: TicketStatus,
        responsavel_esperado: Optional[str],
    ) -> bool:
        """
        Como update_if_status, gravando também responsavel_id.

        Exige ainda que o responsável persistido seja
        `responsavel_esperado`, de modo que duas atribuições
        concorrentes não se sobrescrevem.
        """
        ...

    def delete(self, ticket_id: str) -> None:
        """Remove ticket e tudo que depende dele (cascata)."""
        ...

    def last_number_with_prefix(self, prefixo: str) -> Optional[str]:
        """Maior número existente que começa com o prefixo."""
        ...

    def list_paginated(
        self,
        escopo: Dict[str, str],
        query: ListarTicketsQueryDTO,
    ) -> Tuple[List[TicketEntity], int]:
        """
        Lista tickets do escopo com filtros e paginação.

        Args:
            escopo: Filtro de escopo ({campo: valor}, vazio = irrestrito)
            query: Filtros já normalizados

        Returns:
            (itens da página, total sem paginação), mais novos primeiro
        """
        ...

    def list_filtered(
        self,
        escopo: Dict[str, str],
        query: ListarTicketsQueryDTO,
    ) -> List[TicketEntity]:
        """Como list_paginated, mas sem paginação (exportação)."""
        ...

    def count_by_field(self, escopo: Dict[str, str], campo: str) -> Dict[str, int]:
        """Contagem agrupada por `status` ou `prioridade` dentro do escopo."""
        ...

    def list_history(self, ticket_id: str) -> List[HistoryEntry]:
        """Histórico do ticket em ordem cronológica."""
        ...


@runtime_checkable
class WorkLogRepository(Protocol):
    """
    Interface do ledger de horas.

    `add` insere o registro e incrementa `horas_reais` do ticket de
    forma atômica no próprio armazenamento (nunca ler-somar-gravar na
    aplicação).
    """

    def add(self, registro: WorkLogEntry) -> None:
        ...

    def list_by_ticket(self, ticket_id: str) -> List[WorkLogEntry]:
        ...

    def total_hours(self, ticket_id: str) -> float:
        ...


@runtime_checkable
class CommentRepository(Protocol):
    """Interface para persistência de comentários."""

    def save(self, comentario: CommentEntity) -> None:
        ...

    def get_by_id(self, comentario_id: str) -> Optional[CommentEntity]:
        ...

    def list_by_ticket(self, ticket_id: str) -> List[CommentEntity]:
        """Comentários do ticket em ordem cronológica."""
        ...

    def delete(self, comentario_id: str) -> None:
        ...


@runtime_checkable
class DepartmentRepository(Protocol):
    def get_by_id(self, departamento_id: str) -> Optional[DepartmentEntity]:
        ...


@runtime_checkable
class CategoryRepository(Protocol):
    def get_by_id(self, categoria_id: str) -> Optional[CategoryEntity]:
        ...


# =============================================================================
# Implementações em memória (testes)
# =============================================================================

def _corresponde(ticket: TicketEntity, escopo: Dict[str, str], query: ListarTicketsQueryDTO) -> bool:
    for campo, valor in escopo.items():
        if getattr(ticket, campo) != valor:
            return False
    if query.status and ticket.status.value != query.status:
        return False
    if query.prioridade and ticket.prioridade.value != query.prioridade:
        return False
    for campo in ("departamento_id", "categoria_id", "responsavel_id"):
        valor = getattr(query, campo)
        if valor and getattr(ticket, campo) != valor:
            return False
    if query.busca:
        termo = query.busca.lower()
        textos = (ticket.numero, ticket.assunto, ticket.descricao)
        if not any(termo in texto.lower() for texto in textos):
            return False
    return True


class InMemoryTicketRepository:
    """
    Implementação em memória do TicketRepository.

    Guarda cópias das entidades, de modo que duas leituras do mesmo
    ticket se comportam como duas requisições concorrentes.

    Example:
        repo = InMemoryTicketRepository()
        repo.add(ticket)
        found = repo.get_by_id(ticket.id)
    """

    def __init__(self):
        self._tickets: Dict[str, TicketEntity] = {}
        self._historico: Dict[str, List[HistoryEntry]] = {}

    def add(self, ticket: TicketEntity) -> None:
        if any(t.numero == ticket.numero for t in self._tickets.values()):
            raise DuplicateTicketNumberError(ticket.numero)
        self._historico.setdefault(ticket.id, []).extend(ticket.coletar_historico())
        self._tickets[ticket.id] = copy.deepcopy(ticket)

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        ticket = self._tickets.get(ticket_id)
        return copy.deepcopy(ticket) if ticket else None

    def update_if_status(self, ticket: TicketEntity, status_esperado: TicketStatus) -> bool:
        atual = self._tickets.get(ticket.id)
        if atual is None or atual.status != status_esperado:
            return False
        self._gravar(ticket, responsavel_id=atual.responsavel_id)
        return True

    def assign_if_status(
        self,
        ticket: TicketEntity,
        status_esperado: TicketStatus,
        responsavel_esperado: Optional[str],
    ) -> bool:
        atual = self._tickets.get(ticket.id)
        if atual is None or atual.status != status_esperado or atual.responsavel_id != responsavel_esperado:
            return False
        self._gravar(ticket, responsavel_id=ticket.responsavel_id)
        return True

    def _gravar(self, ticket: TicketEntity, responsavel_id: Optional[str]) -> None:
        self._historico.setdefault(ticket.id, []).extend(ticket.coletar_historico())
        novo = copy.deepcopy(ticket)
        novo.horas_reais = self._tickets[ticket.id].horas_reais
        novo.responsavel_id = responsavel_id
        self._tickets[ticket.id] = novo

    def delete(self, ticket_id: str) -> None:
        self._tickets.pop(ticket_id, None)
        self._historico.pop(ticket_id, None)

    def last_number_with_prefix(self, prefixo: str) -> Optional[str]:
        numeros = [t.numero for t in self._tickets.values() if t.numero.startswith(prefixo)]
        return max(numeros) if numeros else None

    def list_filtered(
        self,
        escopo: Dict[str, str],
        query: ListarTicketsQueryDTO,
    ) -> List[TicketEntity]:
        encontrados = [
            copy.deepcopy(t) for t in self._tickets.values()
            if _corresponde(t, escopo, query)
        ]
        return sorted(encontrados, key=lambda t: t.criado_em, reverse=True)

    def list_paginated(
        self,
        escopo: Dict[str, str],
        query: ListarTicketsQueryDTO,
    ) -> Tuple[List[TicketEntity], int]:
        encontrados = self.list_filtered(escopo, query)
        inicio = (query.pagina - 1) * query.por_pagina
        return encontrados[inicio:inicio + query.por_pagina], len(encontrados)

    def count_by_field(self, escopo: Dict[str, str], campo: str) -> Dict[str, int]:
        contagem: Dict[str, int] = {}
        for ticket in self.list_filtered(escopo, ListarTicketsQueryDTO()):
            chave = getattr(ticket, campo).value
            contagem[chave] = contagem.get(chave, 0) + 1
        return contagem

    def list_history(self, ticket_id: str) -> List[HistoryEntry]:
        return sorted(self._historico.get(ticket_id, []), key=lambda h: h.criado_em)

    def increment_actual_hours(self, ticket_id: str, horas: float) -> None:
        ticket = self._tickets[ticket_id]
        ticket.horas_reais = (ticket.horas_reais or 0.0) + horas

    def count(self) -> int:
        return len(self._tickets)

    def clear(self) -> None:
        """Limpa todos os dados (útil para testes)."""
        self._tickets.clear()
        self._historico.clear()


class InMemoryWorkLogRepository:
    """Ledger em memória; incrementa horas no InMemoryTicketRepository."""

    def __init__(self, ticket_repo: InMemoryTicketRepository):
        self._ticket_repo = ticket_repo
        self._registros: List[WorkLogEntry] = []

    def add(self, registro: WorkLogEntry) -> None:
        self._ticket_repo.increment_actual_hours(registro.ticket_id, registro.horas)
        self._registros.append(registro)

    def list_by_ticket(self, ticket_id: str) -> List[WorkLogEntry]:
        return [r for r in self._registros if r.ticket_id == ticket_id]

    def total_hours(self, ticket_id: str) -> float:
        return sum(r.horas for r in self.list_by_ticket(ticket_id))


class InMemoryCommentRepository:
    def __init__(self):
        self._comentarios: Dict[str, CommentEntity] = {}

    def save(self, comentario: CommentEntity) -> None:
        self._comentarios[comentario.id] = copy.deepcopy(comentario)

    def get_by_id(self, comentario_id: str) -> Optional[CommentEntity]:
        comentario = self._comentarios.get(comentario_id)
        return copy.deepcopy(comentario) if comentario else None

    def list_by_ticket(self, ticket_id: str) -> List[CommentEntity]:
        encontrados = [copy.deepcopy(c) for c in self._comentarios.values() if c.ticket_id == ticket_id]
        return sorted(encontrados, key=lambda c: c.criado_em)

    def delete(self, comentario_id: str) -> None:
        self._comentarios.pop(comentario_id, None)


class InMemoryDepartmentRepository:
    def __init__(self):
        self._departamentos: Dict[str, DepartmentEntity] = {}

    def save(self, departamento: DepartmentEntity) -> None:
        self._departamentos[departamento.id] = departamento

    def get_by_id(self, departamento_id: str) -> Optional[DepartmentEntity]:
        return self._departamentos.get(departamento_id)


class InMemoryCategoryRepository:
    def __init__(self):
        self._categorias: Dict[str, CategoryEntity] = {}

    def save(self, categoria: CategoryEntity) -> None:
        self._categorias[categoria.id] = categoria

    def get_by_id(self, categoria_id: str) -> Optional[CategoryEntity]:
        return self._categorias.get(categoria_id)
