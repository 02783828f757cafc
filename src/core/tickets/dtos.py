"""
Data Transfer Objects (DTOs) do Domínio de Tickets.

DTOs são estruturas simples para transportar dados entre camadas,
evitando vazamento de modelos internos (entidades) para camadas externas.

Tipos de DTOs:
- Input DTOs: Recebem dados de entrada (de APIs)
- Output DTOs: Formatam dados para resposta
- Query DTOs: Filtros e paginação de listagens
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional

from .entities import TicketEntity


def _iso(valor: Optional[datetime]) -> Optional[str]:
    return valor.isoformat() if valor else None


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class CriarTicketInputDTO:
    """
    DTO de entrada para criar ticket.

    O criador não faz parte do DTO: é sempre o ator autenticado.

    Attributes:
        assunto: Assunto do ticket
        descricao: Descrição detalhada
        departamento_id: Departamento responsável
        categoria_id: Categoria (deve pertencer ao departamento)
        prioridade: Prioridade (nome do enum, ex: "ALTA")
        tags: Tags livres
        horas_estimadas: Estimativa opcional
        data_vencimento: Prazo opcional
        projeto_id: Projeto vinculado (opcional)
    """

    assunto: str
    descricao: str
    departamento_id: str
    categoria_id: str
    prioridade: str = "MEDIA"
    tags: tuple = field(default_factory=tuple)  # tuple para ser hashable
    horas_estimadas: Optional[float] = None
    data_vencimento: Optional[datetime] = None
    projeto_id: Optional[str] = None


@dataclass(frozen=True)
class EditarTicketInputDTO:
    """Campos editáveis; None significa "não alterar"."""

    assunto: Optional[str] = None
    descricao: Optional[str] = None
    prioridade: Optional[str] = None
    tags: Optional[tuple] = None
    horas_estimadas: Optional[float] = None
    data_vencimento: Optional[datetime] = None


@dataclass(frozen=True)
class RegistrarTrabalhoInputDTO:
    """
    DTO de entrada para registro de horas.

    Attributes:
        ticket_id: Ticket trabalhado
        horas: Horas (> 0 e <= 24)
        descricao: O que foi feito (10..1000 caracteres)
        data_trabalho: Dia do trabalho (últimos 30 dias, não futuro)
    """

    ticket_id: str
    horas: float
    descricao: str
    data_trabalho: date


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class TicketOutputDTO:
    """
    DTO de saída completo com dados do ticket.

    Usado para resposta detalhada de um único ticket.
    """

    id: str
    numero: str
    assunto: str
    descricao: str
    status: str
    prioridade: str
    tags: List[str]
    horas_estimadas: Optional[float]
    horas_reais: Optional[float]
    data_vencimento: Optional[datetime]
    resolvido_em: Optional[datetime]
    fechado_em: Optional[datetime]
    criador_id: str
    responsavel_id: Optional[str]
    departamento_id: str
    categoria_id: str
    projeto_id: Optional[str]
    criado_em: datetime
    atualizado_em: datetime

    @classmethod
    def from_entity(cls, entity: TicketEntity) -> "TicketOutputDTO":
        """
        Factory method para converter entidade em DTO.

        Args:
            entity: Entidade TicketEntity

        Returns:
            DTO com dados da entidade
        """
        return cls(
            id=entity.id,
            numero=entity.numero,
            assunto=entity.assunto,
            descricao=entity.descricao,
            status=entity.status.value,
            prioridade=entity.prioridade.value,
            tags=list(entity.tags),
            horas_estimadas=entity.horas_estimadas,
            horas_reais=entity.horas_reais,
            data_vencimento=entity.data_vencimento,
            resolvido_em=entity.resolvido_em,
            fechado_em=entity.fechado_em,
            criador_id=entity.criador_id,
            responsavel_id=entity.responsavel_id,
            departamento_id=entity.departamento_id,
            categoria_id=entity.categoria_id,
            projeto_id=entity.projeto_id,
            criado_em=entity.criado_em,
            atualizado_em=entity.atualizado_em,
        )

    def to_dict(self) -> dict:
        """Converte para dicionário (serialização JSON)."""
        return {
            "id": self.id,
            "numero": self.numero,
            "assunto": self.assunto,
            "descricao": self.descricao,
            "status": self.status,
            "prioridade": self.prioridade,
            "tags": self.tags,
            "horas_estimadas": self.horas_estimadas,
            "horas_reais": self.horas_reais,
            "data_vencimento": _iso(self.data_vencimento),
            "resolvido_em": _iso(self.resolvido_em),
            "fechado_em": _iso(self.fechado_em),
            "criador_id": self.criador_id,
            "responsavel_id": self.responsavel_id,
            "departamento_id": self.departamento_id,
            "categoria_id": self.categoria_id,
            "projeto_id": self.projeto_id,
            "criado_em": self.criado_em.isoformat(),
            "atualizado_em": self.atualizado_em.isoformat(),
        }


@dataclass
class TicketListItemDTO:
    """
    DTO otimizado para listagens de tickets.

    Contém apenas campos necessários para exibição em lista.
    """

    id: str
    numero: str
    assunto: str
    status: str
    prioridade: str
    departamento_id: str
    responsavel_id: Optional[str]
    criado_em: datetime

    @classmethod
    def from_entity(cls, entity: TicketEntity) -> "TicketListItemDTO":
        return cls(
            id=entity.id,
            numero=entity.numero,
            assunto=entity.assunto,
            status=entity.status.value,
            prioridade=entity.prioridade.value,
            departamento_id=entity.departamento_id,
            responsavel_id=entity.responsavel_id,
            criado_em=entity.criado_em,
        )

    def to_dict(self) -> dict:
        """Converte para dicionário."""
        return {
            "id": self.id,
            "numero": self.numero,
            "assunto": self.assunto,
            "status": self.status,
            "prioridade": self.prioridade,
            "departamento_id": self.departamento_id,
            "responsavel_id": self.responsavel_id,
            "criado_em": self.criado_em.isoformat(),
        }


@dataclass
class ResultadoLoteDTO:
    """
    Resultado de operações em lote.

    Attributes:
        atualizados: IDs dos tickets alterados
        ignorados: IDs fora do escopo ou em status não elegível
        falhas: ID → mensagem de erro (apenas transição em lote)
    """

    atualizados: List[str] = field(default_factory=list)
    ignorados: List[str] = field(default_factory=list)
    falhas: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "atualizados": self.atualizados,
            "ignorados": self.ignorados,
            "falhas": self.falhas,
            "total_atualizados": len(self.atualizados),
        }


# =============================================================================
# QUERY DTOs (Filtros de Busca)
# =============================================================================

@dataclass(frozen=True)
class ListarTicketsQueryDTO:
    """
    DTO para parâmetros de busca/filtro de tickets.

    O escopo do ator é aplicado por cima destes filtros; nenhum filtro
    amplia o que o ator pode ver.

    Attributes:
        status: Filtrar por status (opcional)
        prioridade: Filtrar por prioridade (opcional)
        departamento_id: Filtrar por departamento (opcional)
        categoria_id: Filtrar por categoria (opcional)
        responsavel_id: Filtrar por responsável (opcional)
        busca: Texto livre sobre número, assunto e descrição
        pagina: Número da página (1-indexed)
        por_pagina: Itens por página (1..100)
    """

    status: Optional[str] = None
    prioridade: Optional[str] = None
    departamento_id: Optional[str] = None
    categoria_id: Optional[str] = None
    responsavel_id: Optional[str] = None
    busca: Optional[str] = None
    pagina: int = 1
    por_pagina: int = 20

    POR_PAGINA_MAX = 100

    def filtros(self) -> Dict[str, str]:
        """Filtros de igualdade informados (sem paginação nem busca)."""
        candidatos = {
            "status": self.status,
            "prioridade": self.prioridade,
            "departamento_id": self.departamento_id,
            "categoria_id": self.categoria_id,
            "responsavel_id": self.responsavel_id,
        }
        return {chave: valor for chave, valor in candidatos.items() if valor}


@dataclass
class PaginatedResultDTO:
    """
    DTO para resultados paginados.

    Attributes:
        items: Lista de itens da página atual
        total: Total de itens (sem paginação)
        pagina: Página atual
        por_pagina: Itens por página
    """

    items: List[TicketListItemDTO]
    total: int
    pagina: int
    por_pagina: int

    @property
    def total_paginas(self) -> int:
        """Calcula total de páginas."""
        if self.por_pagina <= 0:
            return 0
        return (self.total + self.por_pagina - 1) // self.por_pagina

    @property
    def tem_proxima(self) -> bool:
        return self.pagina < self.total_paginas

    @property
    def tem_anterior(self) -> bool:
        return self.pagina > 1

    def to_dict(self) -> dict:
        return {
            "items": [item.to_dict() for item in self.items],
            "total": self.total,
            "pagina": self.pagina,
            "por_pagina": self.por_pagina,
            "total_paginas": self.total_paginas,
            "tem_proxima": self.tem_proxima,
            "tem_anterior": self.tem_anterior,
        }
