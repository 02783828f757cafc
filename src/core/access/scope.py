"""
Filtro de Escopo (Resolvedor de Propriedade).

Dado um ator, produz o predicado que restringe quais tickets ele pode
listar, ver e alterar. O mesmo predicado serve para filtrar listas
(`TicketScope.como_filtro`, traduzido pelo repositório) e para testar
uma instância concreta (`pode_acessar`), de modo que as duas decisões
nunca divergem.

Regras para o recurso Ticket:
    ADMIN               → sem restrição
    CHEFE_DEPARTAMENTO  → ticket.departamento_id == ator.departamento_id
    AGENTE              → ticket.responsavel_id == ator.id
    CLIENTE             → ticket.criador_id == ator.id

Ator inativo recebe um escopo vazio.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from src.core.shared.exceptions import PermissionDeniedError, ValidationError

from .roles import Capability, Role, tem_capacidade


RECURSO_TICKET = "Ticket"


@dataclass(frozen=True)
class TicketScope:
    """
    Predicado de escopo sobre tickets.

    Attributes:
        campo: Atributo do ticket comparado (None = sem restrição)
        valor: Valor exigido no atributo
        vazio: Se nenhum ticket está no escopo
    """

    campo: Optional[str] = None
    valor: Optional[str] = None
    vazio: bool = False

    @property
    def irrestrito(self) -> bool:
        return not self.vazio and self.campo is None

    def __call__(self, ticket) -> bool:
        if self.vazio:
            return False
        if self.campo is None:
            return True
        return getattr(ticket, self.campo) == self.valor

    def como_filtro(self) -> Dict[str, str]:
        """
        Representação declarativa para o repositório.

        Returns:
            Dicionário {campo: valor}; vazio quando irrestrito
        """
        if self.campo is None:
            return {}
        return {self.campo: self.valor}


def escopo_para(ator, recurso: str = RECURSO_TICKET) -> TicketScope:
    """
    Calcula o predicado de escopo do ator para o tipo de recurso.

    Raises:
        ValidationError: Se o tipo de recurso não é suportado
    """
    if recurso != RECURSO_TICKET:
        raise ValidationError(f"Recurso sem escopo definido: {recurso}", field="recurso")

    if not ator.ativo:
        return TicketScope(vazio=True)

    if ator.role == Role.ADMIN:
        return TicketScope()

    if ator.role == Role.CHEFE_DEPARTAMENTO:
        return TicketScope(campo="departamento_id", valor=ator.departamento_id)

    if ator.role == Role.AGENTE:
        return TicketScope(campo="responsavel_id", valor=ator.id)

    return TicketScope(campo="criador_id", valor=ator.id)


def pode_acessar(ator, ticket) -> bool:
    """Avalia o escopo do ator contra um ticket concreto."""
    return escopo_para(ator, RECURSO_TICKET)(ticket)


def garantir_acesso(ator, ticket) -> None:
    """
    Raises:
        PermissionDeniedError: Se o ticket está fora do escopo do ator
    """
    if not pode_acessar(ator, ticket):
        raise PermissionDeniedError("Acesso negado")


def comentarios_visiveis(ator, comentarios: Iterable) -> List:
    """
    Redação em nível de campo: remove comentários internos para quem
    não tem a capacidade de vê-los (clientes).
    """
    if tem_capacidade(ator, Capability.TICKETS_VER_INTERNOS):
        return list(comentarios)
    return [c for c in comentarios if not c.interno]
