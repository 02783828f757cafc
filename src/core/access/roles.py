"""
Modelo de Papéis e Capacidades.

Tabela fixa Papel → conjunto de capacidades. É a única fonte de
verdade consultada por toda verificação de autorização; nenhum caso de
uso compara papéis diretamente para decidir permissões.

Papéis:
    ADMIN                - administra tudo
    CHEFE_DEPARTAMENTO   - gerencia os tickets do próprio departamento
    AGENTE               - trabalha nos tickets atribuídos a ele
    CLIENTE              - abre e acompanha os próprios tickets
"""

from enum import Enum
from typing import Dict, FrozenSet

from src.core.shared.exceptions import PermissionDeniedError


class Role(Enum):
    """Papéis de um ator autenticado."""

    ADMIN = "ADMIN"
    CHEFE_DEPARTAMENTO = "CHEFE_DEPARTAMENTO"
    AGENTE = "AGENTE"
    CLIENTE = "CLIENTE"

    @property
    def exige_departamento(self) -> bool:
        """Chefes e agentes sempre pertencem a um departamento."""
        return self in (Role.CHEFE_DEPARTAMENTO, Role.AGENTE)

    @property
    def pode_ser_responsavel(self) -> bool:
        """Papéis aceitos como responsável (assignee) de um ticket."""
        return self in (Role.AGENTE, Role.CHEFE_DEPARTAMENTO)

    @classmethod
    def from_string(cls, value: str) -> "Role":
        """
        Converte string para enum.

        Aceita também o nome legado "JEFE_DEPARTAMENTO".

        Raises:
            ValueError: Se valor inválido
        """
        normalizado = (value or "").strip().upper()
        if normalizado == "JEFE_DEPARTAMENTO":
            normalizado = "CHEFE_DEPARTAMENTO"
        try:
            return cls[normalizado]
        except KeyError:
            raise ValueError(f"Papel inválido: {value}")


class Capability(Enum):
    """Capacidades concedidas pelos papéis."""

    TICKETS_CRIAR = "tickets.create"
    TICKETS_VER_TODOS = "tickets.view_all"
    TICKETS_VER_DEPARTAMENTO = "tickets.view_department"
    TICKETS_VER_ATRIBUIDOS = "tickets.view_assigned"
    TICKETS_VER_PROPRIOS = "tickets.view_own"
    TICKETS_ALTERAR_STATUS = "tickets.change_status"
    TICKETS_ATRIBUIR = "tickets.assign"
    TICKETS_EDITAR_DEPARTAMENTO = "tickets.edit_department"
    TICKETS_REABRIR = "tickets.reopen"
    TICKETS_EXCLUIR = "tickets.delete"
    TICKETS_ESTATISTICAS = "tickets.stats"
    TICKETS_EXPORTAR = "tickets.export"
    TICKETS_COMENTAR = "tickets.comment"
    TICKETS_COMENTAR_INTERNO = "tickets.comment_internal"
    TICKETS_VER_INTERNOS = "tickets.view_internal"
    COMENTARIOS_MODERAR = "comments.moderate"
    COMENTARIOS_EDITAR_QUALQUER = "comments.edit_any"
    TRABALHO_REGISTRAR = "trabajo.registrar"
    TRABALHO_REGISTRAR_QUALQUER = "trabajo.registrar_cualquiera"
    NOTIFICACOES_GERENCIAR = "notifications.manage"
    USUARIOS_GERENCIAR = "users.manage"


_COMUNS = frozenset({
    Capability.TICKETS_CRIAR,
    Capability.TICKETS_ALTERAR_STATUS,
    Capability.TICKETS_COMENTAR,
    Capability.NOTIFICACOES_GERENCIAR,
})

_EQUIPE = _COMUNS | {
    Capability.TICKETS_COMENTAR_INTERNO,
    Capability.TICKETS_VER_INTERNOS,
}

_GESTAO = _EQUIPE | {
    Capability.TICKETS_ATRIBUIR,
    Capability.TICKETS_EDITAR_DEPARTAMENTO,
    Capability.TICKETS_REABRIR,
    Capability.TICKETS_ESTATISTICAS,
    Capability.TICKETS_EXPORTAR,
    Capability.COMENTARIOS_MODERAR,
    Capability.TRABALHO_REGISTRAR,
    Capability.TRABALHO_REGISTRAR_QUALQUER,
}

CAPACIDADES_POR_PAPEL: Dict[Role, FrozenSet[Capability]] = {
    Role.ADMIN: frozenset(_GESTAO | {
        Capability.TICKETS_VER_TODOS,
        Capability.TICKETS_EXCLUIR,
        Capability.COMENTARIOS_EDITAR_QUALQUER,
        Capability.USUARIOS_GERENCIAR,
    }),
    Role.CHEFE_DEPARTAMENTO: frozenset(_GESTAO | {
        Capability.TICKETS_VER_DEPARTAMENTO,
    }),
    Role.AGENTE: frozenset(_EQUIPE | {
        Capability.TICKETS_VER_ATRIBUIDOS,
        Capability.TRABALHO_REGISTRAR,
    }),
    Role.CLIENTE: frozenset(_COMUNS | {
        Capability.TICKETS_VER_PROPRIOS,
    }),
}


def capacidades_de(role: Role) -> FrozenSet[Capability]:
    """
    Retorna o conjunto de capacidades concedidas a um papel.

    Função pura, sem efeitos colaterais.
    """
    return CAPACIDADES_POR_PAPEL[role]


def tem_capacidade(ator, capacidade: Capability) -> bool:
    """Verifica se o ator (ativo) possui a capacidade."""
    return ator.ativo and capacidade in capacidades_de(ator.role)


def exigir_capacidade(ator, capacidade: Capability) -> None:
    """
    Garante que o ator possui a capacidade.

    Raises:
        PermissionDeniedError: Se o papel do ator não concede a capacidade
    """
    if not tem_capacidade(ator, capacidade):
        raise PermissionDeniedError(
            "Acesso negado",
            capability=capacidade.value,
        )
