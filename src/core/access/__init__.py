"""
Domínio de Acesso - Papéis, Atores e Escopo.

- roles: tabela Papel → Capacidades (fonte única de autorização)
- actors: entidade ActorEntity
- scope: predicado de escopo sobre tickets e redação de comentários
"""

from .roles import Role, Capability, capacidades_de, tem_capacidade, exigir_capacidade
from .actors import ActorEntity
from .scope import TicketScope, escopo_para, pode_acessar, garantir_acesso, comentarios_visiveis
from .ports import ActorRepository

__all__ = [
    "Role",
    "Capability",
    "capacidades_de",
    "tem_capacidade",
    "exigir_capacidade",
    "ActorEntity",
    "TicketScope",
    "escopo_para",
    "pode_acessar",
    "garantir_acesso",
    "comentarios_visiveis",
    "ActorRepository",
]
