"""
Ports do domínio de acesso.

O core recebe atores já autenticados; este port só resolve um ID em
ator (com papel/departamento) e lista destinatários por papel para o
fan-out de notificações.
"""

from typing import Dict, List, Optional, Protocol, runtime_checkable
import copy

from .actors import ActorEntity
from .roles import Role


@runtime_checkable
class ActorRepository(Protocol):
    """
    Interface de resolução de atores.

    Implementações:
    - DjangoActorRepository (ORM)
    - InMemoryActorRepository (testes)
    """

    def get_by_id(self, actor_id: str) -> Optional[ActorEntity]:
        """Busca ator por ID (ativo ou não)."""
        ...

    def list_active_by_role(
        self,
        role: Role,
        departamento_id: Optional[str] = None,
    ) -> List[ActorEntity]:
        """
        Lista atores ativos com o papel informado.

        Args:
            role: Papel desejado
            departamento_id: Restringe ao departamento (opcional)
        """
        ...


class InMemoryActorRepository:
    """Implementação em memória do ActorRepository (testes)."""

    def __init__(self):
        self._atores: Dict[str, ActorEntity] = {}

    def save(self, ator: ActorEntity) -> None:
        self._atores[ator.id] = copy.deepcopy(ator)

    def get_by_id(self, actor_id: str) -> Optional[ActorEntity]:
        ator = self._atores.get(actor_id)
        return copy.deepcopy(ator) if ator else None

    def list_active_by_role(
        self,
        role: Role,
        departamento_id: Optional[str] = None,
    ) -> List[ActorEntity]:
        return [
            copy.deepcopy(a) for a in self._atores.values()
            if a.ativo
            and a.role == role
            and (departamento_id is None or a.departamento_id == departamento_id)
        ]

    def clear(self) -> None:
        self._atores.clear()
