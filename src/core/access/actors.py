"""
Entidade Ator.

Um ator é a identidade autenticada que executa operações. A
autenticação em si acontece fora do core; aqui só interessam o papel,
o departamento e o flag de ativo usados nas decisões de autorização.
"""

from dataclasses import dataclass, field
from typing import Optional
import uuid

from src.core.shared.exceptions import ValidationError

from .roles import Role


@dataclass
class ActorEntity:
    """
    Entidade de Domínio: Ator.

    Invariantes:
    - Exatamente um papel
    - CHEFE_DEPARTAMENTO e AGENTE exigem departamento
    - CLIENTE e ADMIN não pertencem a departamento
    - Ator inativo não age (mas seus registros continuam existindo)

    Attributes:
        id: Identificador único
        nome: Nome completo (usado em notas de histórico)
        email: Email para entrega de notificações
        role: Papel do ator
        departamento_id: Departamento (apenas chefes e agentes)
        ativo: Se o ator pode agir
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    nome: str = ""
    email: str = ""
    role: Role = Role.CLIENTE
    departamento_id: Optional[str] = None
    ativo: bool = True

    @classmethod
    def criar(
        cls,
        nome: str,
        email: str,
        role: Role,
        departamento_id: Optional[str] = None,
        ativo: bool = True,
        id: Optional[str] = None,
    ) -> "ActorEntity":
        """
        Factory method com validação das invariantes de departamento.

        Raises:
            ValidationError: Se nome vazio ou departamento incompatível com o papel
        """
        if not nome or not nome.strip():
            raise ValidationError("Nome é obrigatório", field="nome")

        if role.exige_departamento and not departamento_id:
            raise ValidationError(
                f"Papel {role.value} exige departamento",
                field="departamento_id",
            )

        if not role.exige_departamento and departamento_id:
            raise ValidationError(
                f"Papel {role.value} não pertence a departamento",
                field="departamento_id",
            )

        ator = cls(
            nome=nome.strip(),
            email=(email or "").strip().lower(),
            role=role,
            departamento_id=departamento_id,
            ativo=ativo,
        )
        if id:
            ator.id = id
        return ator

    def desativar(self) -> None:
        self.ativo = False

    @property
    def pode_ser_responsavel(self) -> bool:
        """Ativo e com papel AGENTE ou CHEFE_DEPARTAMENTO."""
        return self.ativo and self.role.pode_ser_responsavel

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ActorEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
