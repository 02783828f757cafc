"""
Entidades do Domínio de Notificações.

- NotificationEntity: registro na caixa de entrada de um ator
- NotificationKind: tipo visual da notificação
- EnviarEmailEffect / EnviarRelatorioFechamentoEffect: efeitos de
  entrega calculados pelo fan-out e executados após o commit

A notificação tem ciclo de vida próprio: marcar como lida ou excluir
nunca afeta o ticket.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union
import uuid

from src.core.shared.clock import agora
from src.core.shared.exceptions import ValidationError


class NotificationKind(Enum):
    INFO = "INFO"
    ADVERTENCIA = "ADVERTENCIA"
    ERRO = "ERRO"
    SUCESSO = "SUCESSO"

    @classmethod
    def from_string(cls, value: str) -> "NotificationKind":
        try:
            return cls[(value or "").strip().upper()]
        except KeyError:
            raise ValidationError(f"Tipo de notificação inválido: {value}", field="tipo")


@dataclass
class NotificationEntity:
    """
    Entidade de Domínio: Notificação.

    Attributes:
        destinatario_id: Ator que recebe a notificação
        titulo: Título curto (ex: "Novo ticket: 2025-07-000001")
        mensagem: Corpo da notificação
        tipo: NotificationKind
        ticket_id: Ticket relacionado (opcional)
        lida: Se já foi lida
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    destinatario_id: str = ""
    titulo: str = ""
    mensagem: str = ""
    tipo: NotificationKind = NotificationKind.INFO
    ticket_id: Optional[str] = None
    lida: bool = False
    criado_em: datetime = field(default_factory=agora)
    lida_em: Optional[datetime] = None

    @classmethod
    def criar(
        cls,
        destinatario_id: str,
        titulo: str,
        mensagem: str,
        tipo: NotificationKind = NotificationKind.INFO,
        ticket_id: Optional[str] = None,
    ) -> "NotificationEntity":
        if not destinatario_id:
            raise ValidationError("Destinatário é obrigatório", field="destinatario_id")
        if not titulo or not titulo.strip():
            raise ValidationError("Título é obrigatório", field="titulo")
        return cls(
            destinatario_id=destinatario_id,
            titulo=titulo.strip(),
            mensagem=(mensagem or "").strip(),
            tipo=tipo,
            ticket_id=ticket_id,
        )

    def marcar_como_lida(self, momento: Optional[datetime] = None) -> None:
        if self.lida:
            return
        self.lida = True
        self.lida_em = momento or agora()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "destinatario_id": self.destinatario_id,
            "titulo": self.titulo,
            "mensagem": self.mensagem,
            "tipo": self.tipo.value,
            "ticket_id": self.ticket_id,
            "lida": self.lida,
            "criado_em": self.criado_em.isoformat(),
            "lida_em": self.lida_em.isoformat() if self.lida_em else None,
        }


@dataclass(frozen=True)
class EnviarEmailEffect:
    """Email simples para uma lista de endereços."""

    destinatarios: Tuple[str, ...]
    assunto: str
    corpo: str


@dataclass(frozen=True)
class EnviarRelatorioFechamentoEffect:
    """Relatório de fechamento do ticket enviado ao criador."""

    ticket_id: str
    numero: str
    destinatario: str


Effect = Union[EnviarEmailEffect, EnviarRelatorioFechamentoEffect]
