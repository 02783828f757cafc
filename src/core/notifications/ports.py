"""
Ports (Interfaces) do Domínio de Notificações.

- NotificationRepository: caixa de entrada persistida
- NotificationDelivery: entrega best-effort (email, relatório de
  fechamento); chamada apenas depois do commit
"""

from datetime import datetime
from typing import Dict, List, Optional, Protocol, Tuple, runtime_checkable
import copy

from src.core.shared.clock import agora

from .entities import NotificationEntity


@runtime_checkable
class NotificationRepository(Protocol):
    """
    Interface para persistência de notificações.

    Implementações:
    - DjangoNotificationRepository (ORM)
    - InMemoryNotificationRepository (testes)
    """

    def save(self, notificacao: NotificationEntity) -> None:
        ...

    def save_many(self, notificacoes: List[NotificationEntity]) -> None:
        ...

    def get_by_id(self, notificacao_id: str) -> Optional[NotificationEntity]:
        ...

    def list_by_recipient(
        self,
        destinatario_id: str,
        apenas_nao_lidas: bool = False,
        pagina: int = 1,
        por_pagina: int = 20,
    ) -> Tuple[List[NotificationEntity], int]:
        """(página mais recente primeiro, total)"""
        ...

    def count_unread(self, destinatario_id: str) -> int:
        ...

    def mark_all_read(self, destinatario_id: str, momento: datetime) -> int:
        """Marca todas como lidas; retorna quantas mudaram."""
        ...

    def delete(self, notificacao_id: str) -> None:
        ...

    def delete_read_older_than(self, limite: datetime) -> int:
        """Remove lidas criadas antes do limite; retorna quantas."""
        ...


@runtime_checkable
class NotificationDelivery(Protocol):
    """
    Interface de entrega externa.

    Implementações devem ter tempo limitado (timeout) e podem lançar
    qualquer exceção: o despachante de efeitos as converte em
    DependencyFailureError e as descarta.
    """

    def send_email(self, destinatarios: List[str], assunto: str, corpo: str) -> None:
        ...

    def send_closure_report(self, ticket_id: str, numero: str, destinatario: str) -> None:
        ...


class InMemoryNotificationRepository:
    """Implementação em memória do NotificationRepository (testes)."""

    def __init__(self):
        self._notificacoes: Dict[str, NotificationEntity] = {}

    def save(self, notificacao: NotificationEntity) -> None:
        self._notificacoes[notificacao.id] = copy.deepcopy(notificacao)

    def save_many(self, notificacoes: List[NotificationEntity]) -> None:
        for notificacao in notificacoes:
            self.save(notificacao)

    def get_by_id(self, notificacao_id: str) -> Optional[NotificationEntity]:
        notificacao = self._notificacoes.get(notificacao_id)
        return copy.deepcopy(notificacao) if notificacao else None

    def list_by_recipient(
        self,
        destinatario_id: str,
        apenas_nao_lidas: bool = False,
        pagina: int = 1,
        por_pagina: int = 20,
    ) -> Tuple[List[NotificationEntity], int]:
        encontradas = sorted(
            (
                copy.deepcopy(n) for n in self._notificacoes.values()
                if n.destinatario_id == destinatario_id and not (apenas_nao_lidas and n.lida)
            ),
            key=lambda n: n.criado_em,
            reverse=True,
        )
        inicio = (pagina - 1) * por_pagina
        return encontradas[inicio:inicio + por_pagina], len(encontradas)

    def count_unread(self, destinatario_id: str) -> int:
        return sum(
            1 for n in self._notificacoes.values()
            if n.destinatario_id == destinatario_id and not n.lida
        )

    def mark_all_read(self, destinatario_id: str, momento: datetime) -> int:
        alteradas = 0
        for notificacao in self._notificacoes.values():
            if notificacao.destinatario_id == destinatario_id and not notificacao.lida:
                notificacao.marcar_como_lida(momento)
                alteradas += 1
        return alteradas

    def delete(self, notificacao_id: str) -> None:
        self._notificacoes.pop(notificacao_id, None)

    def delete_read_older_than(self, limite: datetime) -> int:
        antigas = [
            n.id for n in self._notificacoes.values()
            if n.lida and n.criado_em < limite
        ]
        for notificacao_id in antigas:
            del self._notificacoes[notificacao_id]
        return len(antigas)

    def list_all(self) -> List[NotificationEntity]:
        return [copy.deepcopy(n) for n in self._notificacoes.values()]

    def clear(self) -> None:
        self._notificacoes.clear()


class InMemoryNotificationDelivery:
    """
    Entrega em memória: registra as chamadas.

    `falhar=True` simula colaborador indisponível.
    """

    def __init__(self, falhar: bool = False):
        self.falhar = falhar
        self.emails: List[Tuple[Tuple[str, ...], str, str]] = []
        self.relatorios: List[Tuple[str, str, str]] = []
        self.tentativas = 0
        self.ultima_tentativa: Optional[datetime] = None

    def _registrar_tentativa(self) -> None:
        self.tentativas += 1
        self.ultima_tentativa = agora()
        if self.falhar:
            raise ConnectionError("Servidor de email indisponível")

    def send_email(self, destinatarios: List[str], assunto: str, corpo: str) -> None:
        self._registrar_tentativa()
        self.emails.append((tuple(destinatarios), assunto, corpo))

    def send_closure_report(self, ticket_id: str, numero: str, destinatario: str) -> None:
        self._registrar_tentativa()
        self.relatorios.append((ticket_id, numero, destinatario))
