"""
Use Cases do Domínio de Notificações.

- DespacharNotificacoesService: fan-out de um evento já confirmado
- EffectDispatcher: executa efeitos de entrega sem propagar falhas
- Caixa de entrada: listar, contar não lidas, marcar como lida(s),
  excluir
- LimparNotificacoesAntigasService: limpeza periódica

Um ator só enxerga e altera as próprias notificações. Notificação de
outro ator é tratada como inexistente.
"""

from datetime import timedelta
import logging
from typing import Iterable, Optional

from src.core.access.roles import Capability, exigir_capacidade
from src.core.shared.clock import agora
from src.core.shared.events import DomainEvent
from src.core.shared.exceptions import (
    DependencyFailureError,
    EntityNotFoundError,
    ValidationError,
)
from src.core.shared.interfaces import UnitOfWork

from .entities import (
    Effect,
    EnviarEmailEffect,
    EnviarRelatorioFechamentoEffect,
    NotificationEntity,
)
from .fan_out import NotificationFanOut, ResultadoFanOut
from .ports import NotificationDelivery, NotificationRepository

logger = logging.getLogger(__name__)


class EffectDispatcher:
    """
    Executa efeitos de entrega (fire-and-forget).

    Toda falha do colaborador vira DependencyFailureError, que é
    registrada no log e descartada. Nada aqui pode falhar a operação
    de ciclo de vida que originou o efeito.
    """

    def __init__(self, delivery: NotificationDelivery):
        self.delivery = delivery

    def despachar(self, efeitos: Iterable[Effect]) -> int:
        """
        Returns:
            Quantidade de efeitos entregues com sucesso
        """
        entregues = 0
        for efeito in efeitos:
            try:
                self._executar(efeito)
            except DependencyFailureError as e:
                logger.error(f"Falha de entrega descartada: {e}", exc_info=True)
            else:
                entregues += 1
        return entregues

    def _executar(self, efeito: Effect) -> None:
        try:
            if isinstance(efeito, EnviarEmailEffect):
                self.delivery.send_email(list(efeito.destinatarios), efeito.assunto, efeito.corpo)
            elif isinstance(efeito, EnviarRelatorioFechamentoEffect):
                self.delivery.send_closure_report(efeito.ticket_id, efeito.numero, efeito.destinatario)
            else:
                logger.warning(f"Efeito desconhecido ignorado: {efeito!r}")
        except Exception as e:
            raise DependencyFailureError(
                f"{type(efeito).__name__} falhou: {e}",
                dependency=type(self.delivery).__name__,
            ) from e


class DespacharNotificacoesService:
    """
    Use Case: Fan-out de um evento de ciclo de vida.

    Fluxo (sempre depois do commit da operação original):
    1. Calcular destinatários e efeitos
    2. Gravar notificações em transação própria
    3. Despachar efeitos de entrega (falhas descartadas)
    """

    def __init__(
        self,
        fan_out: NotificationFanOut,
        notification_repo: NotificationRepository,
        uow: UnitOfWork,
        dispatcher: EffectDispatcher,
    ):
        self.fan_out = fan_out
        self.notification_repo = notification_repo
        self.uow = uow
        self.dispatcher = dispatcher

    def execute(self, event: DomainEvent) -> ResultadoFanOut:
        resultado = self.fan_out.ao_evento(event)
        if resultado.vazio:
            return resultado

        if resultado.notificacoes:
            with self.uow:
                self.notification_repo.save_many(resultado.notificacoes)

        entregues = self.dispatcher.despachar(resultado.efeitos)

        logger.info(
            f"{event.event_type} {event.aggregate_id}: "
            f"{len(resultado.notificacoes)} notificações, "
            f"{entregues}/{len(resultado.efeitos)} entregas"
        )
        return resultado


def _carregar_propria(repo: NotificationRepository, ator, notificacao_id: str) -> NotificationEntity:
    exigir_capacidade(ator, Capability.NOTIFICACOES_GERENCIAR)
    notificacao = repo.get_by_id(notificacao_id)
    if not notificacao or notificacao.destinatario_id != ator.id:
        raise EntityNotFoundError(
            f"Notificação {notificacao_id} não encontrada",
            entity_type="Notificacao",
            entity_id=notificacao_id,
        )
    return notificacao


class ListarNotificacoesService:
    """Use Case: Caixa de entrada paginada do ator."""

    POR_PAGINA_MAX = 100

    def __init__(self, notification_repo: NotificationRepository):
        self.notification_repo = notification_repo

    def execute(self, ator, apenas_nao_lidas: bool = False, pagina: int = 1, por_pagina: int = 20) -> dict:
        exigir_capacidade(ator, Capability.NOTIFICACOES_GERENCIAR)
        if pagina < 1:
            raise ValidationError("Página deve ser maior ou igual a 1", field="pagina")
        if not (1 <= por_pagina <= self.POR_PAGINA_MAX):
            raise ValidationError(
                f"Itens por página deve estar entre 1 e {self.POR_PAGINA_MAX}",
                field="por_pagina",
            )

        itens, total = self.notification_repo.list_by_recipient(
            ator.id, apenas_nao_lidas=apenas_nao_lidas, pagina=pagina, por_pagina=por_pagina
        )
        return {
            "items": [n.to_dict() for n in itens],
            "total": total,
            "nao_lidas": self.notification_repo.count_unread(ator.id),
            "pagina": pagina,
            "por_pagina": por_pagina,
        }


class ContarNaoLidasService:
    def __init__(self, notification_repo: NotificationRepository):
        self.notification_repo = notification_repo

    def execute(self, ator) -> int:
        exigir_capacidade(ator, Capability.NOTIFICACOES_GERENCIAR)
        return self.notification_repo.count_unread(ator.id)


class MarcarComoLidaService:
    def __init__(self, notification_repo: NotificationRepository, uow: UnitOfWork):
        self.notification_repo = notification_repo
        self.uow = uow

    def execute(self, ator, notificacao_id: str) -> NotificationEntity:
        with self.uow:
            notificacao = _carregar_propria(self.notification_repo, ator, notificacao_id)
            notificacao.marcar_como_lida()
            self.notification_repo.save(notificacao)
        return notificacao


class MarcarTodasComoLidasService:
    def __init__(self, notification_repo: NotificationRepository, uow: UnitOfWork):
        self.notification_repo = notification_repo
        self.uow = uow

    def execute(self, ator) -> int:
        exigir_capacidade(ator, Capability.NOTIFICACOES_GERENCIAR)
        with self.uow:
            alteradas = self.notification_repo.mark_all_read(ator.id, agora())
        return alteradas


class ExcluirNotificacaoService:
    def __init__(self, notification_repo: NotificationRepository, uow: UnitOfWork):
        self.notification_repo = notification_repo
        self.uow = uow

    def execute(self, ator, notificacao_id: str) -> None:
        with self.uow:
            notificacao = _carregar_propria(self.notification_repo, ator, notificacao_id)
            self.notification_repo.delete(notificacao.id)


class LimparNotificacoesAntigasService:
    """
    Use Case: Remove notificações lidas mais antigas que N dias.

    Executado periodicamente (Celery beat).
    """

    def __init__(self, notification_repo: NotificationRepository, dias_padrao: int = 30):
        self.notification_repo = notification_repo
        self.dias_padrao = dias_padrao

    def execute(self, dias: Optional[int] = None) -> int:
        dias = self.dias_padrao if dias is None else dias
        if dias < 1:
            raise ValidationError("Dias deve ser maior ou igual a 1", field="dias")

        removidas = self.notification_repo.delete_read_older_than(agora() - timedelta(days=dias))
        logger.info(f"{removidas} notificações lidas com mais de {dias} dias removidas")
        return removidas
