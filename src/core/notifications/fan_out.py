"""
Fan-out de Notificações.

Dado um evento de ciclo de vida, calcula os destinatários (por papel e
por relação com o ticket) e devolve as notificações a gravar e os
efeitos de entrega a despachar. Não grava nem envia nada: é uma
função do evento e dos atores atuais.

Regras:
    TicketCriado         → chefes ativos do departamento + admins ativos
                           (notificação + email)
    TicketAtribuido      → novo responsável + criador
    StatusAlterado       → criador; FECHADO dispara o relatório de
                           fechamento
    ComentarioAdicionado → criador + responsável, exceto o autor
                           (comentários internos não notificam)
"""

from dataclasses import dataclass, field
import logging
from typing import Callable, Dict, List, Optional, Type

from src.core.access.actors import ActorEntity
from src.core.access.ports import ActorRepository
from src.core.access.roles import Role
from src.core.shared.events import DomainEvent
from src.core.tickets.entities import TicketStatus
from src.core.tickets.events import (
    ComentarioAdicionadoEvent,
    StatusAlteradoEvent,
    TicketAtribuidoEvent,
    TicketCriadoEvent,
)

from .entities import (
    Effect,
    EnviarEmailEffect,
    EnviarRelatorioFechamentoEffect,
    NotificationEntity,
    NotificationKind,
)

logger = logging.getLogger(__name__)


@dataclass
class ResultadoFanOut:
    """Notificações a gravar e efeitos a despachar após o commit."""

    notificacoes: List[NotificationEntity] = field(default_factory=list)
    efeitos: List[Effect] = field(default_factory=list)

    @property
    def vazio(self) -> bool:
        return not self.notificacoes and not self.efeitos


def _sem_duplicados(atores: List[Optional[ActorEntity]]) -> List[ActorEntity]:
    vistos = set()
    resultado = []
    for ator in atores:
        if ator is None or ator.id in vistos:
            continue
        vistos.add(ator.id)
        resultado.append(ator)
    return resultado


class NotificationFanOut:
    """
    Calcula destinatários e efeitos para cada tipo de evento.

    Example:
        fan_out = NotificationFanOut(actor_repo)
        resultado = fan_out.ao_evento(evento)
        for notificacao in resultado.notificacoes:
            notification_repo.save(notificacao)
    """

    def __init__(self, actor_repo: ActorRepository):
        self.actor_repo = actor_repo
        self._regras: Dict[Type[DomainEvent], Callable[[DomainEvent], ResultadoFanOut]] = {
            TicketCriadoEvent: self._ticket_criado,
            TicketAtribuidoEvent: self._ticket_atribuido,
            StatusAlteradoEvent: self._status_alterado,
            ComentarioAdicionadoEvent: self._comentario_adicionado,
        }

    def ao_evento(self, event: DomainEvent) -> ResultadoFanOut:
        """Eventos sem regra (ex: TrabalhoRegistrado) não geram nada."""
        regra = self._regras.get(type(event))
        if regra is None:
            return ResultadoFanOut()
        resultado = regra(event)
        logger.debug(
            f"Fan-out de {event.event_type}: {len(resultado.notificacoes)} notificações, "
            f"{len(resultado.efeitos)} efeitos"
        )
        return resultado

    def _ticket_criado(self, event: TicketCriadoEvent) -> ResultadoFanOut:
        chefes = self.actor_repo.list_active_by_role(Role.CHEFE_DEPARTAMENTO, event.departamento_id)
        admins = self.actor_repo.list_active_by_role(Role.ADMIN)
        destinatarios = _sem_duplicados(chefes + admins)

        titulo = f"Novo ticket: {event.numero}"
        mensagem = f'Um novo ticket "{event.assunto}" foi aberto no seu departamento'

        resultado = ResultadoFanOut(
            notificacoes=[
                NotificationEntity.criar(d.id, titulo, mensagem, NotificationKind.INFO, event.aggregate_id)
                for d in destinatarios
            ]
        )
        emails = tuple(d.email for d in destinatarios if d.email)
        if emails:
            resultado.efeitos.append(EnviarEmailEffect(destinatarios=emails, assunto=titulo, corpo=mensagem))
        return resultado

    def _ticket_atribuido(self, event: TicketAtribuidoEvent) -> ResultadoFanOut:
        responsavel = self.actor_repo.get_by_id(event.responsavel_id)
        titulo = f"Ticket atribuído: {event.numero}"
        resultado = ResultadoFanOut()

        if responsavel:
            resultado.notificacoes.append(
                NotificationEntity.criar(
                    responsavel.id,
                    titulo,
                    f'O ticket "{event.assunto}" foi atribuído a você',
                    NotificationKind.INFO,
                    event.aggregate_id,
                )
            )

        if event.criador_id and (not responsavel or event.criador_id != responsavel.id):
            nome = responsavel.nome if responsavel else "um agente"
            resultado.notificacoes.append(
                NotificationEntity.criar(
                    event.criador_id,
                    titulo,
                    f'Seu ticket "{event.assunto}" foi atribuído a {nome}',
                    NotificationKind.INFO,
                    event.aggregate_id,
                )
            )
        return resultado

    def _status_alterado(self, event: StatusAlteradoEvent) -> ResultadoFanOut:
        fechado = event.status_novo == TicketStatus.FECHADO.value
        if event.reaberto:
            mensagem = f'Seu ticket "{event.assunto}" foi reaberto'
        else:
            mensagem = (
                f'O status do seu ticket "{event.assunto}" mudou de '
                f"{event.status_anterior} para {event.status_novo}"
            )

        resultado = ResultadoFanOut(
            notificacoes=[
                NotificationEntity.criar(
                    event.criador_id,
                    f"Ticket atualizado: {event.numero}",
                    mensagem,
                    NotificationKind.SUCESSO if fechado else NotificationKind.INFO,
                    event.aggregate_id,
                )
            ]
        )

        if fechado:
            criador = self.actor_repo.get_by_id(event.criador_id)
            if criador and criador.email:
                resultado.efeitos.append(
                    EnviarRelatorioFechamentoEffect(
                        ticket_id=event.aggregate_id,
                        numero=event.numero,
                        destinatario=criador.email,
                    )
                )
        return resultado

    def _comentario_adicionado(self, event: ComentarioAdicionadoEvent) -> ResultadoFanOut:
        if event.interno:
            return ResultadoFanOut()

        autor = self.actor_repo.get_by_id(event.autor_id)
        nome_autor = autor.nome if autor else "Alguém"

        destinatarios = []
        for ator_id in (event.criador_id, event.responsavel_id):
            if ator_id and ator_id != event.autor_id and ator_id not in destinatarios:
                destinatarios.append(ator_id)

        titulo = f"Novo comentário: {event.numero}"
        mensagem = f'{nome_autor} comentou no ticket "{event.assunto}"'
        return ResultadoFanOut(
            notificacoes=[
                NotificationEntity.criar(d, titulo, mensagem, NotificationKind.INFO, event.aggregate_id)
                for d in destinatarios
            ]
        )
