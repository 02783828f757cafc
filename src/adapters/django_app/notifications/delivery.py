"""
Entrega de notificações - implementações do port NotificationDelivery.

- DjangoEmailDelivery: envia na hora via django.core.mail, com
  timeout limitado (EMAIL_TIMEOUT)
- CeleryTaskDelivery: enfileira tasks Celery com retry limitado

O relatório de fechamento é um resumo em texto (dados do ticket,
histórico e horas registradas) enviado ao criador.
"""

from typing import List, Tuple
import logging

from django.conf import settings
from django.core.mail import EmailMessage, get_connection

from src.core.tickets.ports import TicketRepository, WorkLogRepository

logger = logging.getLogger(__name__)


def montar_relatorio_fechamento(
    ticket_repo: TicketRepository,
    work_log_repo: WorkLogRepository,
    ticket_id: str,
    numero: str,
) -> Tuple[str, str]:
    """
    Returns:
        (assunto, corpo) do email de fechamento

    Raises:
        LookupError: Se o ticket não existe mais
    """
    ticket = ticket_repo.get_by_id(ticket_id)
    if ticket is None:
        raise LookupError(f"Ticket {numero} não existe mais")

    linhas = [
        f"Ticket {ticket.numero} - Trabalho concluído",
        "",
        f"Assunto: {ticket.assunto}",
        f"Prioridade: {ticket.prioridade.value}",
        f"Resolvido em: {ticket.resolvido_em.isoformat() if ticket.resolvido_em else '-'}",
        f"Fechado em: {ticket.fechado_em.isoformat() if ticket.fechado_em else '-'}",
        f"Horas estimadas: {ticket.horas_estimadas if ticket.horas_estimadas is not None else '-'}",
        f"Horas reais: {ticket.horas_reais or 0.0}",
        "",
        "Histórico:",
    ]
    for entrada in ticket_repo.list_history(ticket_id):
        anterior = entrada.status_anterior.value if entrada.status_anterior else "-"
        linhas.append(
            f"  {entrada.criado_em:%Y-%m-%d %H:%M} {anterior} -> {entrada.status_novo.value}"
            f" {entrada.nota or ''}".rstrip()
        )

    registros = work_log_repo.list_by_ticket(ticket_id)
    if registros:
        linhas.extend(["", "Trabalho registrado:"])
        for registro in registros:
            linhas.append(f"  {registro.data_trabalho.isoformat()} {registro.horas}h {registro.descricao}")

    return f"Ticket {numero} - Trabalho concluído", "\n".join(linhas)


class DjangoEmailDelivery:
    """
    Entrega síncrona via backend de email do Django.

    Exceções do backend (SMTP fora, timeout) sobem para o
    EffectDispatcher, que as converte em DependencyFailureError.
    """

    def __init__(self, ticket_repo: TicketRepository, work_log_repo: WorkLogRepository):
        self.ticket_repo = ticket_repo
        self.work_log_repo = work_log_repo

    def _enviar(self, destinatarios: List[str], assunto: str, corpo: str) -> None:
        connection = get_connection(timeout=settings.EMAIL_TIMEOUT)
        EmailMessage(
            subject=assunto,
            body=corpo,
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=list(destinatarios),
            connection=connection,
        ).send(fail_silently=False)

    def send_email(self, destinatarios: List[str], assunto: str, corpo: str) -> None:
        self._enviar(destinatarios, assunto, corpo)
        logger.info(f"Email '{assunto}' enviado para {len(destinatarios)} destinatários")

    def send_closure_report(self, ticket_id: str, numero: str, destinatario: str) -> None:
        assunto, corpo = montar_relatorio_fechamento(self.ticket_repo, self.work_log_repo, ticket_id, numero)
        self._enviar([destinatario], assunto, corpo)
        logger.info(f"Relatório de fechamento de {numero} enviado")


class CeleryTaskDelivery:
    """
    Entrega assíncrona: cada efeito vira uma task com retry próprio.

    Falha ao enfileirar (broker fora) sobe para o EffectDispatcher.
    """

    def send_email(self, destinatarios: List[str], assunto: str, corpo: str) -> None:
        from src.adapters.django_app.events.handlers import enviar_email_task
        enviar_email_task.delay(list(destinatarios), assunto, corpo)

    def send_closure_report(self, ticket_id: str, numero: str, destinatario: str) -> None:
        from src.adapters.django_app.events.handlers import enviar_relatorio_fechamento_task
        enviar_relatorio_fechamento_task.delay(ticket_id, numero, destinatario)
