"""
Event Handlers - Processadores de Eventos de Domínio.

Handlers são executados depois do commit da operação que gerou o
evento: em processo (publisher "sync") ou via Celery (publisher
"celery"). Isso permite:

- Desacoplamento: casos de uso não conhecem notificações nem email
- Resiliência: retry automático e limitado nas entregas
- Outbox: eventos não despachados podem ser reprocessados

Padrão:
    @shared_task(bind=True, ...)
    def handle_<acao>(self, event_data: dict) -> None:
        # Processar evento
"""

from datetime import timedelta
from typing import Any, Dict, List, Optional
import logging

from celery import shared_task

from src.core.notifications.fan_out import ResultadoFanOut
from src.core.shared.clock import agora
from src.core.shared.events import DomainEvent, event_from_dict

logger = logging.getLogger(__name__)


def processar_evento(event: DomainEvent) -> ResultadoFanOut:
    """
    Executa o fan-out de notificações de um evento já confirmado.

    Usado como handler síncrono pelo LoggingEventPublisher e pela
    task `handle_notificacoes`.
    """
    from src.config.container import get_container

    service = get_container().despachar_notificacoes_service()
    return service.execute(event)


# =============================================================================
# Event Handlers - Tickets
# =============================================================================

@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_notificacoes(self, event_data: Dict[str, Any]) -> int:
    """
    Handler de notificações para eventos de ciclo de vida.

    Falhas de entrega já são descartadas pelo EffectDispatcher; o
    retry aqui cobre falhas ao gravar as notificações.

    Returns:
        Quantidade de notificações gravadas
    """
    try:
        event = event_from_dict(event_data)
    except (KeyError, ValueError) as e:
        logger.error(f"[HANDLER] Evento inválido descartado: {e}")
        return 0

    try:
        resultado = processar_evento(event)
    except Exception as e:
        logger.error(f"[HANDLER] Erro ao notificar {event.event_type}: {e}", exc_info=True)
        raise self.retry(exc=e)

    logger.info(
        f"[HANDLER] {event.event_type}: {event.aggregate_id} | "
        f"{len(resultado.notificacoes)} notificações"
    )
    return len(resultado.notificacoes)


@shared_task(bind=True, ignore_result=True)
def handle_trabalho_registrado(self, event_data: Dict[str, Any]) -> None:
    """Sem notificação: apenas registra o lançamento de horas."""
    data = event_data.get('data', {})
    logger.info(
        f"[HANDLER] TrabalhoRegistrado: {data.get('numero')} | "
        f"{data.get('horas')}h por {data.get('agente_id')}"
    )


# =============================================================================
# Event Dispatcher (Router)
# =============================================================================

HANDLERS_POR_EVENTO = {
    'TicketCriadoEvent': handle_notificacoes,
    'TicketAtribuidoEvent': handle_notificacoes,
    'StatusAlteradoEvent': handle_notificacoes,
    'ComentarioAdicionadoEvent': handle_notificacoes,
    'TrabalhoRegistradoEvent': handle_trabalho_registrado,
}


@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def dispatch_domain_event(self, event_type: str, event_data: Dict[str, Any]) -> None:
    """
    Dispatcher central para Domain Events.

    Roteia eventos para os handlers apropriados.
    Este é o ponto de entrada para todos os eventos enviados pelo
    CeleryEventPublisher.

    Args:
        event_type: Tipo do evento (ex: 'TicketCriadoEvent')
        event_data: Evento serializado (DomainEvent.to_dict())
    """
    handler = HANDLERS_POR_EVENTO.get(event_type)
    if handler is None:
        logger.warning(f"[DISPATCHER] Handler não encontrado para {event_type}")
        return

    logger.info(f"[DISPATCHER] Roteando {event_type} para {handler.name}")
    handler.delay(event_data)


# =============================================================================
# Delivery Tasks
# =============================================================================

def _delivery_sincrono():
    from src.config.container import get_container
    return get_container().email_delivery()


@shared_task(bind=True, max_retries=3, default_retry_delay=120, acks_late=True)
def enviar_email_task(self, destinatarios: List[str], assunto: str, corpo: str) -> None:
    """
    Envia email com retry limitado.

    Esgotadas as tentativas, a falha é registrada e descartada.
    """
    try:
        _delivery_sincrono().send_email(destinatarios, assunto, corpo)
    except Exception as e:
        if self.request.retries >= self.max_retries:
            logger.error(f"[EMAIL] Desistindo de '{assunto}' após {self.max_retries} tentativas: {e}")
            return
        raise self.retry(exc=e)


@shared_task(bind=True, max_retries=3, default_retry_delay=120, acks_late=True)
def enviar_relatorio_fechamento_task(self, ticket_id: str, numero: str, destinatario: str) -> None:
    """Envia o relatório de fechamento ao criador do ticket."""
    try:
        _delivery_sincrono().send_closure_report(ticket_id, numero, destinatario)
    except LookupError as e:
        logger.warning(f"[RELATORIO] {e}")
    except Exception as e:
        if self.request.retries >= self.max_retries:
            logger.error(f"[RELATORIO] Desistindo do relatório de {numero}: {e}")
            return
        raise self.retry(exc=e)


# =============================================================================
# Scheduled Tasks (Beat)
# =============================================================================

@shared_task(bind=True)
def limpar_notificacoes_antigas(self, dias: Optional[int] = None) -> int:
    """
    Remove notificações lidas mais antigas que `dias`
    (padrão NOTIFICATION_RETENTION_DAYS).

    Executada semanalmente pelo Celery Beat.
    """
    from src.config.container import get_container

    removidas = get_container().limpar_notificacoes_service().execute(dias)
    logger.info(f"[SCHEDULED] {removidas} notificações removidas")
    return removidas


@shared_task(bind=True)
def reprocessar_outbox(self, limite: int = 100, atraso_minutos: int = 5) -> int:
    """
    Republica eventos da outbox que nunca foram despachados (ex: broker
    fora no momento do commit). Eventos gravados há menos de
    `atraso_minutos` ainda podem estar sendo publicados e ficam de fora.

    Returns:
        Quantidade de eventos republicados
    """
    from src.config.container import get_container

    container = get_container()
    outbox = container.outbox_store()
    publisher = container.event_publisher()

    republicados = 0
    limite_tempo = agora() - timedelta(minutes=atraso_minutos)
    for event_data in outbox.list_pending(limite, antes_de=limite_tempo):
        try:
            publisher.publish(event_from_dict(event_data))
        except Exception as e:
            logger.error(f"[OUTBOX] Falha ao republicar {event_data['event_id']}: {e}", exc_info=True)
            continue
        outbox.mark_dispatched(event_data['event_id'])
        republicados += 1

    if republicados:
        logger.info(f"[OUTBOX] {republicados} eventos republicados")
    return republicados
