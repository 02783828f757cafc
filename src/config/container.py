"""
Dependency Injection Container.

Configura e gerencia todas as dependências da aplicação.
Usa dependency-injector para lazy-loading e injeção explícita.

Padrões:
- Singleton: Uma instância para toda app (repositories, publisher)
- Factory: Nova instância por chamada (services, UoW)
- Configuration: limites de domínio lidos de django.conf.settings

Adapters Django são importados sob demanda (`_adapter`): o container
pode ser importado antes de o Django estar configurado.
"""

from typing import Optional
import importlib

from dependency_injector import containers, providers

from src.core.access.ports import InMemoryActorRepository
from src.core.notifications.fan_out import NotificationFanOut
from src.core.notifications.ports import (
    InMemoryNotificationDelivery,
    InMemoryNotificationRepository,
)
from src.core.notifications.use_cases import (
    ContarNaoLidasService,
    DespacharNotificacoesService,
    EffectDispatcher,
    ExcluirNotificacaoService,
    LimparNotificacoesAntigasService,
    ListarNotificacoesService,
    MarcarComoLidaService,
    MarcarTodasComoLidasService,
)
from src.core.tickets.ports import (
    InMemoryCategoryRepository,
    InMemoryCommentRepository,
    InMemoryDepartmentRepository,
    InMemoryTicketRepository,
    InMemoryWorkLogRepository,
)
from src.core.tickets.use_cases import (
    AdicionarComentarioService,
    AtribuirEmLoteService,
    AtribuirTicketService,
    CriarTicketService,
    EditarComentarioService,
    EditarTicketService,
    EstatisticasTicketsService,
    ExcluirComentarioService,
    ExcluirTicketService,
    ExportarTicketsCsvService,
    ListarComentariosService,
    ListarTicketsService,
    ListarTrabalhoService,
    ObterHistoricoService,
    ObterTicketService,
    ReabrirTicketService,
    RegistrarTrabalhoService,
    TransicionarEmLoteService,
    TransicionarTicketService,
)


def _adapter(caminho: str):
    """Callable que importa e instancia a classe/função do adapter na primeira chamada."""
    modulo, nome = caminho.rsplit('.', 1)

    def _criar(*args, **kwargs):
        return getattr(importlib.import_module(modulo), nome)(*args, **kwargs)

    return _criar


_REPOS = 'src.adapters.django_app.tickets.repositories'


class Container(containers.DeclarativeContainer):
    """
    Container principal de Dependency Injection.

    Organização:
    - Configuration: limites de domínio e modo do publisher
    - Infrastructure: publisher, outbox, entrega
    - Repositories: Persistência
    - Unit of Work: Transações
    - Services: Use Cases

    Example:
        container = get_container()
        service = container.criar_ticket_service()
        result = service.execute(ator, input_dto)
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    config = providers.Configuration()

    # =========================================================================
    # Repositories (Singleton - uma instância por app)
    # =========================================================================

    ticket_repository = providers.Singleton(_adapter(f'{_REPOS}.DjangoTicketRepository'))
    work_log_repository = providers.Singleton(_adapter(f'{_REPOS}.DjangoWorkLogRepository'))
    comment_repository = providers.Singleton(_adapter(f'{_REPOS}.DjangoCommentRepository'))
    actor_repository = providers.Singleton(_adapter(f'{_REPOS}.DjangoActorRepository'))
    department_repository = providers.Singleton(_adapter(f'{_REPOS}.DjangoDepartmentRepository'))
    category_repository = providers.Singleton(_adapter(f'{_REPOS}.DjangoCategoryRepository'))
    notification_repository = providers.Singleton(_adapter(f'{_REPOS}.DjangoNotificationRepository'))

    # =========================================================================
    # Infrastructure
    # =========================================================================

    outbox_store = providers.Singleton(_adapter(f'{_REPOS}.DjangoOutboxStore'))

    event_publisher = providers.Singleton(
        _adapter('src.adapters.django_app.events.publishers.get_event_publisher'),
        mode=config.event_publisher_mode,
    )

    email_delivery = providers.Singleton(
        _adapter('src.adapters.django_app.notifications.delivery.DjangoEmailDelivery'),
        ticket_repo=ticket_repository,
        work_log_repo=work_log_repository,
    )

    celery_delivery = providers.Singleton(
        _adapter('src.adapters.django_app.notifications.delivery.CeleryTaskDelivery'),
    )

    # Com Celery cada entrega vira uma task com retry; sem broker, envio direto
    notification_delivery = providers.Selector(
        config.event_publisher_mode,
        celery=celery_delivery,
        sync=email_delivery,
        log=email_delivery,
    )

    # =========================================================================
    # Unit of Work (Factory - nova instância por operação)
    # =========================================================================

    unit_of_work = providers.Factory(
        _adapter('src.adapters.django_app.shared.unit_of_work.DjangoUnitOfWork'),
        event_publisher=event_publisher,
        outbox=outbox_store,
    )

    # =========================================================================
    # Services / Use Cases - Tickets
    # =========================================================================

    criar_ticket_service = providers.Factory(
        CriarTicketService,
        ticket_repo=ticket_repository,
        department_repo=department_repository,
        category_repo=category_repository,
        uow=unit_of_work,
        max_tentativas=config.ticket_number_max_attempts,
    )

    listar_tickets_service = providers.Factory(ListarTicketsService, ticket_repo=ticket_repository)

    obter_ticket_service = providers.Factory(ObterTicketService, ticket_repo=ticket_repository)

    obter_historico_service = providers.Factory(ObterHistoricoService, ticket_repo=ticket_repository)

    transicionar_ticket_service = providers.Factory(
        TransicionarTicketService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    reabrir_ticket_service = providers.Factory(
        ReabrirTicketService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    atribuir_ticket_service = providers.Factory(
        AtribuirTicketService,
        ticket_repo=ticket_repository,
        actor_repo=actor_repository,
        uow=unit_of_work,
    )

    registrar_trabalho_service = providers.Factory(
        RegistrarTrabalhoService,
        ticket_repo=ticket_repository,
        work_log_repo=work_log_repository,
        uow=unit_of_work,
        horas_maximas=config.work_log_max_hours,
        janela_dias=config.work_log_window_days,
    )

    listar_trabalho_service = providers.Factory(
        ListarTrabalhoService,
        ticket_repo=ticket_repository,
        work_log_repo=work_log_repository,
    )

    editar_ticket_service = providers.Factory(
        EditarTicketService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    excluir_ticket_service = providers.Factory(
        ExcluirTicketService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    atribuir_em_lote_service = providers.Factory(
        AtribuirEmLoteService,
        ticket_repo=ticket_repository,
        actor_repo=actor_repository,
        atribuir_service=atribuir_ticket_service,
    )

    transicionar_em_lote_service = providers.Factory(
        TransicionarEmLoteService,
        transicionar_service=transicionar_ticket_service,
    )

    estatisticas_service = providers.Factory(EstatisticasTicketsService, ticket_repo=ticket_repository)

    exportar_csv_service = providers.Factory(ExportarTicketsCsvService, ticket_repo=ticket_repository)

    # =========================================================================
    # Services / Use Cases - Comentários
    # =========================================================================

    adicionar_comentario_service = providers.Factory(
        AdicionarComentarioService,
        ticket_repo=ticket_repository,
        comment_repo=comment_repository,
        uow=unit_of_work,
    )

    listar_comentarios_service = providers.Factory(
        ListarComentariosService,
        ticket_repo=ticket_repository,
        comment_repo=comment_repository,
    )

    editar_comentario_service = providers.Factory(
        EditarComentarioService,
        comment_repo=comment_repository,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
        janela_horas=config.comment_edit_window_hours,
    )

    excluir_comentario_service = providers.Factory(
        ExcluirComentarioService,
        comment_repo=comment_repository,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    # =========================================================================
    # Services / Use Cases - Notificações
    # =========================================================================

    notification_fan_out = providers.Factory(NotificationFanOut, actor_repo=actor_repository)

    effect_dispatcher = providers.Factory(EffectDispatcher, delivery=notification_delivery)

    despachar_notificacoes_service = providers.Factory(
        DespacharNotificacoesService,
        fan_out=notification_fan_out,
        notification_repo=notification_repository,
        uow=unit_of_work,
        dispatcher=effect_dispatcher,
    )

    listar_notificacoes_service = providers.Factory(
        ListarNotificacoesService,
        notification_repo=notification_repository,
    )

    contar_nao_lidas_service = providers.Factory(
        ContarNaoLidasService,
        notification_repo=notification_repository,
    )

    marcar_como_lida_service = providers.Factory(
        MarcarComoLidaService,
        notification_repo=notification_repository,
        uow=unit_of_work,
    )

    marcar_todas_como_lidas_service = providers.Factory(
        MarcarTodasComoLidasService,
        notification_repo=notification_repository,
        uow=unit_of_work,
    )

    excluir_notificacao_service = providers.Factory(
        ExcluirNotificacaoService,
        notification_repo=notification_repository,
        uow=unit_of_work,
    )

    limpar_notificacoes_service = providers.Factory(
        LimparNotificacoesAntigasService,
        notification_repo=notification_repository,
        dias_padrao=config.notification_retention_days,
    )


def _config_from_settings() -> dict:
    from django.conf import settings

    return {
        'event_publisher_mode': settings.EVENT_PUBLISHER_MODE,
        'ticket_number_max_attempts': settings.TICKET_NUMBER_MAX_ATTEMPTS,
        'work_log_max_hours': settings.WORK_LOG_MAX_HOURS,
        'work_log_window_days': settings.WORK_LOG_WINDOW_DAYS,
        'comment_edit_window_hours': settings.COMMENT_EDIT_WINDOW_HOURS,
        'notification_retention_days': settings.NOTIFICATION_RETENTION_DAYS,
    }


# =============================================================================
# Container Global (Singleton)
# =============================================================================

_container: Optional[Container] = None


def get_container() -> Container:
    """
    Retorna instância global do container.

    Cria se não existir (lazy initialization), com a configuração
    lida de django.conf.settings.
    """
    global _container

    if _container is None:
        _container = Container()
        _container.config.from_dict(_config_from_settings())

    return _container


def reset_container() -> None:
    """
    Reset do container (para testes).

    Permite criar novo container limpo.
    """
    global _container
    _container = None


# =============================================================================
# Testing Container
# =============================================================================

def build_testing_container(falhar_entrega: bool = False) -> Container:
    """
    Container para testes com implementações InMemory.

    Os eventos publicados após cada "commit" passam pelo fan-out de
    notificações, como no modo "sync".

    Example:
        container = build_testing_container()
        container.actor_repository().save(ator)
        container.criar_ticket_service().execute(ator, dto)
    """
    from src.adapters.django_app.events.publishers import InMemoryEventPublisher
    from src.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork

    container = Container()
    container.config.from_dict({
        'event_publisher_mode': 'sync',
        'ticket_number_max_attempts': 2,
        'work_log_max_hours': 24.0,
        'work_log_window_days': 30,
        'comment_edit_window_hours': 24,
        'notification_retention_days': 30,
    })

    container.ticket_repository.override(providers.Singleton(InMemoryTicketRepository))
    container.work_log_repository.override(
        providers.Singleton(InMemoryWorkLogRepository, ticket_repo=container.ticket_repository)
    )
    container.comment_repository.override(providers.Singleton(InMemoryCommentRepository))
    container.actor_repository.override(providers.Singleton(InMemoryActorRepository))
    container.department_repository.override(providers.Singleton(InMemoryDepartmentRepository))
    container.category_repository.override(providers.Singleton(InMemoryCategoryRepository))
    container.notification_repository.override(providers.Singleton(InMemoryNotificationRepository))
    container.notification_delivery.override(
        providers.Singleton(InMemoryNotificationDelivery, falhar=falhar_entrega)
    )
    container.event_publisher.override(providers.Singleton(InMemoryEventPublisher))
    container.unit_of_work.override(
        providers.Factory(InMemoryUnitOfWork, event_publisher=container.event_publisher)
    )

    container.event_publisher().register_handler(
        "*", lambda event: container.despachar_notificacoes_service().execute(event)
    )
    return container
