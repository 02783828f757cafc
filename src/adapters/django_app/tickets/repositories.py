"""
Repositórios Django para persistência de Tickets, organização e
notificações.

Implementam as interfaces (Ports) definidas no Core.
São DRIVEN ADAPTERS - acionados pelo Core em resposta a operações.

Responsabilidades:
- Implementar os protocols de src/core/*/ports.py
- Mapear entities para models e vice-versa
- Executar queries no banco via ORM

Garantias de concorrência ficam no banco:
- numero único (IntegrityError → DuplicateTicketNumberError)
- update condicional por status (e pelo responsável, na atribuição)
- incremento de horas com F() (nunca ler-somar-gravar)
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
import logging

from django.db import IntegrityError, transaction
from django.db.models import Count, F, Q, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from src.core.access.actors import ActorEntity
from src.core.access.roles import Role
from src.core.notifications.entities import NotificationEntity
from src.core.shared.events import DomainEvent
from src.core.shared.exceptions import DuplicateTicketNumberError
from src.core.shared.interfaces import OutboxStore
from src.core.tickets.dtos import ListarTicketsQueryDTO
from src.core.tickets.entities import (
    CategoryEntity,
    CommentEntity,
    DepartmentEntity,
    HistoryEntry,
    TicketEntity,
    TicketStatus,
    WorkLogEntry,
)

from .mappers import (
    CommentMapper,
    DomainEventMapper,
    HistoryMapper,
    NotificationMapper,
    OrganizationMapper,
    TicketMapper,
    WorkLogMapper,
)
from .models import (
    ActorModel,
    CategoryModel,
    CommentModel,
    DepartmentModel,
    DomainEventModel,
    NotificationModel,
    TicketHistoryModel,
    TicketModel,
    WorkLogModel,
)

logger = logging.getLogger(__name__)


CAMPOS_AGRUPAVEIS = ('status', 'prioridade')


class DjangoTicketRepository:
    """
    Implementação Django do TicketRepository.

    Example:
        repo = DjangoTicketRepository()

        # Criar
        repo.add(ticket_entity)

        # Gravar mudança de status se ninguém mudou antes
        if not repo.update_if_status(ticket, TicketStatus.ABERTO):
            raise ConcurrencyError(...)
    """

    def __init__(self):
        self._mapper = TicketMapper()

    def add(self, ticket: TicketEntity) -> None:
        """
        Insere ticket e histórico de criação.

        O savepoint isola a violação de unicidade do número, de modo
        que a transação externa continua utilizável para nova tentativa.
        """
        logger.debug(f"Inserindo ticket {ticket.numero}")
        try:
            with transaction.atomic():
                self._mapper.to_model(ticket).save(force_insert=True)
                self._gravar_historico(ticket.historico_pendente)
        except IntegrityError as e:
            if TicketModel.objects.filter(numero=ticket.numero).exists():
                raise DuplicateTicketNumberError(ticket.numero) from e
            raise
        ticket.coletar_historico()
        logger.info(f"Ticket inserido: {ticket.numero}")

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        try:
            model = TicketModel.objects.get(id=ticket_id)
        except TicketModel.DoesNotExist:
            logger.debug(f"Ticket não encontrado: {ticket_id}")
            return None
        return self._mapper.to_entity(model)

    def update_if_status(self, ticket: TicketEntity, status_esperado: TicketStatus) -> bool:
        return self._update_condicional(
            ticket,
            {'status': status_esperado.value},
            self._mapper.campos_mutaveis(ticket),
        )

    def assign_if_status(
        self,
        ticket: TicketEntity,
        status_esperado: TicketStatus,
        responsavel_esperado: Optional[str],
    ) -> bool:
        campos = self._mapper.campos_mutaveis(ticket)
        campos['responsavel_id'] = ticket.responsavel_id
        return self._update_condicional(
            ticket,
            {'status': status_esperado.value, 'responsavel_id': responsavel_esperado},
            campos,
        )

    def _update_condicional(self, ticket: TicketEntity, esperado: Dict[str, Any], campos: Dict[str, Any]) -> bool:
        with transaction.atomic():
            atualizados = TicketModel.objects.filter(id=ticket.id, **esperado).update(**campos)
            if atualizados != 1:
                logger.warning(f"Update condicional falhou para {ticket.id}: esperado {esperado}")
                return False
            self._gravar_historico(ticket.historico_pendente)
        ticket.coletar_historico()
        return True

    def delete(self, ticket_id: str) -> None:
        deleted_count, _ = TicketModel.objects.filter(id=ticket_id).delete()
        if deleted_count > 0:
            logger.info(f"Ticket excluído: {ticket_id}")

    def last_number_with_prefix(self, prefixo: str) -> Optional[str]:
        return (
            TicketModel.objects
            .filter(numero__startswith=prefixo)
            .order_by('-numero')
            .values_list('numero', flat=True)
            .first()
        )

    def _queryset(self, escopo: Dict[str, str], query: ListarTicketsQueryDTO):
        queryset = TicketModel.objects.filter(**escopo)
        queryset = queryset.filter(**query.filtros())
        if query.busca:
            queryset = queryset.filter(
                Q(numero__icontains=query.busca)
                | Q(assunto__icontains=query.busca)
                | Q(descricao__icontains=query.busca)
            )
        return queryset.order_by('-criado_em')

    def list_paginated(
        self,
        escopo: Dict[str, str],
        query: ListarTicketsQueryDTO,
    ) -> Tuple[List[TicketEntity], int]:
        queryset = self._queryset(escopo, query)
        total = queryset.count()
        offset = (query.pagina - 1) * query.por_pagina
        models = queryset[offset:offset + query.por_pagina]
        return self._mapper.to_entity_list(models), total

    def list_filtered(
        self,
        escopo: Dict[str, str],
        query: ListarTicketsQueryDTO,
    ) -> List[TicketEntity]:
        return self._mapper.to_entity_list(self._queryset(escopo, query).iterator())

    def count_by_field(self, escopo: Dict[str, str], campo: str) -> Dict[str, int]:
        if campo not in CAMPOS_AGRUPAVEIS:
            raise ValueError(f"Campo de agrupamento inválido: {campo}")
        counts = (
            TicketModel.objects
            .filter(**escopo)
            .order_by()
            .values(campo)
            .annotate(count=Count('id'))
        )
        return {item[campo]: item['count'] for item in counts}

    def list_history(self, ticket_id: str) -> List[HistoryEntry]:
        return [
            HistoryMapper.to_entity(model)
            for model in TicketHistoryModel.objects.filter(ticket_id=ticket_id)
        ]

    @staticmethod
    def _gravar_historico(entradas: List[HistoryEntry]) -> None:
        if entradas:
            TicketHistoryModel.objects.bulk_create([HistoryMapper.to_model(e) for e in entradas])


class DjangoWorkLogRepository:
    """Ledger de horas; mantém TicketModel.horas_reais pela soma no banco."""

    def add(self, registro: WorkLogEntry) -> None:
        with transaction.atomic():
            WorkLogMapper.to_model(registro).save(force_insert=True)
            TicketModel.objects.filter(id=registro.ticket_id).update(
                horas_reais=Coalesce(F('horas_reais'), Value(0.0)) + registro.horas
            )
        logger.debug(f"{registro.horas}h registradas no ticket {registro.ticket_id}")

    def list_by_ticket(self, ticket_id: str) -> List[WorkLogEntry]:
        return [
            WorkLogMapper.to_entity(model)
            for model in WorkLogModel.objects.filter(ticket_id=ticket_id)
        ]

    def total_hours(self, ticket_id: str) -> float:
        total = WorkLogModel.objects.filter(ticket_id=ticket_id).aggregate(total=Sum('horas'))['total']
        return total or 0.0


class DjangoCommentRepository:
    def save(self, comentario: CommentEntity) -> None:
        CommentModel.objects.update_or_create(
            id=comentario.id,
            defaults=CommentMapper.to_defaults(comentario),
        )

    def get_by_id(self, comentario_id: str) -> Optional[CommentEntity]:
        model = CommentModel.objects.filter(id=comentario_id).first()
        return CommentMapper.to_entity(model) if model else None

    def list_by_ticket(self, ticket_id: str) -> List[CommentEntity]:
        return [
            CommentMapper.to_entity(model)
            for model in CommentModel.objects.filter(ticket_id=ticket_id).order_by('criado_em')
        ]

    def delete(self, comentario_id: str) -> None:
        CommentModel.objects.filter(id=comentario_id).delete()


class DjangoActorRepository:
    def save(self, ator: ActorEntity) -> None:
        ActorModel.objects.update_or_create(
            id=ator.id,
            defaults=OrganizationMapper.actor_to_defaults(ator),
        )

    def get_by_id(self, actor_id: str) -> Optional[ActorEntity]:
        model = ActorModel.objects.filter(id=actor_id).first()
        return OrganizationMapper.actor_to_entity(model) if model else None

    def list_active_by_role(
        self,
        role: Role,
        departamento_id: Optional[str] = None,
    ) -> List[ActorEntity]:
        queryset = ActorModel.objects.filter(role=role.value, ativo=True)
        if departamento_id is not None:
            queryset = queryset.filter(departamento_id=departamento_id)
        return [OrganizationMapper.actor_to_entity(model) for model in queryset.order_by('nome')]


class DjangoDepartmentRepository:
    def get_by_id(self, departamento_id: str) -> Optional[DepartmentEntity]:
        model = DepartmentModel.objects.filter(id=departamento_id).first()
        return OrganizationMapper.department_to_entity(model) if model else None


class DjangoCategoryRepository:
    def get_by_id(self, categoria_id: str) -> Optional[CategoryEntity]:
        model = CategoryModel.objects.filter(id=categoria_id).first()
        return OrganizationMapper.category_to_entity(model) if model else None


class DjangoNotificationRepository:
    """Caixa de entrada persistida."""

    def save(self, notificacao: NotificationEntity) -> None:
        NotificationModel.objects.update_or_create(
            id=notificacao.id,
            defaults=NotificationMapper.to_defaults(notificacao),
        )

    def save_many(self, notificacoes: List[NotificationEntity]) -> None:
        NotificationModel.objects.bulk_create([NotificationMapper.to_model(n) for n in notificacoes])

    def get_by_id(self, notificacao_id: str) -> Optional[NotificationEntity]:
        model = NotificationModel.objects.filter(id=notificacao_id).first()
        return NotificationMapper.to_entity(model) if model else None

    def list_by_recipient(
        self,
        destinatario_id: str,
        apenas_nao_lidas: bool = False,
        pagina: int = 1,
        por_pagina: int = 20,
    ) -> Tuple[List[NotificationEntity], int]:
        queryset = NotificationModel.objects.filter(destinatario_id=destinatario_id)
        if apenas_nao_lidas:
            queryset = queryset.filter(lida=False)
        total = queryset.count()
        offset = (pagina - 1) * por_pagina
        models = queryset.order_by('-criado_em')[offset:offset + por_pagina]
        return [NotificationMapper.to_entity(m) for m in models], total

    def count_unread(self, destinatario_id: str) -> int:
        return NotificationModel.objects.filter(destinatario_id=destinatario_id, lida=False).count()

    def mark_all_read(self, destinatario_id: str, momento: datetime) -> int:
        return (
            NotificationModel.objects
            .filter(destinatario_id=destinatario_id, lida=False)
            .update(lida=True, lida_em=momento)
        )

    def delete(self, notificacao_id: str) -> None:
        NotificationModel.objects.filter(id=notificacao_id).delete()

    def delete_read_older_than(self, limite: datetime) -> int:
        removidas, _ = NotificationModel.objects.filter(lida=True, criado_em__lt=limite).delete()
        return removidas


class DjangoOutboxStore(OutboxStore):
    """
    Outbox de Domain Events usando Django ORM.

    Os eventos são gravados dentro da transação da mutação; os que
    ficaram sem dispatched_at podem ser republicados
    (ver `reprocessar_outbox` em events/handlers.py).
    """

    def append(self, event: DomainEvent) -> None:
        DomainEventMapper.to_model(event).save(force_insert=True)
        logger.debug(f"Evento gravado na outbox: {event.event_type} para {event.aggregate_id}")

    def mark_dispatched(self, event_id: str) -> None:
        DomainEventModel.objects.filter(event_id=event_id, dispatched_at__isnull=True).update(
            dispatched_at=timezone.now()
        )

    def list_pending(self, limite: int = 100, antes_de: Optional[datetime] = None) -> List[dict]:
        """Eventos ainda não despachados, mais antigos primeiro."""
        queryset = DomainEventModel.objects.filter(dispatched_at__isnull=True)
        if antes_de is not None:
            queryset = queryset.filter(recorded_at__lt=antes_de)
        models = queryset.order_by('recorded_at')[:limite]
        return [DomainEventMapper.to_dict(model) for model in models]
