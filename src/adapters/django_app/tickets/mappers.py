"""
Mappers para conversão entre Entities (Core) e Models (Django).

Responsabilidades:
- Converter Models → Entities (para uso no Core)
- Converter Entities → kwargs/Models (para persistência)
- Converter DomainEvent → DomainEventModel (outbox)

Princípios:
- Mappers são stateless
- Não contêm lógica de negócio
- Tratam apenas conversão de dados
"""

from typing import Any, Dict, List

from src.core.access.actors import ActorEntity
from src.core.access.roles import Role
from src.core.notifications.entities import NotificationEntity, NotificationKind
from src.core.shared.events import DomainEvent
from src.core.tickets.entities import (
    CategoryEntity,
    CommentEntity,
    DepartmentEntity,
    HistoryEntry,
    TicketEntity,
    TicketPriority,
    TicketStatus,
    WorkLogEntry,
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


class TicketMapper:
    """
    Mapper para conversão entre TicketEntity e TicketModel.

    - to_entity(): Model → Entity
    - to_entity_list(): List[Model] → List[Entity]
    - campos_mutaveis(): Entity → kwargs do update condicional
    - to_model(): Entity → Model novo
    """

    @staticmethod
    def to_entity(model: TicketModel) -> TicketEntity:
        """
        Converte TicketModel para TicketEntity.

        Note:
            Bypassa validações do factory method .criar()
            pois dados já foram validados na criação original
        """
        return TicketEntity.reconstituir(
            status=TicketStatus(model.status),
            id=model.id,
            numero=model.numero,
            assunto=model.assunto,
            descricao=model.descricao,
            prioridade=TicketPriority(model.prioridade),
            tags=list(model.tags) if model.tags else [],
            horas_estimadas=model.horas_estimadas,
            horas_reais=model.horas_reais,
            data_vencimento=model.data_vencimento,
            resolvido_em=model.resolvido_em,
            fechado_em=model.fechado_em,
            criado_em=model.criado_em,
            atualizado_em=model.atualizado_em,
            criador_id=model.criador_id,
            responsavel_id=model.responsavel_id,
            departamento_id=model.departamento_id,
            categoria_id=model.categoria_id,
            projeto_id=model.projeto_id,
        )

    @staticmethod
    def to_entity_list(models) -> List[TicketEntity]:
        return [TicketMapper.to_entity(model) for model in models]

    @staticmethod
    def campos_mutaveis(entity: TicketEntity) -> Dict[str, Any]:
        """
        Campos gravados pelo update condicional.

        horas_reais fica de fora: só o ledger de horas o altera, via
        incremento no banco. responsavel_id também: só a atribuição o
        grava (assign_if_status).
        """
        return {
            'assunto': entity.assunto,
            'descricao': entity.descricao,
            'status': entity.status.value,
            'prioridade': entity.prioridade.value,
            'tags': list(entity.tags),
            'horas_estimadas': entity.horas_estimadas,
            'data_vencimento': entity.data_vencimento,
            'resolvido_em': entity.resolvido_em,
            'fechado_em': entity.fechado_em,
            'atualizado_em': entity.atualizado_em,
            'categoria_id': entity.categoria_id,
            'projeto_id': entity.projeto_id,
        }

    @staticmethod
    def to_model(entity: TicketEntity) -> TicketModel:
        """
        Converte TicketEntity para TicketModel novo.

        Note:
            Não chama .save() - deixa isso para o Repository
        """
        return TicketModel(
            id=entity.id,
            numero=entity.numero,
            horas_reais=entity.horas_reais,
            responsavel_id=entity.responsavel_id,
            criado_em=entity.criado_em,
            criador_id=entity.criador_id,
            departamento_id=entity.departamento_id,
            **TicketMapper.campos_mutaveis(entity),
        )


class HistoryMapper:
    @staticmethod
    def to_model(entry: HistoryEntry) -> TicketHistoryModel:
        return TicketHistoryModel(
            entrada_id=entry.id,
            ticket_id=entry.ticket_id,
            status_anterior=entry.status_anterior.value if entry.status_anterior else None,
            status_novo=entry.status_novo.value,
            nota=entry.nota,
            autor_id=entry.autor_id,
            criado_em=entry.criado_em,
        )

    @staticmethod
    def to_entity(model: TicketHistoryModel) -> HistoryEntry:
        return HistoryEntry(
            id=model.entrada_id,
            ticket_id=model.ticket_id,
            status_anterior=TicketStatus(model.status_anterior) if model.status_anterior else None,
            status_novo=TicketStatus(model.status_novo),
            nota=model.nota,
            autor_id=model.autor_id,
            criado_em=model.criado_em,
        )


class WorkLogMapper:
    @staticmethod
    def to_model(entry: WorkLogEntry) -> WorkLogModel:
        return WorkLogModel(
            id=entry.id,
            ticket_id=entry.ticket_id,
            agente_id=entry.agente_id,
            horas=entry.horas,
            descricao=entry.descricao,
            data_trabalho=entry.data_trabalho,
            criado_em=entry.criado_em,
        )

    @staticmethod
    def to_entity(model: WorkLogModel) -> WorkLogEntry:
        return WorkLogEntry(
            id=model.id,
            ticket_id=model.ticket_id,
            agente_id=model.agente_id,
            horas=model.horas,
            descricao=model.descricao,
            data_trabalho=model.data_trabalho,
            criado_em=model.criado_em,
        )


class CommentMapper:
    @staticmethod
    def to_entity(model: CommentModel) -> CommentEntity:
        return CommentEntity(
            id=model.id,
            ticket_id=model.ticket_id,
            autor_id=model.autor_id,
            conteudo=model.conteudo,
            interno=model.interno,
            criado_em=model.criado_em,
            atualizado_em=model.atualizado_em,
        )

    @staticmethod
    def to_defaults(entity: CommentEntity) -> Dict[str, Any]:
        return {
            'ticket_id': entity.ticket_id,
            'autor_id': entity.autor_id,
            'conteudo': entity.conteudo,
            'interno': entity.interno,
            'criado_em': entity.criado_em,
            'atualizado_em': entity.atualizado_em,
        }


class OrganizationMapper:
    """Atores, departamentos e categorias."""

    @staticmethod
    def actor_to_entity(model: ActorModel) -> ActorEntity:
        return ActorEntity(
            id=model.id,
            nome=model.nome,
            email=model.email,
            role=Role(model.role),
            departamento_id=model.departamento_id,
            ativo=model.ativo,
        )

    @staticmethod
    def actor_to_defaults(entity: ActorEntity) -> Dict[str, Any]:
        return {
            'nome': entity.nome,
            'email': entity.email,
            'role': entity.role.value,
            'departamento_id': entity.departamento_id,
            'ativo': entity.ativo,
        }

    @staticmethod
    def department_to_entity(model: DepartmentModel) -> DepartmentEntity:
        return DepartmentEntity(id=model.id, nome=model.nome, ativo=model.ativo)

    @staticmethod
    def category_to_entity(model: CategoryModel) -> CategoryEntity:
        return CategoryEntity(
            id=model.id,
            nome=model.nome,
            departamento_id=model.departamento_id,
            ativo=model.ativo,
        )


class NotificationMapper:
    @staticmethod
    def to_model(entity: NotificationEntity) -> NotificationModel:
        return NotificationModel(id=entity.id, **NotificationMapper.to_defaults(entity))

    @staticmethod
    def to_defaults(entity: NotificationEntity) -> Dict[str, Any]:
        return {
            'destinatario_id': entity.destinatario_id,
            'titulo': entity.titulo,
            'mensagem': entity.mensagem,
            'tipo': entity.tipo.value,
            'ticket_id': entity.ticket_id,
            'lida': entity.lida,
            'criado_em': entity.criado_em,
            'lida_em': entity.lida_em,
        }

    @staticmethod
    def to_entity(model: NotificationModel) -> NotificationEntity:
        return NotificationEntity(
            id=model.id,
            destinatario_id=model.destinatario_id,
            titulo=model.titulo,
            mensagem=model.mensagem,
            tipo=NotificationKind(model.tipo),
            ticket_id=model.ticket_id,
            lida=model.lida,
            criado_em=model.criado_em,
            lida_em=model.lida_em,
        )


class DomainEventMapper:
    """
    Mapper para conversão entre DomainEvent e DomainEventModel.

    Usado para gravar eventos na outbox e para reconstruí-los no
    reprocessamento (`DomainEventMapper.to_dict` → `event_from_dict`).
    """

    @staticmethod
    def to_model(event: DomainEvent) -> DomainEventModel:
        return DomainEventModel(
            event_id=event.event_id,
            event_type=event.event_type,
            aggregate_type=event.aggregate_type,
            aggregate_id=event.aggregate_id,
            event_data=event.to_dict()["data"],
            version=event.version,
            ator_id=event.ator_id,
            occurred_at=event.occurred_at,
        )

    @staticmethod
    def to_dict(model: DomainEventModel) -> Dict[str, Any]:
        """Mesmo formato de DomainEvent.to_dict()."""
        return {
            "event_id": model.event_id,
            "event_type": model.event_type,
            "aggregate_id": model.aggregate_id,
            "aggregate_type": model.aggregate_type,
            "ator_id": model.ator_id,
            "occurred_at": model.occurred_at.isoformat(),
            "version": model.version,
            "data": model.event_data,
        }
