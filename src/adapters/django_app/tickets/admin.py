"""
Django Admin para a Central de Atendimento.

Histórico, registros de trabalho e eventos são somente leitura: são
trilhas append-only gravadas pelos casos de uso.
"""

from django.contrib import admin
from django.utils.html import format_html

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


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(DepartmentModel)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ['nome', 'ativo']
    list_filter = ['ativo']
    search_fields = ['nome']


@admin.register(CategoryModel)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['nome', 'departamento', 'ativo']
    list_filter = ['departamento', 'ativo']
    search_fields = ['nome']


@admin.register(ActorModel)
class ActorAdmin(admin.ModelAdmin):
    list_display = ['nome', 'email', 'role', 'departamento', 'ativo']
    list_filter = ['role', 'departamento', 'ativo']
    search_fields = ['nome', 'email']


class TicketHistoryInline(admin.TabularInline):
    model = TicketHistoryModel
    extra = 0
    can_delete = False
    readonly_fields = ['status_anterior', 'status_novo', 'nota', 'autor', 'criado_em']
    fields = readonly_fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(TicketModel)
class TicketAdmin(admin.ModelAdmin):
    """Admin para TicketModel. Status só muda pela API (máquina de estados)."""

    list_display = [
        'numero',
        'assunto',
        'status_badge',
        'prioridade_badge',
        'departamento',
        'responsavel',
        'horas_reais',
        'criado_em',
    ]

    list_filter = ['status', 'prioridade', 'departamento', 'criado_em']

    search_fields = ['numero', 'assunto', 'descricao']

    readonly_fields = [
        'id',
        'numero',
        'status',
        'horas_reais',
        'resolvido_em',
        'fechado_em',
        'criado_em',
        'atualizado_em',
    ]

    fieldsets = [
        ('Identificação', {
            'fields': ['id', 'numero', 'assunto', 'descricao', 'tags'],
        }),
        ('Classificação', {
            'fields': ['status', 'prioridade', 'departamento', 'categoria', 'projeto_id'],
        }),
        ('Responsáveis', {
            'fields': ['criador', 'responsavel'],
        }),
        ('Horas e prazos', {
            'fields': ['horas_estimadas', 'horas_reais', 'data_vencimento'],
        }),
        ('Timestamps', {
            'fields': ['resolvido_em', 'fechado_em', 'criado_em', 'atualizado_em'],
            'classes': ['collapse'],
        }),
    ]

    inlines = [TicketHistoryInline]

    ordering = ['-criado_em']

    date_hierarchy = 'criado_em'

    def status_badge(self, obj):
        """Exibe status com badge colorido."""
        colors = {
            'ABERTO': '#17a2b8',
            'EM_PROGRESSO': '#ffc107',
            'EM_ESPERA': '#6c757d',
            'RESOLVIDO': '#28a745',
            'FECHADO': '#343a40',
            'CANCELADO': '#dc3545',
        }
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            colors.get(obj.status, '#6c757d'),
            obj.get_status_display(),
        )
    status_badge.short_description = 'Status'

    def prioridade_badge(self, obj):
        colors = {
            'BAIXA': '#28a745',
            'MEDIA': '#ffc107',
            'ALTA': '#fd7e14',
            'URGENTE': '#dc3545',
        }
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            colors.get(obj.prioridade, '#6c757d'),
            obj.get_prioridade_display(),
        )
    prioridade_badge.short_description = 'Prioridade'


@admin.register(WorkLogModel)
class WorkLogAdmin(ReadOnlyAdmin):
    list_display = ['ticket', 'agente', 'horas', 'data_trabalho', 'criado_em']
    list_filter = ['data_trabalho']
    search_fields = ['ticket__numero', 'descricao']


@admin.register(CommentModel)
class CommentAdmin(admin.ModelAdmin):
    list_display = ['ticket', 'autor', 'interno', 'criado_em']
    list_filter = ['interno']
    search_fields = ['ticket__numero', 'conteudo']


@admin.register(NotificationModel)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['titulo', 'destinatario', 'tipo', 'lida', 'criado_em']
    list_filter = ['tipo', 'lida']
    search_fields = ['titulo', 'destinatario__email']


@admin.register(DomainEventModel)
class DomainEventAdmin(ReadOnlyAdmin):
    """Admin para a outbox de eventos."""

    list_display = [
        'event_id_curto',
        'event_type',
        'aggregate_type',
        'aggregate_id_curto',
        'occurred_at',
        'dispatched_at',
    ]

    list_filter = ['event_type', 'aggregate_type', 'occurred_at']

    search_fields = ['event_id', 'aggregate_id', 'event_type', 'ator_id']

    def event_id_curto(self, obj):
        """Exibe ID do evento curto."""
        return obj.event_id[:8] + '...'
    event_id_curto.short_description = 'Event ID'

    def aggregate_id_curto(self, obj):
        return obj.aggregate_id[:8] + '...'
    aggregate_id_curto.short_description = 'Aggregate'
