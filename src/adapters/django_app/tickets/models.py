"""
Django Models para o domínio de Tickets.

Estes models são ADAPTERS - implementam a persistência para as
entidades de domínio definidas em src/core.

IMPORTANTE:
- Models NÃO contêm lógica de negócio
- Lógica de negócio fica nas Entities do Core
- Models são mapeados para/de Entities via Mappers

Tabelas:
- ActorModel / DepartmentModel / CategoryModel: organização e papéis
- TicketModel: Tabela principal de tickets
- TicketHistoryModel: Histórico de status (append-only)
- WorkLogModel: Registro de horas (append-only)
- CommentModel: Comentários
- NotificationModel: Caixa de entrada
- DomainEventModel: Outbox de eventos de domínio

Os nomes das chaves estrangeiras de TicketModel (criador, responsavel,
departamento) produzem as colunas criador_id, responsavel_id e
departamento_id, os mesmos nomes usados pelo filtro de escopo.
"""

from django.db import models
from django.utils import timezone


class RoleChoices(models.TextChoices):
    """Choices para papel (espelha Role do Core)."""
    ADMIN = 'ADMIN', 'Administrador'
    CHEFE_DEPARTAMENTO = 'CHEFE_DEPARTAMENTO', 'Chefe de departamento'
    AGENTE = 'AGENTE', 'Agente'
    CLIENTE = 'CLIENTE', 'Cliente'


class TicketStatusChoices(models.TextChoices):
    """Choices para status de ticket (espelha TicketStatus do Core)."""
    ABERTO = 'ABERTO', 'Aberto'
    EM_PROGRESSO = 'EM_PROGRESSO', 'Em progresso'
    EM_ESPERA = 'EM_ESPERA', 'Em espera'
    RESOLVIDO = 'RESOLVIDO', 'Resolvido'
    FECHADO = 'FECHADO', 'Fechado'
    CANCELADO = 'CANCELADO', 'Cancelado'


class TicketPriorityChoices(models.TextChoices):
    """Choices para prioridade de ticket (espelha TicketPriority do Core)."""
    BAIXA = 'BAIXA', 'Baixa'
    MEDIA = 'MEDIA', 'Média'
    ALTA = 'ALTA', 'Alta'
    URGENTE = 'URGENTE', 'Urgente'


class NotificationKindChoices(models.TextChoices):
    INFO = 'INFO', 'Informação'
    ADVERTENCIA = 'ADVERTENCIA', 'Advertência'
    ERRO = 'ERRO', 'Erro'
    SUCESSO = 'SUCESSO', 'Sucesso'


class DepartmentModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, editable=False)
    nome = models.CharField(max_length=100, unique=True)
    ativo = models.BooleanField(default=True)

    class Meta:
        db_table = 'departamentos'
        verbose_name = 'Departamento'
        verbose_name_plural = 'Departamentos'
        ordering = ['nome']

    def __str__(self):
        return self.nome


class CategoryModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, editable=False)
    nome = models.CharField(max_length=100)
    departamento = models.ForeignKey(
        DepartmentModel,
        on_delete=models.PROTECT,
        related_name='categorias',
    )
    ativo = models.BooleanField(default=True)

    class Meta:
        db_table = 'categorias'
        verbose_name = 'Categoria'
        verbose_name_plural = 'Categorias'
        ordering = ['nome']
        constraints = [
            models.UniqueConstraint(fields=['departamento', 'nome'], name='categoria_unica_por_departamento'),
        ]

    def __str__(self):
        return self.nome


class ActorModel(models.Model):
    """
    Ator autenticado (identidade + papel).

    A autenticação acontece fora deste app; aqui só ficam os dados
    usados nas decisões de autorização e na entrega de notificações.
    Atores não são excluídos, apenas desativados.
    """

    id = models.CharField(max_length=36, primary_key=True, editable=False)
    nome = models.CharField(max_length=150)
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=30, choices=RoleChoices.choices, db_index=True)
    departamento = models.ForeignKey(
        DepartmentModel,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='atores',
    )
    ativo = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = 'atores'
        verbose_name = 'Ator'
        verbose_name_plural = 'Atores'
        indexes = [
            models.Index(fields=['role', 'departamento', 'ativo'], name='atores_role_depto_ativo_idx'),
        ]

    def __str__(self):
        return f"{self.nome} ({self.role})"


class TicketModel(models.Model):
    """
    Model Django para persistência de Tickets.

    Este model é um ADAPTER que persiste dados do TicketEntity.
    NÃO contém lógica de negócio - apenas estrutura de dados.

    `numero` é único: é a constraint que detecta colisões na geração
    concorrente de números.
    """

    # Primary Key - UUID gerado pela Entity
    id = models.CharField(max_length=36, primary_key=True, editable=False)
    numero = models.CharField(max_length=20, unique=True)

    # Dados principais
    assunto = models.CharField(max_length=200, db_index=True)
    descricao = models.TextField()
    status = models.CharField(
        max_length=20,
        choices=TicketStatusChoices.choices,
        default=TicketStatusChoices.ABERTO,
        db_index=True,
    )
    prioridade = models.CharField(
        max_length=10,
        choices=TicketPriorityChoices.choices,
        default=TicketPriorityChoices.MEDIA,
        db_index=True,
    )
    tags = models.JSONField(default=list, blank=True)

    # Horas
    horas_estimadas = models.FloatField(null=True, blank=True)
    horas_reais = models.FloatField(null=True, blank=True)

    # Datas
    data_vencimento = models.DateTimeField(null=True, blank=True)
    resolvido_em = models.DateTimeField(null=True, blank=True)
    fechado_em = models.DateTimeField(null=True, blank=True)
    criado_em = models.DateTimeField(default=timezone.now, db_index=True)
    atualizado_em = models.DateTimeField(default=timezone.now)

    # Relacionamentos
    criador = models.ForeignKey(
        ActorModel,
        on_delete=models.PROTECT,
        related_name='tickets_criados',
    )
    responsavel = models.ForeignKey(
        ActorModel,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='tickets_atribuidos',
    )
    departamento = models.ForeignKey(
        DepartmentModel,
        on_delete=models.PROTECT,
        related_name='tickets',
    )
    categoria = models.ForeignKey(
        CategoryModel,
        on_delete=models.PROTECT,
        related_name='tickets',
    )
    projeto_id = models.CharField(max_length=36, null=True, blank=True)

    class Meta:
        db_table = 'tickets'
        verbose_name = 'Ticket'
        verbose_name_plural = 'Tickets'
        ordering = ['-criado_em']
        indexes = [
            # Índices compostos para os filtros de escopo
            models.Index(fields=['departamento', 'status'], name='tickets_depto_status_idx'),
            models.Index(fields=['responsavel', 'status'], name='tickets_resp_status_idx'),
            models.Index(fields=['criador', 'criado_em'], name='tickets_criador_criado_idx'),
        ]

    def __str__(self):
        return f"[{self.numero}] {self.assunto}"

    def __repr__(self):
        return f"<TicketModel numero={self.numero} status={self.status}>"


class TicketHistoryModel(models.Model):
    """
    Histórico de status (append-only).

    Uma linha por mudança de status, gravada na mesma transação do
    update do ticket. status_anterior nulo apenas na criação.
    """

    id = models.BigAutoField(primary_key=True)
    entrada_id = models.CharField(max_length=36, unique=True)
    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='history',
    )
    status_anterior = models.CharField(
        max_length=20,
        choices=TicketStatusChoices.choices,
        null=True,
        blank=True,
    )
    status_novo = models.CharField(max_length=20, choices=TicketStatusChoices.choices)
    nota = models.TextField(null=True, blank=True)
    autor = models.ForeignKey(
        ActorModel,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    criado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'ticket_history'
        verbose_name = 'Histórico de Ticket'
        verbose_name_plural = 'Histórico de Tickets'
        ordering = ['criado_em', 'id']
        indexes = [
            models.Index(fields=['ticket', 'criado_em'], name='history_ticket_criado_idx'),
        ]

    def __str__(self):
        return f"{self.status_anterior} → {self.status_novo} @ {self.criado_em}"


class WorkLogModel(models.Model):
    """Registro de horas (append-only). Soma espelha TicketModel.horas_reais."""

    id = models.CharField(max_length=36, primary_key=True, editable=False)
    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='work_logs',
    )
    agente = models.ForeignKey(
        ActorModel,
        on_delete=models.PROTECT,
        related_name='work_logs',
    )
    horas = models.FloatField()
    descricao = models.TextField()
    data_trabalho = models.DateField()
    criado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'registros_trabalho'
        verbose_name = 'Registro de Trabalho'
        verbose_name_plural = 'Registros de Trabalho'
        ordering = ['data_trabalho', 'criado_em']

    def __str__(self):
        return f"{self.horas}h em {self.data_trabalho}"


class CommentModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, editable=False)
    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='comentarios',
    )
    autor = models.ForeignKey(
        ActorModel,
        on_delete=models.PROTECT,
        related_name='comentarios',
    )
    conteudo = models.TextField()
    interno = models.BooleanField(default=False)
    criado_em = models.DateTimeField(default=timezone.now)
    atualizado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'comentarios'
        verbose_name = 'Comentário'
        verbose_name_plural = 'Comentários'
        ordering = ['criado_em']

    def __str__(self):
        return self.conteudo[:50]


class NotificationModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, editable=False)
    destinatario = models.ForeignKey(
        ActorModel,
        on_delete=models.CASCADE,
        related_name='notificacoes',
    )
    titulo = models.CharField(max_length=200)
    mensagem = models.TextField(blank=True)
    tipo = models.CharField(
        max_length=15,
        choices=NotificationKindChoices.choices,
        default=NotificationKindChoices.INFO,
    )
    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='notificacoes',
    )
    lida = models.BooleanField(default=False)
    criado_em = models.DateTimeField(default=timezone.now, db_index=True)
    lida_em = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'notificacoes'
        verbose_name = 'Notificação'
        verbose_name_plural = 'Notificações'
        ordering = ['-criado_em']
        indexes = [
            models.Index(fields=['destinatario', 'lida'], name='notif_dest_lida_idx'),
        ]

    def __str__(self):
        return self.titulo


class DomainEventModel(models.Model):
    """
    Outbox de Domain Events.

    Cada evento é gravado na mesma transação da mutação que o gerou e
    marcado como despachado quando entregue ao publisher. Eventos com
    dispatched_at nulo são efeitos pendentes.
    """

    # Identificação
    event_id = models.CharField(max_length=36, primary_key=True)
    event_type = models.CharField(max_length=100, db_index=True)
    aggregate_type = models.CharField(max_length=100, db_index=True)
    aggregate_id = models.CharField(max_length=36, db_index=True)

    # Dados do evento
    event_data = models.JSONField(default=dict)
    version = models.IntegerField(default=1)

    # Metadata
    ator_id = models.CharField(max_length=36, null=True, blank=True, db_index=True)
    occurred_at = models.DateTimeField()
    recorded_at = models.DateTimeField(auto_now_add=True)
    dispatched_at = models.DateTimeField(null=True, blank=True, db_index=True)

    class Meta:
        db_table = 'domain_events'
        verbose_name = 'Evento de Domínio'
        verbose_name_plural = 'Eventos de Domínio'
        ordering = ['recorded_at']
        indexes = [
            models.Index(fields=['aggregate_id', 'occurred_at'], name='events_aggregate_idx'),
            models.Index(fields=['event_type', 'recorded_at'], name='events_type_recorded_idx'),
        ]

    def __str__(self):
        return f"{self.event_type} - {self.aggregate_id[:8]} @ {self.occurred_at}"
