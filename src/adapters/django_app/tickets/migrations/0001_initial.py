"""
Migration inicial para a Central de Atendimento.

Cria as tabelas:
- departamentos, categorias, atores: organização e papéis
- tickets: Tabela principal de tickets
- ticket_history: Histórico de status
- registros_trabalho: Horas registradas
- comentarios: Comentários de tickets
- notificacoes: Caixa de entrada
- domain_events: Outbox de eventos
"""

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


STATUS_CHOICES = [
    ('ABERTO', 'Aberto'),
    ('EM_PROGRESSO', 'Em progresso'),
    ('EM_ESPERA', 'Em espera'),
    ('RESOLVIDO', 'Resolvido'),
    ('FECHADO', 'Fechado'),
    ('CANCELADO', 'Cancelado'),
]


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        # =================================================================
        # Organização
        # =================================================================
        migrations.CreateModel(
            name='DepartmentModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('nome', models.CharField(max_length=100, unique=True)),
                ('ativo', models.BooleanField(default=True)),
            ],
            options={
                'verbose_name': 'Departamento',
                'verbose_name_plural': 'Departamentos',
                'db_table': 'departamentos',
                'ordering': ['nome'],
            },
        ),
        migrations.CreateModel(
            name='CategoryModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('nome', models.CharField(max_length=100)),
                ('ativo', models.BooleanField(default=True)),
                ('departamento', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='categorias',
                    to='tickets.departmentmodel',
                )),
            ],
            options={
                'verbose_name': 'Categoria',
                'verbose_name_plural': 'Categorias',
                'db_table': 'categorias',
                'ordering': ['nome'],
            },
        ),
        migrations.AddConstraint(
            model_name='categorymodel',
            constraint=models.UniqueConstraint(fields=('departamento', 'nome'), name='categoria_unica_por_departamento'),
        ),
        migrations.CreateModel(
            name='ActorModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('nome', models.CharField(max_length=150)),
                ('email', models.EmailField(max_length=254, unique=True)),
                ('role', models.CharField(
                    choices=[
                        ('ADMIN', 'Administrador'),
                        ('CHEFE_DEPARTAMENTO', 'Chefe de departamento'),
                        ('AGENTE', 'Agente'),
                        ('CLIENTE', 'Cliente'),
                    ],
                    db_index=True,
                    max_length=30,
                )),
                ('ativo', models.BooleanField(db_index=True, default=True)),
                ('departamento', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='atores',
                    to='tickets.departmentmodel',
                )),
            ],
            options={
                'verbose_name': 'Ator',
                'verbose_name_plural': 'Atores',
                'db_table': 'atores',
            },
        ),
        migrations.AddIndex(
            model_name='actormodel',
            index=models.Index(fields=['role', 'departamento', 'ativo'], name='atores_role_depto_ativo_idx'),
        ),

        # =================================================================
        # Tabela: tickets
        # =================================================================
        migrations.CreateModel(
            name='TicketModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('numero', models.CharField(max_length=20, unique=True)),
                ('assunto', models.CharField(db_index=True, max_length=200)),
                ('descricao', models.TextField()),
                ('status', models.CharField(
                    choices=STATUS_CHOICES,
                    db_index=True,
                    default='ABERTO',
                    max_length=20,
                )),
                ('prioridade', models.CharField(
                    choices=[
                        ('BAIXA', 'Baixa'),
                        ('MEDIA', 'Média'),
                        ('ALTA', 'Alta'),
                        ('URGENTE', 'Urgente'),
                    ],
                    db_index=True,
                    default='MEDIA',
                    max_length=10,
                )),
                ('tags', models.JSONField(blank=True, default=list)),
                ('horas_estimadas', models.FloatField(blank=True, null=True)),
                ('horas_reais', models.FloatField(blank=True, null=True)),
                ('data_vencimento', models.DateTimeField(blank=True, null=True)),
                ('resolvido_em', models.DateTimeField(blank=True, null=True)),
                ('fechado_em', models.DateTimeField(blank=True, null=True)),
                ('criado_em', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('atualizado_em', models.DateTimeField(default=django.utils.timezone.now)),
                ('projeto_id', models.CharField(blank=True, max_length=36, null=True)),
                ('criador', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='tickets_criados',
                    to='tickets.actormodel',
                )),
                ('responsavel', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='tickets_atribuidos',
                    to='tickets.actormodel',
                )),
                ('departamento', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='tickets',
                    to='tickets.departmentmodel',
                )),
                ('categoria', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='tickets',
                    to='tickets.categorymodel',
                )),
            ],
            options={
                'verbose_name': 'Ticket',
                'verbose_name_plural': 'Tickets',
                'db_table': 'tickets',
                'ordering': ['-criado_em'],
            },
        ),
        migrations.AddIndex(
            model_name='ticketmodel',
            index=models.Index(fields=['departamento', 'status'], name='tickets_depto_status_idx'),
        ),
        migrations.AddIndex(
            model_name='ticketmodel',
            index=models.Index(fields=['responsavel', 'status'], name='tickets_resp_status_idx'),
        ),
        migrations.AddIndex(
            model_name='ticketmodel',
            index=models.Index(fields=['criador', 'criado_em'], name='tickets_criador_criado_idx'),
        ),

        # =================================================================
        # Tabela: ticket_history
        # =================================================================
        migrations.CreateModel(
            name='TicketHistoryModel',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('entrada_id', models.CharField(max_length=36, unique=True)),
                ('status_anterior', models.CharField(blank=True, choices=STATUS_CHOICES, max_length=20, null=True)),
                ('status_novo', models.CharField(choices=STATUS_CHOICES, max_length=20)),
                ('nota', models.TextField(blank=True, null=True)),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now)),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='history',
                    to='tickets.ticketmodel',
                )),
                ('autor', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='+',
                    to='tickets.actormodel',
                )),
            ],
            options={
                'verbose_name': 'Histórico de Ticket',
                'verbose_name_plural': 'Histórico de Tickets',
                'db_table': 'ticket_history',
                'ordering': ['criado_em', 'id'],
            },
        ),
        migrations.AddIndex(
            model_name='tickethistorymodel',
            index=models.Index(fields=['ticket', 'criado_em'], name='history_ticket_criado_idx'),
        ),

        # =================================================================
        # Tabela: registros_trabalho
        # =================================================================
        migrations.CreateModel(
            name='WorkLogModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('horas', models.FloatField()),
                ('descricao', models.TextField()),
                ('data_trabalho', models.DateField()),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now)),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='work_logs',
                    to='tickets.ticketmodel',
                )),
                ('agente', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='work_logs',
                    to='tickets.actormodel',
                )),
            ],
            options={
                'verbose_name': 'Registro de Trabalho',
                'verbose_name_plural': 'Registros de Trabalho',
                'db_table': 'registros_trabalho',
                'ordering': ['data_trabalho', 'criado_em'],
            },
        ),

        # =================================================================
        # Tabela: comentarios
        # =================================================================
        migrations.CreateModel(
            name='CommentModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('conteudo', models.TextField()),
                ('interno', models.BooleanField(default=False)),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now)),
                ('atualizado_em', models.DateTimeField(default=django.utils.timezone.now)),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='comentarios',
                    to='tickets.ticketmodel',
                )),
                ('autor', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='comentarios',
                    to='tickets.actormodel',
                )),
            ],
            options={
                'verbose_name': 'Comentário',
                'verbose_name_plural': 'Comentários',
                'db_table': 'comentarios',
                'ordering': ['criado_em'],
            },
        ),

        # =================================================================
        # Tabela: notificacoes
        # =================================================================
        migrations.CreateModel(
            name='NotificationModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('titulo', models.CharField(max_length=200)),
                ('mensagem', models.TextField(blank=True)),
                ('tipo', models.CharField(
                    choices=[
                        ('INFO', 'Informação'),
                        ('ADVERTENCIA', 'Advertência'),
                        ('ERRO', 'Erro'),
                        ('SUCESSO', 'Sucesso'),
                    ],
                    default='INFO',
                    max_length=15,
                )),
                ('lida', models.BooleanField(default=False)),
                ('criado_em', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('lida_em', models.DateTimeField(blank=True, null=True)),
                ('destinatario', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='notificacoes',
                    to='tickets.actormodel',
                )),
                ('ticket', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='notificacoes',
                    to='tickets.ticketmodel',
                )),
            ],
            options={
                'verbose_name': 'Notificação',
                'verbose_name_plural': 'Notificações',
                'db_table': 'notificacoes',
                'ordering': ['-criado_em'],
            },
        ),
        migrations.AddIndex(
            model_name='notificationmodel',
            index=models.Index(fields=['destinatario', 'lida'], name='notif_dest_lida_idx'),
        ),

        # =================================================================
        # Tabela: domain_events (Outbox)
        # =================================================================
        migrations.CreateModel(
            name='DomainEventModel',
            fields=[
                ('event_id', models.CharField(max_length=36, primary_key=True, serialize=False)),
                ('event_type', models.CharField(db_index=True, max_length=100)),
                ('aggregate_type', models.CharField(db_index=True, max_length=100)),
                ('aggregate_id', models.CharField(db_index=True, max_length=36)),
                ('event_data', models.JSONField(default=dict)),
                ('version', models.IntegerField(default=1)),
                ('ator_id', models.CharField(blank=True, db_index=True, max_length=36, null=True)),
                ('occurred_at', models.DateTimeField()),
                ('recorded_at', models.DateTimeField(auto_now_add=True)),
                ('dispatched_at', models.DateTimeField(blank=True, db_index=True, null=True)),
            ],
            options={
                'verbose_name': 'Evento de Domínio',
                'verbose_name_plural': 'Eventos de Domínio',
                'db_table': 'domain_events',
                'ordering': ['recorded_at'],
            },
        ),
        migrations.AddIndex(
            model_name='domaineventmodel',
            index=models.Index(fields=['aggregate_id', 'occurred_at'], name='events_aggregate_idx'),
        ),
        migrations.AddIndex(
            model_name='domaineventmodel',
            index=models.Index(fields=['event_type', 'recorded_at'], name='events_type_recorded_idx'),
        ),
    ]
