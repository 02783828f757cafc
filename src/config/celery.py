"""
Configuração do Celery para processamento assíncrono.

O Celery é usado para:
- Processar Domain Events depois do commit (notificações)
- Entregas externas com retry limitado (email, relatório de fechamento)
- Tarefas agendadas (limpeza de notificações, reprocessamento da outbox)

Arquitetura:
- Broker: RabbitMQ (mensagens entre Django e Workers)
- Backend: Redis (resultados de tarefas)
- Workers: Processos que executam as tarefas

Uso:
    # Iniciar worker
    celery -A src.config.celery worker -l INFO -Q default,events,notifications

    # Iniciar beat (tarefas agendadas)
    celery -A src.config.celery beat -l INFO
"""

import os

from celery import Celery
from celery.schedules import crontab
from kombu import Exchange, Queue

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

app = Celery('helpdesk')

# Carregar configurações do Django (prefixo CELERY_)
app.config_from_object('django.conf:settings', namespace='CELERY')

app.conf.task_default_queue = 'default'

app.conf.task_queues = (
    Queue('default', Exchange('default'), routing_key='default'),
    Queue('events', Exchange('events'), routing_key='events.#'),
    Queue('notifications', Exchange('notifications'), routing_key='notifications.#'),
)

_HANDLERS = 'src.adapters.django_app.events.handlers'

app.conf.task_routes = {
    f'{_HANDLERS}.dispatch_domain_event': {'queue': 'events'},
    f'{_HANDLERS}.handle_*': {'queue': 'events'},
    f'{_HANDLERS}.enviar_*': {'queue': 'notifications'},
}

app.autodiscover_tasks(['src.adapters.django_app.events'], related_name='handlers')

app.conf.beat_schedule = {
    # Limpar notificações lidas antigas semanalmente (domingo 3h)
    'limpar-notificacoes-antigas': {
        'task': f'{_HANDLERS}.limpar_notificacoes_antigas',
        'schedule': crontab(hour=3, minute=0, day_of_week='sunday'),
    },

    # Republicar eventos pendentes da outbox a cada 5 minutos
    'reprocessar-outbox': {
        'task': f'{_HANDLERS}.reprocessar_outbox',
        'schedule': 300.0,
    },
}
