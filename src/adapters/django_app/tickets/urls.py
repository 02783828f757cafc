"""
URL patterns para o domínio de Tickets.

Apenas API JSON; rotas fixas antes de <pk> para não conflitar.
"""

from django.urls import path
from . import api_views

app_name = 'tickets'

urlpatterns = [
    # Listagem e criação
    path('api/', api_views.TicketAPIListView.as_view(), name='api_list'),

    # Relatórios
    path('api/estatisticas/', api_views.TicketAPIEstatisticasView.as_view(), name='api_estatisticas'),
    path('api/exportar/', api_views.TicketAPIExportarView.as_view(), name='api_exportar'),

    # Lote
    path('api/lote/atribuir/', api_views.TicketAPILoteAtribuirView.as_view(), name='api_lote_atribuir'),
    path('api/lote/status/', api_views.TicketAPILoteStatusView.as_view(), name='api_lote_status'),

    # Notificações
    path('api/notificacoes/', api_views.NotificacaoAPIListView.as_view(), name='api_notificacoes'),
    path('api/notificacoes/nao-lidas/', api_views.NotificacaoAPINaoLidasView.as_view(), name='api_notificacoes_nao_lidas'),
    path('api/notificacoes/marcar-todas/', api_views.NotificacaoAPIMarcarTodasView.as_view(), name='api_notificacoes_marcar_todas'),
    path('api/notificacoes/<str:pk>/lida/', api_views.NotificacaoAPILidaView.as_view(), name='api_notificacao_lida'),
    path('api/notificacoes/<str:pk>/', api_views.NotificacaoAPIDetailView.as_view(), name='api_notificacao_detail'),

    # Comentários
    path('api/comentarios/<str:pk>/', api_views.ComentarioAPIDetailView.as_view(), name='api_comentario_detail'),

    # Ticket
    path('api/<str:pk>/', api_views.TicketAPIDetailView.as_view(), name='api_detail'),
    path('api/<str:pk>/status/', api_views.TicketAPIStatusView.as_view(), name='api_status'),
    path('api/<str:pk>/reabrir/', api_views.TicketAPIReabrirView.as_view(), name='api_reabrir'),
    path('api/<str:pk>/atribuir/', api_views.TicketAPIAtribuirView.as_view(), name='api_atribuir'),
    path('api/<str:pk>/historico/', api_views.TicketAPIHistoricoView.as_view(), name='api_historico'),
    path('api/<str:pk>/trabalho/', api_views.TicketAPITrabalhoView.as_view(), name='api_trabalho'),
    path('api/<str:pk>/comentarios/', api_views.ComentarioAPIListView.as_view(), name='api_comentarios'),
]
