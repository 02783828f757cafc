"""
URL Configuration para o HelpDesk.

Estrutura:
- /admin/ - Django Admin
- /tickets/api/ - API de Tickets, comentários e notificações
- /health/ - Health check
"""

from django.contrib import admin
from django.http import JsonResponse
from django.urls import path, include


def health(request):
    return JsonResponse({'status': 'ok'})


urlpatterns = [
    # Django Admin
    path('admin/', admin.site.urls),

    # Tickets App
    path('tickets/', include('src.adapters.django_app.tickets.urls')),

    # Health check
    path('health/', health, name='health'),
]
