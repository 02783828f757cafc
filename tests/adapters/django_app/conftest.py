"""
Configuração pytest para testes com Django.

O pytest-django configura o Django a partir de
DJANGO_SETTINGS_MODULE (pyproject.toml) e cria o banco de testes
aplicando as migrations.

Este arquivo fornece:
- Organização e atores gravados no banco
- Container global limpo e em modo "sync" por teste
- Cliente HTTP autenticado pelo header X-Actor-Id
"""

import json

import pytest

from src.config.container import get_container, reset_container


@pytest.fixture(autouse=True)
def container_django(settings):
    """Container global novo a cada teste, com handlers em processo."""
    settings.EVENT_PUBLISHER_MODE = 'sync'
    reset_container()
    yield get_container()
    reset_container()


@pytest.fixture
def organizacao_db(db, departamento, outro_departamento, categoria):
    """Departamentos e categoria gravados no banco."""
    from src.adapters.django_app.tickets.models import CategoryModel, DepartmentModel

    for dep in (departamento, outro_departamento):
        DepartmentModel.objects.create(id=dep.id, nome=dep.nome)
    CategoryModel.objects.create(id=categoria.id, nome=categoria.nome, departamento_id=categoria.departamento_id)


@pytest.fixture
def atores_db(organizacao_db, admin, chefe, agente, outro_agente, cliente, outro_cliente):
    """Todos os atores do conftest raiz gravados pelo repositório Django."""
    from src.adapters.django_app.tickets.repositories import DjangoActorRepository

    repo = DjangoActorRepository()
    for ator in (admin, chefe, agente, outro_agente, cliente, outro_cliente):
        repo.save(ator)


@pytest.fixture
def criar_ticket_db(atores_db, container_django, departamento, categoria):
    """Factory: cria ticket pelo caso de uso com o container Django."""
    from src.core.tickets.dtos import CriarTicketInputDTO

    def _criar(ator, assunto="Impressora parada", **kwargs):
        dto = CriarTicketInputDTO(
            assunto=assunto,
            descricao=kwargs.pop("descricao", "A impressora do 3º andar não liga desde ontem"),
            departamento_id=kwargs.pop("departamento_id", departamento.id),
            categoria_id=kwargs.pop("categoria_id", categoria.id),
            **kwargs,
        )
        return container_django.criar_ticket_service().execute(ator, dto)

    return _criar


class ApiClient:
    """Envolve o Client do Django enviando JSON e o header do ator."""

    def __init__(self, client):
        self._client = client

    def _headers(self, ator):
        return {'HTTP_X_ACTOR_ID': ator.id} if ator is not None else {}

    def get(self, path, ator=None, **params):
        return self._client.get(path, params, **self._headers(ator))

    def post(self, path, ator=None, data=None):
        return self._client.post(
            path, json.dumps(data or {}), content_type='application/json', **self._headers(ator)
        )

    def patch(self, path, ator=None, data=None):
        return self._client.patch(
            path, json.dumps(data or {}), content_type='application/json', **self._headers(ator)
        )

    def delete(self, path, ator=None):
        return self._client.delete(path, **self._headers(ator))


@pytest.fixture
def api(client, atores_db):
    return ApiClient(client)
