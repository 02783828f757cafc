"""
Configurações globais do Pytest para o HelpDesk.

Este arquivo é carregado automaticamente pelo pytest e
fornece fixtures e configurações compartilhadas.

Os testes de core usam apenas implementações InMemory (montadas por
`build_testing_container`); os testes de adapters usam o banco de
testes do pytest-django.
"""

from pathlib import Path
import sys

import pytest

# Raiz do projeto no path para imports "src.*"
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.access.actors import ActorEntity
from src.core.access.roles import Role
from src.core.tickets.entities import CategoryEntity, DepartmentEntity


@pytest.fixture(scope="session")
def project_root():
    """Retorna o caminho raiz do projeto."""
    return Path(__file__).parent.parent


# =============================================================================
# Organização e atores (valores, sem persistência)
# =============================================================================

@pytest.fixture
def departamento():
    return DepartmentEntity(id="dep-ti", nome="TI")


@pytest.fixture
def outro_departamento():
    return DepartmentEntity(id="dep-rh", nome="RH")


@pytest.fixture
def categoria(departamento):
    return CategoryEntity(id="cat-hardware", nome="Hardware", departamento_id=departamento.id)


@pytest.fixture
def admin():
    return ActorEntity.criar("Ana Admin", "ana@helpdesk.local", Role.ADMIN, id="admin-1")


@pytest.fixture
def chefe(departamento):
    return ActorEntity.criar(
        "Carlos Chefe", "carlos@helpdesk.local", Role.CHEFE_DEPARTAMENTO,
        departamento_id=departamento.id, id="chefe-1",
    )


@pytest.fixture
def agente(departamento):
    return ActorEntity.criar(
        "Alice Agente", "alice@helpdesk.local", Role.AGENTE,
        departamento_id=departamento.id, id="agente-1",
    )


@pytest.fixture
def outro_agente(departamento):
    return ActorEntity.criar(
        "Bruno Agente", "bruno@helpdesk.local", Role.AGENTE,
        departamento_id=departamento.id, id="agente-2",
    )


@pytest.fixture
def cliente():
    return ActorEntity.criar("Clara Cliente", "clara@cliente.com", Role.CLIENTE, id="cliente-1")


@pytest.fixture
def outro_cliente():
    return ActorEntity.criar("Diego Cliente", "diego@cliente.com", Role.CLIENTE, id="cliente-2")


# =============================================================================
# Container de testes (InMemory)
# =============================================================================

@pytest.fixture
def container(departamento, outro_departamento, categoria, admin, chefe, agente, outro_agente, cliente, outro_cliente):
    """Container com repositórios em memória já populados."""
    from src.config.container import build_testing_container

    c = build_testing_container()
    c.department_repository().save(departamento)
    c.department_repository().save(outro_departamento)
    c.category_repository().save(categoria)
    for ator in (admin, chefe, agente, outro_agente, cliente, outro_cliente):
        c.actor_repository().save(ator)
    return c


@pytest.fixture
def criar_ticket(container, departamento, categoria):
    """Factory: cria ticket pelo caso de uso e devolve o TicketOutputDTO."""
    from src.core.tickets.dtos import CriarTicketInputDTO

    def _criar(ator, assunto="Impressora parada", **kwargs):
        dto = CriarTicketInputDTO(
            assunto=assunto,
            descricao=kwargs.pop("descricao", "A impressora do 3º andar não liga desde ontem"),
            departamento_id=kwargs.pop("departamento_id", departamento.id),
            categoria_id=kwargs.pop("categoria_id", categoria.id),
            **kwargs,
        )
        return container.criar_ticket_service().execute(ator, dto)

    return _criar


# =============================================================================
# Hooks
# =============================================================================

def pytest_configure(config):
    """Configuração do pytest."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


def pytest_collection_modifyitems(config, items):
    """Pula testes marcados como integration sem --run-integration."""
    skip_integration = pytest.mark.skip(reason="use --run-integration para executar")

    for item in items:
        if "integration" in item.keywords:
            if not config.getoption("--run-integration", default=False):
                item.add_marker(skip_integration)


def pytest_addoption(parser):
    """Adiciona opções de linha de comando."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="run integration tests",
    )
