"""
Testes do DjangoUnitOfWork.

- Commit grava outbox na mesma transação e publica depois
- Exceção desfaz tudo e descarta eventos
- Falha do publisher nunca desfaz o commit
- Mesma instância reutilizável em blocos sequenciais
"""

from unittest.mock import Mock

import pytest

from src.adapters.django_app.shared.unit_of_work import DjangoUnitOfWork
from src.adapters.django_app.tickets.models import DomainEventModel, TicketModel
from src.adapters.django_app.tickets.repositories import DjangoOutboxStore, DjangoTicketRepository
from src.core.tickets.entities import TicketEntity
from src.core.tickets.events import TicketCriadoEvent

pytestmark = pytest.mark.django_db


def _ticket(numero="2025-07-000001"):
    return TicketEntity.criar(
        numero=numero,
        assunto="Impressora parada",
        descricao="A impressora do 3º andar não liga",
        criador_id="cliente-1",
        departamento_id="dep-ti",
        categoria_id="cat-hardware",
    )


def _evento(ticket):
    return TicketCriadoEvent(aggregate_id=ticket.id, numero=ticket.numero, departamento_id="dep-ti")


@pytest.fixture
def publisher():
    return Mock()


@pytest.fixture
def uow(atores_db, publisher):
    return DjangoUnitOfWork(event_publisher=publisher, outbox=DjangoOutboxStore())


def test_commit_grava_outbox_e_publica(uow, publisher):
    ticket = _ticket()
    with uow:
        DjangoTicketRepository().add(ticket)
        uow.publish_event(_evento(ticket))
        publisher.publish.assert_not_called()

    assert uow.is_committed
    assert TicketModel.objects.filter(id=ticket.id).exists()
    publisher.publish.assert_called_once()
    registro = DomainEventModel.objects.get(aggregate_id=ticket.id)
    assert registro.dispatched_at is not None


def test_excecao_faz_rollback_e_descarta_eventos(uow, publisher):
    ticket = _ticket()
    with pytest.raises(RuntimeError):
        with uow:
            DjangoTicketRepository().add(ticket)
            uow.publish_event(_evento(ticket))
            raise RuntimeError("falha no meio da operação")

    assert uow.is_rolled_back
    assert not TicketModel.objects.filter(id=ticket.id).exists()
    assert not DomainEventModel.objects.exists()
    publisher.publish.assert_not_called()


def test_falha_do_publisher_mantem_commit_e_evento_pendente(uow, publisher):
    publisher.publish.side_effect = ConnectionError("broker fora")
    ticket = _ticket()

    with uow:
        DjangoTicketRepository().add(ticket)
        uow.publish_event(_evento(ticket))

    assert TicketModel.objects.filter(id=ticket.id).exists()
    assert [p["aggregate_id"] for p in DjangoOutboxStore().list_pending()] == [ticket.id]


def test_reutilizavel_em_blocos_sequenciais(uow, publisher):
    primeiro, segundo = _ticket("2025-07-000001"), _ticket("2025-07-000002")

    with pytest.raises(ValueError):
        with uow:
            DjangoTicketRepository().add(primeiro)
            raise ValueError("tentativa descartada")

    with uow:
        DjangoTicketRepository().add(segundo)
        uow.publish_event(_evento(segundo))

    assert list(TicketModel.objects.values_list("numero", flat=True)) == ["2025-07-000002"]
    assert publisher.publish.call_count == 1


def test_bloco_aninhado_nao_e_permitido(uow):
    with uow:
        with pytest.raises(RuntimeError):
            uow._begin_transaction()
