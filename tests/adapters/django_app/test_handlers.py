"""
Testes das tasks Celery, publishers e entrega de notificações.

As tasks rodam com `.apply()` (execução local, retry incluído) e o
broker é substituído por mocks de `.delay`.
"""

from datetime import timedelta
from unittest.mock import Mock, patch

import pytest

from src.adapters.django_app.events import handlers
from src.adapters.django_app.events.publishers import (
    CeleryEventPublisher,
    LoggingEventPublisher,
    get_event_publisher,
)
from src.adapters.django_app.notifications.delivery import (
    CeleryTaskDelivery,
    montar_relatorio_fechamento,
)
from src.adapters.django_app.tickets.models import DomainEventModel, NotificationModel
from src.adapters.django_app.tickets.repositories import (
    DjangoOutboxStore,
    DjangoTicketRepository,
    DjangoWorkLogRepository,
)
from src.core.shared.clock import agora
from src.core.tickets.events import TicketCriadoEvent, TrabalhoRegistradoEvent


class TestDispatcher:

    def test_roteia_para_handler_de_notificacoes(self):
        evento = TicketCriadoEvent(aggregate_id="t-1", numero="2025-07-000001")
        with patch.object(handlers.handle_notificacoes, "delay") as delay:
            handlers.dispatch_domain_event.apply(args=[evento.event_type, evento.to_dict()])
        delay.assert_called_once_with(evento.to_dict())

    def test_trabalho_registrado_tem_handler_proprio(self):
        evento = TrabalhoRegistradoEvent(aggregate_id="t-1", horas=2.0)
        with patch.object(handlers.handle_trabalho_registrado, "delay") as delay:
            handlers.dispatch_domain_event.apply(args=[evento.event_type, evento.to_dict()])
        delay.assert_called_once()

    def test_evento_desconhecido_e_ignorado(self):
        with patch.object(handlers.handle_notificacoes, "delay") as delay:
            handlers.dispatch_domain_event.apply(args=["EventoQueNaoExiste", {}])
        delay.assert_not_called()


@pytest.mark.django_db
class TestHandleNotificacoes:

    def test_dados_invalidos_sao_descartados(self):
        resultado = handlers.handle_notificacoes.apply(args=[{"event_type": "Nada"}])
        assert resultado.get() == 0

    def test_grava_notificacoes_do_evento(self, criar_ticket_db, cliente):
        ticket = criar_ticket_db(cliente)
        antes = NotificationModel.objects.count()

        evento = TicketCriadoEvent(
            aggregate_id=ticket.id,
            ator_id=cliente.id,
            numero=ticket.numero,
            assunto=ticket.assunto,
            criador_id=cliente.id,
            departamento_id="dep-ti",
            prioridade="MEDIA",
        )
        gravadas = handlers.handle_notificacoes.apply(args=[evento.to_dict()]).get()

        # chefe do departamento + admin
        assert gravadas == 2
        assert NotificationModel.objects.count() == antes + 2


class TestTasksDeEntrega:

    def test_email_desiste_apos_tentativas(self):
        delivery = Mock()
        delivery.send_email.side_effect = ConnectionRefusedError("smtp fora")

        with patch.object(handlers, "_delivery_sincrono", return_value=delivery), \
                patch.object(handlers, "logger") as logger:
            handlers.enviar_email_task.apply(args=[["a@x.com"], "Assunto", "Corpo"])

        assert delivery.send_email.call_count == handlers.enviar_email_task.max_retries + 1
        assert "Desistindo" in logger.error.call_args[0][0]

    def test_relatorio_de_ticket_removido_nao_tenta_de_novo(self):
        delivery = Mock()
        delivery.send_closure_report.side_effect = LookupError("Ticket 2025-07-000001 não existe mais")

        with patch.object(handlers, "_delivery_sincrono", return_value=delivery):
            handlers.enviar_relatorio_fechamento_task.apply(args=["t-1", "2025-07-000001", "c@x.com"])

        delivery.send_closure_report.assert_called_once()

    def test_celery_task_delivery_enfileira(self):
        with patch.object(handlers.enviar_email_task, "delay") as email, \
                patch.object(handlers.enviar_relatorio_fechamento_task, "delay") as relatorio:
            CeleryTaskDelivery().send_email(("a@x.com", "b@x.com"), "Assunto", "Corpo")
            CeleryTaskDelivery().send_closure_report("t-1", "2025-07-000001", "c@x.com")

        email.assert_called_once_with(["a@x.com", "b@x.com"], "Assunto", "Corpo")
        relatorio.assert_called_once_with("t-1", "2025-07-000001", "c@x.com")


class TestPublishers:

    def test_celery_publisher_envia_para_dispatcher(self):
        evento = TicketCriadoEvent(aggregate_id="t-1")
        with patch.object(handlers.dispatch_domain_event, "delay") as delay:
            CeleryEventPublisher(also_log=False).publish(evento)
        delay.assert_called_once_with("TicketCriadoEvent", evento.to_dict())

    def test_modos_da_factory(self):
        assert isinstance(get_event_publisher("celery"), CeleryEventPublisher)
        assert isinstance(get_event_publisher("log"), LoggingEventPublisher)

    def test_handler_com_erro_nao_propaga(self):
        publisher = LoggingEventPublisher()
        chamado = Mock(side_effect=RuntimeError("handler quebrado"))
        publisher.register_handler("TicketCriadoEvent", chamado)

        publisher.publish(TicketCriadoEvent(aggregate_id="t-1"))

        chamado.assert_called_once()


@pytest.mark.django_db
class TestTarefasAgendadas:

    def test_reprocessar_outbox_republica_pendentes_antigos(self, atores_db, container_django):
        outbox = DjangoOutboxStore()
        antigo = TicketCriadoEvent(aggregate_id="t-1", numero="2025-07-000001")
        recente = TicketCriadoEvent(aggregate_id="t-2", numero="2025-07-000002")
        outbox.append(antigo)
        outbox.append(recente)
        DomainEventModel.objects.filter(event_id=antigo.event_id).update(
            recorded_at=agora() - timedelta(minutes=10)
        )

        publisher = Mock()
        container_django.event_publisher.override(publisher)
        republicados = handlers.reprocessar_outbox.apply().get()

        assert republicados == 1
        assert publisher.publish.call_args[0][0].event_id == antigo.event_id
        assert [p["event_id"] for p in outbox.list_pending()] == [recente.event_id]

    def test_reprocessar_outbox_mantem_pendente_se_publicar_falha(self, atores_db, container_django):
        outbox = DjangoOutboxStore()
        evento = TicketCriadoEvent(aggregate_id="t-1")
        outbox.append(evento)

        publisher = Mock()
        publisher.publish.side_effect = ConnectionError("broker fora")
        container_django.event_publisher.override(publisher)
        republicados = handlers.reprocessar_outbox.apply(kwargs={"atraso_minutos": 0}).get()

        assert republicados == 0
        assert [p["event_id"] for p in outbox.list_pending()] == [evento.event_id]

    def test_limpar_notificacoes_antigas(self, criar_ticket_db, cliente, chefe):
        criar_ticket_db(cliente)
        NotificationModel.objects.filter(destinatario_id=chefe.id).update(
            lida=True, lida_em=agora(), criado_em=agora() - timedelta(days=60)
        )

        assert handlers.limpar_notificacoes_antigas.apply().get() == 1
        assert not NotificationModel.objects.filter(destinatario_id=chefe.id).exists()


@pytest.mark.django_db
class TestRelatorioFechamento:

    def test_ticket_inexistente(self):
        with pytest.raises(LookupError):
            montar_relatorio_fechamento(DjangoTicketRepository(), DjangoWorkLogRepository(), "nao-existe", "2025-07-000001")

    def test_conteudo(self, criar_ticket_db, cliente):
        ticket = criar_ticket_db(cliente, assunto="Mouse sem fio falhando")
        assunto, corpo = montar_relatorio_fechamento(
            DjangoTicketRepository(), DjangoWorkLogRepository(), ticket.id, ticket.numero
        )
        assert assunto == f"Ticket {ticket.numero} - Trabalho concluído"
        assert "Assunto: Mouse sem fio falhando" in corpo
        assert "- -> ABERTO" in corpo
