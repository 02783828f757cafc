"""
Testes do fan-out de notificações.

O fan-out é uma função do evento e dos atores atuais: não grava nem
entrega nada, apenas calcula notificações e efeitos.
"""

import pytest

from src.core.access.ports import InMemoryActorRepository
from src.core.notifications.entities import (
    EnviarEmailEffect,
    EnviarRelatorioFechamentoEffect,
    NotificationKind,
)
from src.core.notifications.fan_out import NotificationFanOut
from src.core.tickets.events import (
    ComentarioAdicionadoEvent,
    StatusAlteradoEvent,
    TicketAtribuidoEvent,
    TicketCriadoEvent,
    TrabalhoRegistradoEvent,
)


@pytest.fixture
def fan_out(admin, chefe, agente, cliente):
    atores = InMemoryActorRepository()
    for ator in (admin, chefe, agente, cliente):
        atores.save(ator)
    return NotificationFanOut(atores), atores


def _destinatarios(resultado):
    return sorted(n.destinatario_id for n in resultado.notificacoes)


class TestTicketCriado:

    def test_chefes_do_departamento_e_admins(self, fan_out):
        fan, _ = fan_out
        resultado = fan.ao_evento(TicketCriadoEvent(
            aggregate_id="t-1", numero="2025-07-000001", assunto="Impressora parada",
            criador_id="cliente-1", departamento_id="dep-ti", prioridade="MEDIA",
        ))

        assert _destinatarios(resultado) == ["admin-1", "chefe-1"]
        assert len(resultado.efeitos) == 1
        assert isinstance(resultado.efeitos[0], EnviarEmailEffect)
        assert resultado.notificacoes[0].titulo == "Novo ticket: 2025-07-000001"

    def test_chefe_de_outro_departamento_nao_recebe(self, fan_out):
        fan, _ = fan_out
        resultado = fan.ao_evento(TicketCriadoEvent(
            aggregate_id="t-1", numero="2025-07-000001", departamento_id="dep-rh",
        ))
        assert _destinatarios(resultado) == ["admin-1"]

    def test_atores_inativos_sao_ignorados(self, fan_out, chefe, admin):
        fan, atores = fan_out
        chefe.desativar()
        admin.desativar()
        atores.save(chefe)
        atores.save(admin)

        resultado = fan.ao_evento(TicketCriadoEvent(aggregate_id="t-1", departamento_id="dep-ti"))
        assert resultado.vazio


class TestTicketAtribuido:

    def test_responsavel_e_criador(self, fan_out):
        fan, _ = fan_out
        resultado = fan.ao_evento(TicketAtribuidoEvent(
            aggregate_id="t-1", numero="2025-07-000001", assunto="Impressora parada",
            responsavel_id="agente-1", criador_id="cliente-1",
        ))
        assert _destinatarios(resultado) == ["agente-1", "cliente-1"]
        assert resultado.efeitos == []

    def test_criador_responsavel_recebe_uma_vez(self, fan_out):
        fan, _ = fan_out
        resultado = fan.ao_evento(TicketAtribuidoEvent(
            aggregate_id="t-1", responsavel_id="chefe-1", criador_id="chefe-1",
        ))
        assert _destinatarios(resultado) == ["chefe-1"]


class TestStatusAlterado:

    def test_criador_notificado(self, fan_out):
        fan, _ = fan_out
        resultado = fan.ao_evento(StatusAlteradoEvent(
            aggregate_id="t-1", numero="2025-07-000001", assunto="Impressora parada",
            status_anterior="ABERTO", status_novo="EM_ESPERA", criador_id="cliente-1",
        ))
        assert _destinatarios(resultado) == ["cliente-1"]
        assert resultado.notificacoes[0].tipo == NotificationKind.INFO
        assert "ABERTO para EM_ESPERA" in resultado.notificacoes[0].mensagem
        assert resultado.efeitos == []

    def test_fechamento_dispara_relatorio(self, fan_out, cliente):
        fan, _ = fan_out
        resultado = fan.ao_evento(StatusAlteradoEvent(
            aggregate_id="t-1", numero="2025-07-000001", status_anterior="RESOLVIDO",
            status_novo="FECHADO", criador_id="cliente-1",
        ))

        assert resultado.notificacoes[0].tipo == NotificationKind.SUCESSO
        assert resultado.efeitos == [
            EnviarRelatorioFechamentoEffect(ticket_id="t-1", numero="2025-07-000001", destinatario=cliente.email)
        ]

    def test_reabertura_tem_mensagem_propria(self, fan_out):
        fan, _ = fan_out
        resultado = fan.ao_evento(StatusAlteradoEvent(
            aggregate_id="t-1", assunto="Impressora parada", status_anterior="FECHADO",
            status_novo="ABERTO", criador_id="cliente-1", reaberto=True,
        ))
        assert "reaberto" in resultado.notificacoes[0].mensagem


class TestComentarioAdicionado:

    def test_publico_exclui_o_autor(self, fan_out):
        fan, _ = fan_out
        resultado = fan.ao_evento(ComentarioAdicionadoEvent(
            aggregate_id="t-1", numero="2025-07-000001", autor_id="agente-1",
            criador_id="cliente-1", responsavel_id="agente-1",
        ))
        assert _destinatarios(resultado) == ["cliente-1"]
        assert "Alice Agente" in resultado.notificacoes[0].mensagem

    def test_interno_nao_notifica(self, fan_out):
        fan, _ = fan_out
        resultado = fan.ao_evento(ComentarioAdicionadoEvent(
            aggregate_id="t-1", autor_id="agente-1", criador_id="cliente-1", interno=True,
        ))
        assert resultado.vazio

    def test_ticket_sem_responsavel(self, fan_out):
        fan, _ = fan_out
        resultado = fan.ao_evento(ComentarioAdicionadoEvent(
            aggregate_id="t-1", autor_id="chefe-1", criador_id="cliente-1",
        ))
        assert _destinatarios(resultado) == ["cliente-1"]


def test_evento_sem_regra_nao_gera_nada(fan_out):
    fan, _ = fan_out
    assert fan.ao_evento(TrabalhoRegistradoEvent(aggregate_id="t-1", horas=2.0)).vazio
