"""
Testes das Views da API JSON.

Testa:
- Autenticação pelo header X-Actor-Id
- Mapeamento de exceções de domínio para status HTTP
- Fluxo completo de ciclo de vida via HTTP, com notificações gravadas
  e emails enviados pelo backend de email do Django
"""

import csv
import io

import pytest
from django.core import mail
from django.urls import reverse

from src.adapters.django_app.tickets.models import NotificationModel, TicketHistoryModel, TicketModel
from src.adapters.django_app.tickets.repositories import DjangoActorRepository
from src.core.shared.clock import agora

pytestmark = pytest.mark.django_db


def _payload_ticket(**extra):
    payload = {
        "assunto": "Impressora parada",
        "descricao": "A impressora do 3º andar não liga desde ontem",
        "departamento_id": "dep-ti",
        "categoria_id": "cat-hardware",
        "prioridade": "ALTA",
        "tags": ["impressora"],
    }
    payload.update(extra)
    return payload


@pytest.fixture
def ticket_id(api, cliente):
    response = api.post(reverse("tickets:api_list"), cliente, _payload_ticket())
    assert response.status_code == 201
    return response.json()["data"]["id"]


class TestAutenticacao:

    def test_sem_header_401(self, api):
        response = api.get(reverse("tickets:api_list"))
        assert response.status_code == 401
        assert response.json()["error"]["error"] == "NOT_AUTHENTICATED"

    def test_ator_desconhecido_401(self, client, atores_db):
        response = client.get(reverse("tickets:api_list"), HTTP_X_ACTOR_ID="fantasma")
        assert response.status_code == 401

    def test_ator_desativado_401(self, api, ticket_id, admin):
        admin.desativar()
        DjangoActorRepository().save(admin)

        assert api.get(reverse("tickets:api_notificacoes"), admin).status_code == 401
        assert api.get(reverse("tickets:api_notificacoes_nao_lidas"), admin).status_code == 401
        response = api.post(reverse("tickets:api_notificacoes_marcar_todas"), admin)
        assert response.status_code == 401
        assert response.json()["error"]["error"] == "NOT_AUTHENTICATED"
        assert NotificationModel.objects.filter(destinatario_id=admin.id, lida=False).count() == 1

    def test_health(self, client):
        assert client.get(reverse("health")).json() == {"status": "ok"}


class TestTicketAPI:

    def test_criar_ticket(self, api, cliente):
        response = api.post(reverse("tickets:api_list"), cliente, _payload_ticket())

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "ABERTO"
        assert data["numero"].startswith(agora().strftime("%Y-%m-"))
        assert TicketHistoryModel.objects.filter(ticket_id=data["id"]).count() == 1

    def test_criar_dados_invalidos_400(self, api, cliente):
        response = api.post(reverse("tickets:api_list"), cliente, _payload_ticket(assunto="Oi"))
        assert response.status_code == 400
        assert response.json()["error"]["field"] == "assunto"

    def test_tags_fora_de_lista_400(self, api, cliente):
        response = api.post(reverse("tickets:api_list"), cliente, _payload_ticket(tags="rede"))
        assert response.status_code == 400
        assert response.json()["error"]["field"] == "tags"

    def test_json_invalido_400(self, client, atores_db):
        response = client.post(
            reverse("tickets:api_list"), "{nao é json", content_type="application/json",
            HTTP_X_ACTOR_ID="cliente-1",
        )
        assert response.status_code == 400

    def test_listagem_respeita_escopo(self, api, ticket_id, cliente, outro_cliente, chefe):
        assert api.get(reverse("tickets:api_list"), cliente).json()["meta"]["total"] == 1
        assert api.get(reverse("tickets:api_list"), outro_cliente).json()["meta"]["total"] == 0

        response = api.get(reverse("tickets:api_list"), chefe, status="ABERTO", per_page=5)
        assert [t["id"] for t in response.json()["data"]] == [ticket_id]

    def test_paginacao_invalida_400(self, api, cliente):
        assert api.get(reverse("tickets:api_list"), cliente, per_page="abc").status_code == 400

    def test_ticket_fora_do_escopo_403(self, api, ticket_id, outro_cliente):
        response = api.get(reverse("tickets:api_detail", args=[ticket_id]), outro_cliente)
        assert response.status_code == 403
        assert response.json()["error"]["error"] == "PERMISSION_DENIED"

    def test_ticket_inexistente_404(self, api, admin):
        assert api.get(reverse("tickets:api_detail", args=["nao-existe"]), admin).status_code == 404

    def test_patch_nao_altera_status(self, api, ticket_id, chefe):
        response = api.patch(reverse("tickets:api_detail", args=[ticket_id]), chefe, {"status": "FECHADO"})
        assert response.status_code == 400

        response = api.patch(reverse("tickets:api_detail", args=[ticket_id]), chefe, {"prioridade": "URGENTE"})
        assert response.status_code == 200
        assert response.json()["data"]["prioridade"] == "URGENTE"

    def test_reabrir_sem_privilegio_422(self, api, ticket_id, admin, cliente):
        api.post(reverse("tickets:api_status", args=[ticket_id]), admin, {"status": "FECHADO"})

        response = api.post(reverse("tickets:api_reabrir", args=[ticket_id]), cliente)

        assert response.status_code == 422
        assert response.json()["error"]["error"] == "INVALID_TRANSITION"
        assert TicketModel.objects.get(id=ticket_id).status == "FECHADO"

    def test_status_desconhecido_400(self, api, ticket_id, admin):
        response = api.post(reverse("tickets:api_status", args=[ticket_id]), admin, {"status": "PAUSADO"})
        assert response.status_code == 400

    def test_cliente_nao_atribui_403(self, api, ticket_id, cliente):
        response = api.post(reverse("tickets:api_atribuir", args=[ticket_id]), cliente, {"responsavel_id": "agente-1"})
        assert response.status_code == 403

    def test_registrar_trabalho_data_futura_400(self, api, ticket_id, chefe):
        api.post(reverse("tickets:api_atribuir", args=[ticket_id]), chefe, {"responsavel_id": "agente-1"})
        response = api.post(
            reverse("tickets:api_trabalho", args=[ticket_id]),
            chefe,
            {"horas": 1, "descricao": "Ajuste no driver", "data_trabalho": "2999-01-01"},
        )
        assert response.status_code == 400
        assert response.json()["error"]["field"] == "data_trabalho"

    def test_excluir_apenas_admin(self, api, ticket_id, chefe, admin):
        assert api.delete(reverse("tickets:api_detail", args=[ticket_id]), chefe).status_code == 403
        assert api.delete(reverse("tickets:api_detail", args=[ticket_id]), admin).status_code == 200
        assert not TicketModel.objects.filter(id=ticket_id).exists()

    def test_estatisticas_e_exportacao(self, api, ticket_id, chefe, cliente):
        stats = api.get(reverse("tickets:api_estatisticas"), chefe).json()["data"]
        assert stats["total"] == 1
        assert stats["por_prioridade"]["ALTA"] == 1
        assert api.get(reverse("tickets:api_estatisticas"), cliente).status_code == 403

        response = api.get(reverse("tickets:api_exportar"), chefe)
        assert response["Content-Type"].startswith("text/csv")
        linhas = list(csv.reader(io.StringIO(response.content.decode())))
        assert len(linhas) == 2

    def test_lote(self, api, ticket_id, chefe, cliente):
        outro = api.post(reverse("tickets:api_list"), cliente, _payload_ticket()).json()["data"]["id"]
        response = api.post(
            reverse("tickets:api_lote_atribuir"), chefe,
            {"ticket_ids": [ticket_id, outro], "responsavel_id": "agente-1"},
        )
        assert response.json()["data"]["total_atualizados"] == 2

        response = api.post(
            reverse("tickets:api_lote_status"), chefe,
            {"ticket_ids": [ticket_id, "nao-existe"], "status": "EM_ESPERA"},
        )
        data = response.json()["data"]
        assert data["atualizados"] == [ticket_id]
        assert "nao-existe" in data["falhas"]


class TestComentarioAPI:

    def test_interno_oculto_para_cliente(self, api, ticket_id, chefe, cliente):
        url = reverse("tickets:api_comentarios", args=[ticket_id])
        assert api.post(url, chefe, {"conteudo": "Verificar garantia", "interno": True}).status_code == 201
        assert api.post(url, chefe, {"conteudo": "Técnico a caminho"}).status_code == 201

        assert len(api.get(url, chefe).json()["data"]) == 2
        assert [c["conteudo"] for c in api.get(url, cliente).json()["data"]] == ["Técnico a caminho"]

    def test_cliente_nao_comenta_interno(self, api, ticket_id, cliente):
        url = reverse("tickets:api_comentarios", args=[ticket_id])
        assert api.post(url, cliente, {"conteudo": "Segredo", "interno": True}).status_code == 403

    def test_editar_e_excluir(self, api, ticket_id, cliente, agente, admin):
        url = reverse("tickets:api_comentarios", args=[ticket_id])
        comentario_id = api.post(url, cliente, {"conteudo": "Continua sem imprimir"}).json()["data"]["id"]
        detalhe = reverse("tickets:api_comentario_detail", args=[comentario_id])

        response = api.patch(detalhe, cliente, {"conteudo": "Continua sem imprimir nada"})
        assert response.status_code == 200
        assert response.json()["data"]["conteudo"] == "Continua sem imprimir nada"

        assert api.delete(detalhe, admin).status_code == 200


class TestNotificacaoAPI:

    def test_caixa_de_entrada(self, api, ticket_id, chefe, cliente):
        nao_lidas = api.get(reverse("tickets:api_notificacoes_nao_lidas"), chefe).json()["data"]
        assert nao_lidas["nao_lidas"] == 1

        itens = api.get(reverse("tickets:api_notificacoes"), chefe).json()["data"]
        notificacao_id = itens[0]["id"]

        # notificação de outro ator é inexistente
        assert api.post(reverse("tickets:api_notificacao_lida", args=[notificacao_id]), cliente).status_code == 404

        assert api.post(reverse("tickets:api_notificacao_lida", args=[notificacao_id]), chefe).status_code == 200
        assert api.get(reverse("tickets:api_notificacoes_nao_lidas"), chefe).json()["data"]["nao_lidas"] == 0

        assert api.delete(reverse("tickets:api_notificacao_detail", args=[notificacao_id]), chefe).status_code == 200
        assert not NotificationModel.objects.filter(id=notificacao_id).exists()

    def test_marcar_todas(self, api, ticket_id, admin):
        response = api.post(reverse("tickets:api_notificacoes_marcar_todas"), admin)
        assert response.json()["data"]["alteradas"] == 1


class TestCicloDeVidaCompleto:
    """
    Cliente abre → chefe atribui → agente registra horas e resolve →
    admin fecha → chefe reabre.
    """

    def test_fluxo(self, api, cliente, chefe, agente, admin):
        criado = api.post(reverse("tickets:api_list"), cliente, _payload_ticket()).json()["data"]
        ticket_id = criado["id"]

        # email de novo ticket para chefe do departamento + admin
        assert len(mail.outbox) == 1
        assert set(mail.outbox[0].to) == {chefe.email, admin.email}

        response = api.post(reverse("tickets:api_atribuir", args=[ticket_id]), chefe, {"responsavel_id": agente.id})
        assert response.json()["data"]["status"] == "EM_PROGRESSO"

        for horas in (1.5, 2.0):
            response = api.post(
                reverse("tickets:api_trabalho", args=[ticket_id]),
                agente,
                {"horas": horas, "descricao": "Troca do fusor e testes", "data_trabalho": agora().date().isoformat()},
            )
            assert response.status_code == 201

        trabalho = api.get(reverse("tickets:api_trabalho", args=[ticket_id]), agente).json()
        assert trabalho["meta"]["total_horas"] == 3.5

        api.post(reverse("tickets:api_status", args=[ticket_id]), agente, {"status": "RESOLVIDO", "nota": "Fusor trocado"})
        response = api.post(reverse("tickets:api_status", args=[ticket_id]), admin, {"status": "FECHADO"})
        fechado = response.json()["data"]
        assert fechado["status"] == "FECHADO"
        assert fechado["horas_reais"] == 3.5

        # relatório de fechamento para o criador
        relatorio = mail.outbox[-1]
        assert relatorio.to == [cliente.email]
        assert criado["numero"] in relatorio.subject
        assert "Fusor trocado" in relatorio.body

        response = api.post(reverse("tickets:api_reabrir", args=[ticket_id]), chefe)
        assert response.json()["data"]["status"] == "ABERTO"

        historico = api.get(reverse("tickets:api_historico", args=[ticket_id]), cliente).json()["data"]
        assert [h["status_novo"] for h in historico] == [
            "ABERTO", "EM_PROGRESSO", "RESOLVIDO", "FECHADO", "ABERTO",
        ]

        titulos = NotificationModel.objects.filter(destinatario_id=cliente.id).values_list("titulo", flat=True)
        assert f"Ticket atribuído: {criado['numero']}" in titulos
        assert sum(1 for t in titulos if t.startswith("Ticket atualizado")) == 3

    def test_fechamento_com_email_fora_do_ar(self, api, settings, cliente, admin):
        settings.EMAIL_BACKEND = "django.core.mail.backends.smtp.EmailBackend"
        settings.EMAIL_HOST = "127.0.0.1"
        settings.EMAIL_PORT = 1
        settings.EMAIL_TIMEOUT = 1

        ticket_id = api.post(reverse("tickets:api_list"), cliente, _payload_ticket()).json()["data"]["id"]
        response = api.post(reverse("tickets:api_status", args=[ticket_id]), admin, {"status": "FECHADO"})

        assert response.status_code == 200
        assert TicketModel.objects.get(id=ticket_id).status == "FECHADO"
        assert NotificationModel.objects.filter(destinatario_id=cliente.id).exists()
