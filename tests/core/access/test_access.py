"""
Testes do modelo de papéis, capacidades e filtro de escopo.

Coverage:
- Tabela papel → capacidades
- exigir_capacidade (PermissionDenied)
- escopo_para / pode_acessar (mesmo predicado para listas e instâncias)
- Redação de comentários internos
- Invariantes de departamento do ator
"""

import pytest

from src.core.access.actors import ActorEntity
from src.core.access.roles import (
    Capability,
    Role,
    capacidades_de,
    exigir_capacidade,
    tem_capacidade,
)
from src.core.access.scope import (
    comentarios_visiveis,
    escopo_para,
    garantir_acesso,
    pode_acessar,
)
from src.core.shared.exceptions import PermissionDeniedError, ValidationError
from src.core.tickets.entities import CommentEntity, TicketEntity, TicketStatus


def _ticket(criador_id="cliente-1", departamento_id="dep-ti", responsavel_id=None):
    return TicketEntity.reconstituir(
        TicketStatus.ABERTO,
        numero="2025-07-000001",
        assunto="Impressora parada",
        descricao="A impressora não liga",
        criador_id=criador_id,
        departamento_id=departamento_id,
        categoria_id="cat-hardware",
        responsavel_id=responsavel_id,
    )


class TestCapacidades:

    def test_apenas_admin_exclui_tickets(self):
        assert Capability.TICKETS_EXCLUIR in capacidades_de(Role.ADMIN)
        for role in (Role.CHEFE_DEPARTAMENTO, Role.AGENTE, Role.CLIENTE):
            assert Capability.TICKETS_EXCLUIR not in capacidades_de(role)

    @pytest.mark.parametrize("role,pode", [
        (Role.ADMIN, True),
        (Role.CHEFE_DEPARTAMENTO, True),
        (Role.AGENTE, False),
        (Role.CLIENTE, False),
    ])
    def test_atribuir_e_reabrir(self, role, pode):
        assert (Capability.TICKETS_ATRIBUIR in capacidades_de(role)) is pode
        assert (Capability.TICKETS_REABRIR in capacidades_de(role)) is pode

    def test_todos_podem_criar_e_transicionar(self):
        for role in Role:
            assert Capability.TICKETS_CRIAR in capacidades_de(role)
            assert Capability.TICKETS_ALTERAR_STATUS in capacidades_de(role)

    def test_cliente_nao_ve_internos(self):
        assert Capability.TICKETS_VER_INTERNOS not in capacidades_de(Role.CLIENTE)
        assert Capability.TICKETS_VER_INTERNOS in capacidades_de(Role.AGENTE)

    def test_exigir_capacidade_nega_com_nome_da_capacidade(self, cliente):
        with pytest.raises(PermissionDeniedError) as exc_info:
            exigir_capacidade(cliente, Capability.TICKETS_ATRIBUIR)
        assert exc_info.value.capability == "tickets.assign"

    def test_ator_inativo_nao_tem_capacidades(self, admin):
        admin.desativar()
        assert not tem_capacidade(admin, Capability.TICKETS_CRIAR)

    def test_papel_legado_e_aceito(self):
        assert Role.from_string("jefe_departamento") == Role.CHEFE_DEPARTAMENTO
        with pytest.raises(ValueError):
            Role.from_string("SUPERVISOR")


class TestAtor:

    def test_agente_exige_departamento(self):
        with pytest.raises(ValidationError):
            ActorEntity.criar("Alice", "alice@x.com", Role.AGENTE)

    def test_cliente_nao_pertence_a_departamento(self):
        with pytest.raises(ValidationError):
            ActorEntity.criar("Clara", "clara@x.com", Role.CLIENTE, departamento_id="dep-ti")

    def test_email_normalizado(self):
        assert ActorEntity.criar("Ana", " Ana@X.com ", Role.ADMIN).email == "ana@x.com"


class TestEscopo:

    def test_admin_sem_restricao(self, admin):
        escopo = escopo_para(admin)
        assert escopo.irrestrito
        assert escopo.como_filtro() == {}
        assert escopo(_ticket(departamento_id="dep-rh"))

    def test_chefe_ve_o_proprio_departamento(self, chefe):
        assert escopo_para(chefe).como_filtro() == {"departamento_id": "dep-ti"}
        assert pode_acessar(chefe, _ticket(departamento_id="dep-ti"))
        assert not pode_acessar(chefe, _ticket(departamento_id="dep-rh"))

    def test_agente_ve_apenas_atribuidos(self, agente):
        assert escopo_para(agente).como_filtro() == {"responsavel_id": "agente-1"}
        assert pode_acessar(agente, _ticket(responsavel_id="agente-1"))
        # mesmo departamento, outro responsável
        assert not pode_acessar(agente, _ticket(responsavel_id="agente-2"))
        assert not pode_acessar(agente, _ticket())

    def test_cliente_ve_apenas_os_proprios(self, cliente):
        assert escopo_para(cliente).como_filtro() == {"criador_id": "cliente-1"}
        assert pode_acessar(cliente, _ticket(criador_id="cliente-1"))
        assert not pode_acessar(cliente, _ticket(criador_id="cliente-2"))

    def test_ator_inativo_tem_escopo_vazio(self, chefe):
        chefe.desativar()
        escopo = escopo_para(chefe)
        assert escopo.vazio
        assert not escopo(_ticket())

    def test_recurso_desconhecido_erro(self, admin):
        with pytest.raises(ValidationError):
            escopo_para(admin, "Projeto")

    def test_pode_acessar_consistente_com_escopo(self, admin, chefe, agente, outro_agente, cliente, outro_cliente):
        tickets = [
            _ticket(criador_id=c, departamento_id=d, responsavel_id=r)
            for c in ("cliente-1", "cliente-2")
            for d in ("dep-ti", "dep-rh")
            for r in (None, "agente-1", "agente-2")
        ]
        for ator in (admin, chefe, agente, outro_agente, cliente, outro_cliente):
            escopo = escopo_para(ator)
            for ticket in tickets:
                assert pode_acessar(ator, ticket) == escopo(ticket)
                filtro = escopo.como_filtro()
                assert all(getattr(ticket, k) == v for k, v in filtro.items()) == escopo(ticket)

    def test_garantir_acesso_nega(self, cliente):
        with pytest.raises(PermissionDeniedError):
            garantir_acesso(cliente, _ticket(criador_id="cliente-2"))


class TestRedacaoComentarios:

    def test_cliente_nao_recebe_internos(self, cliente, agente):
        comentarios = [
            CommentEntity.criar("t-1", "agente-1", "Aguardando peça do fornecedor"),
            CommentEntity.criar("t-1", "agente-1", "Cliente já abriu 3 chamados iguais", interno=True),
        ]
        assert [c.interno for c in comentarios_visiveis(cliente, comentarios)] == [False]
        assert len(comentarios_visiveis(agente, comentarios)) == 2
