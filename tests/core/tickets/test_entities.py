"""
Testes Unitários para Entidades do Domínio de Tickets.

Testa todas as regras de negócio encapsuladas nas entidades,
incluindo validações, máquina de estados e histórico pendente.

Coverage:
- TicketEntity.criar(): Validações de criação
- TicketEntity.transicionar(): Transições genéricas
- TicketEntity.reabrir(): Reabertura de ticket fechado
- TicketEntity.atribuir_a(): Atribuição (ABERTO → EM_PROGRESSO)
- TicketEntity.editar(): Campos descritivos
- WorkLogEntry.criar(): Limites de horas e janela de datas
- CommentEntity: Conteúdo e janela de edição
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from src.core.access.actors import ActorEntity
from src.core.access.roles import Role
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    InvalidTransitionError,
    ValidationError,
)
from src.core.tickets.entities import (
    CommentEntity,
    TicketEntity,
    TicketPriority,
    TicketStatus,
    WorkLogEntry,
)


def _novo_ticket(**kwargs) -> TicketEntity:
    dados = dict(
        numero="2025-07-000001",
        assunto="Impressora parada",
        descricao="A impressora do 3º andar não liga desde ontem",
        criador_id="cliente-1",
        departamento_id="dep-ti",
        categoria_id="cat-hardware",
    )
    dados.update(kwargs)
    return TicketEntity.criar(**dados)


def _em_status(status: TicketStatus) -> TicketEntity:
    ticket = TicketEntity.reconstituir(
        status,
        numero="2025-07-000002",
        assunto="Ticket reconstituído",
        descricao="Ticket carregado do repositório",
        criador_id="cliente-1",
        departamento_id="dep-ti",
        categoria_id="cat-hardware",
    )
    return ticket


@pytest.fixture
def agente():
    return ActorEntity.criar("Alice Agente", "alice@helpdesk.local", Role.AGENTE, "dep-ti", id="agente-1")


class TestTicketEntityCriacao:
    """Testes para criação de tickets."""

    def test_criar_ticket_valido(self):
        """Deve nascer ABERTO com uma entrada de histórico de criação."""
        ticket = _novo_ticket(prioridade=TicketPriority.ALTA, tags=["Rede", "rede", " vpn "])

        assert len(ticket.id) == 36
        assert ticket.status == TicketStatus.ABERTO
        assert ticket.prioridade == TicketPriority.ALTA
        assert ticket.tags == ["rede", "vpn"]
        assert ticket.responsavel_id is None
        assert ticket.resolvido_em is None
        assert ticket.fechado_em is None

        historico = ticket.historico_pendente
        assert len(historico) == 1
        assert historico[0].status_anterior is None
        assert historico[0].status_novo == TicketStatus.ABERTO
        assert historico[0].nota == "Ticket criado"
        assert historico[0].autor_id == "cliente-1"

    def test_criar_ticket_remove_espacos_extras(self):
        ticket = _novo_ticket(assunto="   Impressora parada   ")
        assert ticket.assunto == "Impressora parada"

    @pytest.mark.parametrize("assunto", ["", "   ", "Oi"])
    def test_criar_ticket_assunto_invalido_erro(self, assunto):
        """Deve rejeitar assunto vazio ou curto."""
        with pytest.raises(ValidationError) as exc_info:
            _novo_ticket(assunto=assunto)
        assert exc_info.value.field == "assunto"

    def test_criar_ticket_descricao_curta_erro(self):
        with pytest.raises(ValidationError) as exc_info:
            _novo_ticket(descricao="curta")
        assert exc_info.value.field == "descricao"

    @pytest.mark.parametrize("campo", ["criador_id", "departamento_id", "categoria_id"])
    def test_criar_ticket_sem_relacionamento_obrigatorio_erro(self, campo):
        with pytest.raises(ValidationError) as exc_info:
            _novo_ticket(**{campo: ""})
        assert exc_info.value.field == campo

    def test_criar_ticket_horas_estimadas_fora_do_limite_erro(self):
        with pytest.raises(ValidationError):
            _novo_ticket(horas_estimadas=0)

    def test_criar_ticket_com_muitas_tags_erro(self):
        with pytest.raises(ValidationError):
            _novo_ticket(tags=[f"tag{i}" for i in range(11)])

    def test_reconstituir_nao_gera_historico(self):
        ticket = _em_status(TicketStatus.EM_ESPERA)
        assert ticket.status == TicketStatus.EM_ESPERA
        assert ticket.historico_pendente == []


class TestTicketStatusParsing:

    def test_aceita_nomes_internacionais(self):
        assert TicketStatus.from_string("in_progress") == TicketStatus.EM_PROGRESSO
        assert TicketStatus.from_string("CLOSED") == TicketStatus.FECHADO

    def test_status_desconhecido_erro(self):
        with pytest.raises(ValidationError) as exc_info:
            TicketStatus.from_string("ARQUIVADO")
        assert exc_info.value.field == "status"

    def test_prioridade_desconhecida_erro(self):
        with pytest.raises(ValidationError):
            TicketPriority.from_string("CRITICA")


class TestTicketEntityTransicoes:
    """Testes da máquina de estados."""

    def test_resolver_define_resolvido_em(self):
        ticket = _novo_ticket()
        ticket.coletar_historico()

        entrada = ticket.transicionar(TicketStatus.RESOLVIDO, autor_id="agente-1")

        assert ticket.status == TicketStatus.RESOLVIDO
        assert ticket.resolvido_em is not None
        assert ticket.fechado_em is None
        assert entrada.status_anterior == TicketStatus.ABERTO
        assert entrada.status_novo == TicketStatus.RESOLVIDO
        assert entrada.nota == "Status alterado para RESOLVIDO"

    def test_fechar_define_fechado_em(self):
        ticket = _em_status(TicketStatus.RESOLVIDO)
        ticket.transicionar(TicketStatus.FECHADO, autor_id="admin-1", nota="Confirmado pelo cliente")

        assert ticket.status == TicketStatus.FECHADO
        assert ticket.fechado_em is not None
        assert ticket.historico_pendente[-1].nota == "Confirmado pelo cliente"

    @pytest.mark.parametrize("destino", [
        TicketStatus.EM_PROGRESSO,
        TicketStatus.EM_ESPERA,
        TicketStatus.RESOLVIDO,
        TicketStatus.CANCELADO,
        TicketStatus.FECHADO,
    ])
    def test_status_ativo_alcanca_qualquer_destino(self, destino):
        ticket = _em_status(TicketStatus.EM_ESPERA)
        ticket.transicionar(destino)
        assert ticket.status == destino

    def test_mesmo_status_registra_historico_sem_alterar_timestamps(self):
        ticket = _em_status(TicketStatus.RESOLVIDO)
        ticket.resolvido_em = datetime(2025, 7, 1, tzinfo=timezone.utc)

        entrada = ticket.transicionar(TicketStatus.RESOLVIDO, autor_id="agente-1")

        assert entrada.status_anterior == TicketStatus.RESOLVIDO
        assert entrada.status_novo == TicketStatus.RESOLVIDO
        assert ticket.resolvido_em == datetime(2025, 7, 1, tzinfo=timezone.utc)
        assert len(ticket.historico_pendente) == 1

    @pytest.mark.parametrize("destino", [TicketStatus.ABERTO, TicketStatus.EM_PROGRESSO, TicketStatus.CANCELADO])
    def test_fechado_so_sai_por_reabertura(self, destino):
        ticket = _em_status(TicketStatus.FECHADO)
        with pytest.raises(InvalidTransitionError):
            ticket.transicionar(destino)
        assert ticket.status == TicketStatus.FECHADO
        assert ticket.historico_pendente == []

    def test_cancelado_e_terminal(self):
        ticket = _em_status(TicketStatus.CANCELADO)
        with pytest.raises(InvalidTransitionError):
            ticket.transicionar(TicketStatus.ABERTO)

    def test_status_invalido_erro(self):
        ticket = _novo_ticket()
        with pytest.raises(ValidationError):
            ticket.transicionar("FECHADO")

    def test_historico_forma_cadeia_conectada(self):
        ticket = _novo_ticket()
        for destino in (TicketStatus.EM_PROGRESSO, TicketStatus.EM_ESPERA, TicketStatus.RESOLVIDO, TicketStatus.FECHADO):
            ticket.transicionar(destino)
        ticket.reabrir()

        historico = ticket.coletar_historico()
        assert historico[0].status_anterior is None
        for anterior, atual in zip(historico, historico[1:]):
            assert atual.status_anterior == anterior.status_novo
        assert ticket.historico_pendente == []


class TestTicketEntityReabertura:

    def test_reabrir_ticket_fechado_limpa_datas(self):
        ticket = _em_status(TicketStatus.RESOLVIDO)
        ticket.resolvido_em = datetime(2025, 7, 1, tzinfo=timezone.utc)
        ticket.transicionar(TicketStatus.FECHADO)
        ticket.coletar_historico()

        entrada = ticket.reabrir(autor_id="chefe-1", autor_nome="Carlos Chefe")

        assert ticket.status == TicketStatus.ABERTO
        assert ticket.resolvido_em is None
        assert ticket.fechado_em is None
        assert entrada.status_anterior == TicketStatus.FECHADO
        assert entrada.status_novo == TicketStatus.ABERTO
        assert entrada.nota == "Ticket reaberto por Carlos Chefe"

    def test_reabrir_mantem_responsavel(self, agente):
        ticket = _em_status(TicketStatus.FECHADO)
        ticket.responsavel_id = agente.id
        ticket.reabrir()
        assert ticket.responsavel_id == agente.id

    @pytest.mark.parametrize("status", [TicketStatus.ABERTO, TicketStatus.RESOLVIDO, TicketStatus.CANCELADO])
    def test_reabrir_ticket_nao_fechado_erro(self, status):
        ticket = _em_status(status)
        with pytest.raises(InvalidTransitionError):
            ticket.reabrir()


class TestTicketEntityAtribuicao:

    def test_atribuir_ticket_aberto_passa_a_em_progresso(self, agente):
        ticket = _novo_ticket()
        ticket.coletar_historico()

        entrada = ticket.atribuir_a(agente, autor_id="chefe-1")

        assert ticket.responsavel_id == agente.id
        assert ticket.status == TicketStatus.EM_PROGRESSO
        assert entrada.status_anterior == TicketStatus.ABERTO
        assert entrada.status_novo == TicketStatus.EM_PROGRESSO
        assert entrada.nota == "Ticket atribuído a Alice Agente"
        assert len(ticket.historico_pendente) == 1

    @pytest.mark.parametrize("status", [TicketStatus.EM_PROGRESSO, TicketStatus.EM_ESPERA, TicketStatus.RESOLVIDO])
    def test_atribuir_fora_de_aberto_nao_gera_historico(self, agente, status):
        ticket = _em_status(status)

        assert ticket.atribuir_a(agente) is None
        assert ticket.status == status
        assert ticket.responsavel_id == agente.id
        assert ticket.historico_pendente == []

    @pytest.mark.parametrize("status", [TicketStatus.FECHADO, TicketStatus.CANCELADO])
    def test_atribuir_ticket_encerrado_erro(self, agente, status):
        ticket = _em_status(status)
        with pytest.raises(InvalidTransitionError):
            ticket.atribuir_a(agente)
        assert ticket.responsavel_id is None

    def test_atribuir_a_cliente_erro(self):
        cliente = ActorEntity.criar("Clara", "clara@cliente.com", Role.CLIENTE)
        with pytest.raises(ValidationError) as exc_info:
            _novo_ticket().atribuir_a(cliente)
        assert exc_info.value.field == "responsavel_id"

    def test_atribuir_a_agente_inativo_erro(self, agente):
        agente.desativar()
        with pytest.raises(ValidationError):
            _novo_ticket().atribuir_a(agente)


class TestTicketEntityEdicao:

    def test_editar_campos(self):
        ticket = _novo_ticket()
        ticket.editar(assunto="Impressora sem toner", prioridade=TicketPriority.URGENTE, tags=["toner"])

        assert ticket.assunto == "Impressora sem toner"
        assert ticket.prioridade == TicketPriority.URGENTE
        assert ticket.tags == ["toner"]
        assert ticket.status == TicketStatus.ABERTO

    def test_editar_ticket_encerrado_erro(self):
        with pytest.raises(BusinessRuleViolationError):
            _em_status(TicketStatus.FECHADO).editar(assunto="Novo assunto")


class TestWorkLogEntry:

    MOMENTO = datetime(2025, 7, 15, 12, 0, tzinfo=timezone.utc)

    def _criar(self, **kwargs):
        dados = dict(
            ticket_id="t-1",
            agente_id="agente-1",
            horas=2.5,
            descricao="Troca do fusor da impressora",
            data_trabalho=date(2025, 7, 15),
            momento=self.MOMENTO,
        )
        dados.update(kwargs)
        return WorkLogEntry.criar(**dados)

    def test_registro_valido(self):
        registro = self._criar()
        assert registro.horas == 2.5
        assert registro.data_trabalho == date(2025, 7, 15)

    @pytest.mark.parametrize("horas", [0, -1, 24.01, "abc"])
    def test_horas_invalidas(self, horas):
        with pytest.raises(ValidationError) as exc_info:
            self._criar(horas=horas)
        assert exc_info.value.field == "horas"

    def test_limite_de_24_horas_inclusivo(self):
        assert self._criar(horas=24).horas == 24.0

    def test_data_futura_erro(self):
        with pytest.raises(ValidationError) as exc_info:
            self._criar(data_trabalho=date(2025, 7, 16))
        assert exc_info.value.field == "data_trabalho"

    def test_janela_de_30_dias(self):
        assert self._criar(data_trabalho=date(2025, 6, 15)).data_trabalho == date(2025, 6, 15)
        with pytest.raises(ValidationError):
            self._criar(data_trabalho=date(2025, 6, 14))

    def test_limites_configuraveis(self):
        with pytest.raises(ValidationError):
            self._criar(horas=9, horas_maximas=8)
        with pytest.raises(ValidationError):
            self._criar(data_trabalho=date(2025, 7, 1), janela_dias=7)

    def test_descricao_curta_erro(self):
        with pytest.raises(ValidationError):
            self._criar(descricao="fix")


class TestCommentEntity:

    def test_conteudo_obrigatorio(self):
        with pytest.raises(ValidationError):
            CommentEntity.criar("t-1", "agente-1", "   ")

    def test_janela_de_edicao(self):
        comentario = CommentEntity.criar("t-1", "agente-1", "Verificando o cabo de rede")
        assert comentario.dentro_da_janela_de_edicao()
        assert not comentario.dentro_da_janela_de_edicao(momento=comentario.criado_em + timedelta(hours=25))
