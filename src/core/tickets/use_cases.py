"""
Use Cases (Application Services) do Domínio de Tickets.

Este módulo contém os casos de uso da aplicação, que orquestram
a lógica de negócio coordenando entidades, repositórios e eventos.

Use Cases implementados:
- CriarTicketService: Cria ticket (número com retry em colisão)
- ListarTicketsService: Lista tickets do escopo com filtros
- ObterTicketService: Obtém ticket específico
- ObterHistoricoService: Histórico de status
- TransicionarTicketService: Transição genérica de status
- ReabrirTicketService: Reabre ticket fechado
- AtribuirTicketService: Atribui ticket a agente
- RegistrarTrabalhoService: Registra horas no ledger
- EditarTicketService / ExcluirTicketService
- AtribuirEmLoteService / TransicionarEmLoteService
- EstatisticasTicketsService / ExportarTicketsCsvService
- Comentários: adicionar, listar, editar, excluir

Ordem das verificações em toda mutação:
    capacidade do papel → escopo sobre o ticket → máquina de estados
    → update condicional + histórico (UoW) → eventos após commit

Princípios:
- Um Use Case = Uma operação de negócio
- Dependências injetadas (DI)
- Sem lógica de infraestrutura
"""

import csv
import dataclasses
import io
import logging
from typing import Iterable, List, Optional, Union

from src.core.access.ports import ActorRepository
from src.core.access.roles import Capability, exigir_capacidade, tem_capacidade
from src.core.access.scope import (
    comentarios_visiveis,
    escopo_para,
    garantir_acesso,
    pode_acessar,
)
from src.core.shared.clock import agora
from src.core.shared.exceptions import (
    ConcurrencyError,
    DomainException,
    DuplicateTicketNumberError,
    EntityNotFoundError,
    InvalidTransitionError,
    PermissionDeniedError,
    ValidationError,
)
from src.core.shared.interfaces import UnitOfWork

from .dtos import (
    CriarTicketInputDTO,
    EditarTicketInputDTO,
    ListarTicketsQueryDTO,
    PaginatedResultDTO,
    RegistrarTrabalhoInputDTO,
    ResultadoLoteDTO,
    TicketListItemDTO,
    TicketOutputDTO,
)
from .entities import (
    CommentEntity,
    HistoryEntry,
    TicketEntity,
    TicketPriority,
    TicketStatus,
    WorkLogEntry,
)
from .events import (
    ComentarioAdicionadoEvent,
    StatusAlteradoEvent,
    TicketAtribuidoEvent,
    TicketCriadoEvent,
    TrabalhoRegistradoEvent,
)
from .numbering import prefixo_do_mes, proximo_numero
from .ports import (
    CategoryRepository,
    CommentRepository,
    DepartmentRepository,
    TicketRepository,
    WorkLogRepository,
)

logger = logging.getLogger(__name__)


def _carregar_ticket(ticket_repo: TicketRepository, ticket_id: str) -> TicketEntity:
    ticket = ticket_repo.get_by_id(ticket_id)
    if not ticket:
        raise EntityNotFoundError(
            f"Ticket {ticket_id} não encontrado",
            entity_type="Ticket",
            entity_id=ticket_id,
        )
    return ticket


def _carregar_acessivel(ticket_repo: TicketRepository, ator, ticket_id: str) -> TicketEntity:
    """Busca o ticket e exige que esteja no escopo do ator."""
    ticket = _carregar_ticket(ticket_repo, ticket_id)
    garantir_acesso(ator, ticket)
    return ticket


def _gravar_condicional(
    ticket_repo: TicketRepository,
    ticket: TicketEntity,
    status_esperado: TicketStatus,
) -> None:
    """
    Raises:
        ConcurrencyError: Se o status persistido mudou desde a leitura
    """
    if not ticket_repo.update_if_status(ticket, status_esperado):
        raise _conflito(ticket)


def _gravar_atribuicao(
    ticket_repo: TicketRepository,
    ticket: TicketEntity,
    status_esperado: TicketStatus,
    responsavel_esperado: Optional[str],
) -> None:
    """Como _gravar_condicional, exigindo também o responsável lido."""
    if not ticket_repo.assign_if_status(ticket, status_esperado, responsavel_esperado):
        raise _conflito(ticket)


def _conflito(ticket: TicketEntity) -> ConcurrencyError:
    return ConcurrencyError(
        f"Ticket {ticket.numero} foi alterado por outra operação; "
        f"recarregue e tente novamente"
    )


def _como_status(valor: Union[str, TicketStatus]) -> TicketStatus:
    if isinstance(valor, TicketStatus):
        return valor
    return TicketStatus.from_string(valor)


# =============================================================================
# Criação e consulta
# =============================================================================

class CriarTicketService:
    """
    Use Case: Criar um novo ticket.

    Fluxo:
    1. Validar capacidade, departamento e categoria
    2. Criar entidade Ticket (ABERTO + histórico de criação)
    3. Gerar número YYYY-MM-NNNNNN e inserir
    4. Em colisão de número: nova transação com novo número
    5. Disparar evento TicketCriado

    Attributes:
        ticket_repo: Repositório de tickets
        department_repo: Repositório de departamentos
        category_repo: Repositório de categorias
        uow: Unit of Work para transações
        max_tentativas: Tentativas de numeração (1 + retries)

    Example:
        service = CriarTicketService(ticket_repo, dept_repo, cat_repo, uow)
        output = service.execute(cliente, CriarTicketInputDTO(
            assunto="Impressora parada",
            descricao="A impressora do 3º andar não liga",
            departamento_id="ti",
            categoria_id="hardware",
        ))
        print(output.numero)  # 2025-07-000001
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        department_repo: DepartmentRepository,
        category_repo: CategoryRepository,
        uow: UnitOfWork,
        max_tentativas: int = 2,
    ):
        self.ticket_repo = ticket_repo
        self.department_repo = department_repo
        self.category_repo = category_repo
        self.uow = uow
        self.max_tentativas = max(1, max_tentativas)

    def execute(self, ator, input_dto: CriarTicketInputDTO) -> TicketOutputDTO:
        """
        Executa criação de ticket em transação atômica.

        Raises:
            PermissionDeniedError: Se ator não pode criar tickets
            EntityNotFoundError: Se departamento/categoria não existem
            ValidationError: Se dados inválidos
            DuplicateTicketNumberError: Se todas as tentativas colidiram
        """
        exigir_capacidade(ator, Capability.TICKETS_CRIAR)

        prioridade = TicketPriority.from_string(input_dto.prioridade)
        self._validar_organizacao(input_dto.departamento_id, input_dto.categoria_id)

        momento = agora()
        ticket = TicketEntity.criar(
            numero="",
            assunto=input_dto.assunto,
            descricao=input_dto.descricao,
            criador_id=ator.id,
            departamento_id=input_dto.departamento_id,
            categoria_id=input_dto.categoria_id,
            prioridade=prioridade,
            tags=list(input_dto.tags) if input_dto.tags else None,
            horas_estimadas=input_dto.horas_estimadas,
            data_vencimento=input_dto.data_vencimento,
            projeto_id=input_dto.projeto_id,
            momento=momento,
        )

        for tentativa in range(1, self.max_tentativas + 1):
            try:
                with self.uow:
                    ultimo = self.ticket_repo.last_number_with_prefix(prefixo_do_mes(momento))
                    ticket.renumerar(proximo_numero(momento, ultimo))
                    self.ticket_repo.add(ticket)
                    self.uow.publish_event(
                        TicketCriadoEvent(
                            aggregate_id=ticket.id,
                            ator_id=ator.id,
                            numero=ticket.numero,
                            assunto=ticket.assunto,
                            criador_id=ticket.criador_id,
                            departamento_id=ticket.departamento_id,
                            prioridade=ticket.prioridade.value,
                        )
                    )
                break
            except DuplicateTicketNumberError as e:
                logger.warning(
                    f"Colisão de número {e.numero} (tentativa {tentativa}/{self.max_tentativas})"
                )
                if tentativa == self.max_tentativas:
                    raise

        logger.info(f"Ticket {ticket.numero} criado por {ator.id}")
        return TicketOutputDTO.from_entity(ticket)

    def _validar_organizacao(self, departamento_id: str, categoria_id: str) -> None:
        departamento = self.department_repo.get_by_id(departamento_id)
        if not departamento:
            raise EntityNotFoundError(
                f"Departamento {departamento_id} não encontrado",
                entity_type="Departamento",
                entity_id=departamento_id,
            )
        if not departamento.ativo:
            raise ValidationError("Departamento inativo", field="departamento_id")

        categoria = self.category_repo.get_by_id(categoria_id)
        if not categoria:
            raise EntityNotFoundError(
                f"Categoria {categoria_id} não encontrada",
                entity_type="Categoria",
                entity_id=categoria_id,
            )
        if categoria.departamento_id != departamento.id:
            raise ValidationError(
                "Categoria não pertence ao departamento",
                field="categoria_id",
            )


class ListarTicketsService:
    """
    Use Case: Listar tickets do escopo do ator.

    Não usa UoW pois é operação de leitura (não precisa de transação).
    O escopo sempre se soma aos filtros: um AGENTE filtrando por outro
    responsável simplesmente recebe uma lista vazia.
    """

    def __init__(self, ticket_repo: TicketRepository):
        self.ticket_repo = ticket_repo

    def execute(self, ator, query: Optional[ListarTicketsQueryDTO] = None) -> PaginatedResultDTO:
        query = self._normalizar(query or ListarTicketsQueryDTO())
        escopo = escopo_para(ator)

        if escopo.vazio:
            return PaginatedResultDTO(items=[], total=0, pagina=query.pagina, por_pagina=query.por_pagina)

        tickets, total = self.ticket_repo.list_paginated(escopo.como_filtro(), query)
        return PaginatedResultDTO(
            items=[TicketListItemDTO.from_entity(t) for t in tickets],
            total=total,
            pagina=query.pagina,
            por_pagina=query.por_pagina,
        )

    @staticmethod
    def _normalizar(query: ListarTicketsQueryDTO) -> ListarTicketsQueryDTO:
        """
        Converte status/prioridade para os valores canônicos.

        Raises:
            ValidationError: Se status, prioridade ou paginação inválidos
        """
        if query.pagina < 1:
            raise ValidationError("Página deve ser maior ou igual a 1", field="pagina")
        if not (1 <= query.por_pagina <= ListarTicketsQueryDTO.POR_PAGINA_MAX):
            raise ValidationError(
                f"Itens por página deve estar entre 1 e {ListarTicketsQueryDTO.POR_PAGINA_MAX}",
                field="por_pagina",
            )
        return dataclasses.replace(
            query,
            status=TicketStatus.from_string(query.status).value if query.status else None,
            prioridade=TicketPriority.from_string(query.prioridade).value if query.prioridade else None,
            busca=(query.busca or "").strip() or None,
        )


class ObterTicketService:
    """Use Case: Obter detalhes de um ticket específico."""

    def __init__(self, ticket_repo: TicketRepository):
        self.ticket_repo = ticket_repo

    def execute(self, ator, ticket_id: str) -> TicketOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se ticket não existe
            PermissionDeniedError: Se ticket fora do escopo do ator
        """
        return TicketOutputDTO.from_entity(_carregar_acessivel(self.ticket_repo, ator, ticket_id))


class ObterHistoricoService:
    """Use Case: Histórico de status (ordem cronológica)."""

    def __init__(self, ticket_repo: TicketRepository):
        self.ticket_repo = ticket_repo

    def execute(self, ator, ticket_id: str) -> List[HistoryEntry]:
        _carregar_acessivel(self.ticket_repo, ator, ticket_id)
        return self.ticket_repo.list_history(ticket_id)


# =============================================================================
# Máquina de estados
# =============================================================================

class TransicionarTicketService:
    """
    Use Case: Transição genérica de status.

    Qualquer ator com escopo sobre o ticket pode transicionar; o único
    gate por papel é a reabertura (ver ReabrirTicketService).

    Fluxo:
    1. Validar status de destino (um dos seis)
    2. Buscar ticket e checar escopo
    3. Aplicar transição na entidade (gera HistoryEntry)
    4. Update condicional WHERE status = anterior, com histórico
    5. Disparar StatusAlterado
    """

    def __init__(self, ticket_repo: TicketRepository, uow: UnitOfWork):
        self.ticket_repo = ticket_repo
        self.uow = uow

    def execute(
        self,
        ator,
        ticket_id: str,
        novo_status: Union[str, TicketStatus],
        nota: Optional[str] = None,
    ) -> TicketOutputDTO:
        """
        Raises:
            ValidationError: Se status fora dos seis valores
            EntityNotFoundError: Se ticket não existe
            PermissionDeniedError: Se fora do escopo
            InvalidTransitionError: Se destino inalcançável
            ConcurrencyError: Se outra operação mudou o status antes
        """
        novo_status = _como_status(novo_status)
        exigir_capacidade(ator, Capability.TICKETS_ALTERAR_STATUS)

        with self.uow:
            ticket = _carregar_acessivel(self.ticket_repo, ator, ticket_id)
            anterior = ticket.status

            entrada = ticket.transicionar(novo_status, autor_id=ator.id, nota=nota)
            _gravar_condicional(self.ticket_repo, ticket, anterior)

            self.uow.publish_event(
                StatusAlteradoEvent(
                    aggregate_id=ticket.id,
                    ator_id=ator.id,
                    numero=ticket.numero,
                    assunto=ticket.assunto,
                    status_anterior=anterior.value,
                    status_novo=novo_status.value,
                    nota=entrada.nota,
                    criador_id=ticket.criador_id,
                )
            )

        logger.info(f"Ticket {ticket.numero}: {anterior.value} → {novo_status.value} por {ator.id}")
        return TicketOutputDTO.from_entity(ticket)


class ReabrirTicketService:
    """
    Use Case: Reabrir um ticket fechado (FECHADO → ABERTO).

    Reservado a ADMIN e CHEFE_DEPARTAMENTO (capacidade tickets.reopen).
    Papel sem privilégio recebe InvalidTransitionError, não Forbidden:
    para ele a transição simplesmente não existe.
    """

    def __init__(self, ticket_repo: TicketRepository, uow: UnitOfWork):
        self.ticket_repo = ticket_repo
        self.uow = uow

    def execute(self, ator, ticket_id: str) -> TicketOutputDTO:
        with self.uow:
            ticket = _carregar_acessivel(self.ticket_repo, ator, ticket_id)

            if not tem_capacidade(ator, Capability.TICKETS_REABRIR):
                raise InvalidTransitionError(
                    "Apenas administradores e chefes de departamento podem reabrir tickets",
                    rule="reabertura_restrita",
                )

            anterior = ticket.status
            entrada = ticket.reabrir(autor_id=ator.id, autor_nome=ator.nome)
            _gravar_condicional(self.ticket_repo, ticket, anterior)

            self.uow.publish_event(
                StatusAlteradoEvent(
                    aggregate_id=ticket.id,
                    ator_id=ator.id,
                    numero=ticket.numero,
                    assunto=ticket.assunto,
                    status_anterior=anterior.value,
                    status_novo=ticket.status.value,
                    nota=entrada.nota,
                    criador_id=ticket.criador_id,
                    reaberto=True,
                )
            )

        logger.info(f"Ticket {ticket.numero} reaberto por {ator.id}")
        return TicketOutputDTO.from_entity(ticket)


class AtribuirTicketService:
    """
    Use Case: Atribuir ticket a um agente.

    Fluxo:
    1. Exigir capacidade tickets.assign (antes de olhar o ticket)
    2. Buscar ticket (escopo) e responsável (ativo, AGENTE/CHEFE)
    3. Atribuir na entidade (ABERTO → EM_PROGRESSO com histórico)
    4. Update condicional por status e responsável lidos
    5. Disparar TicketAtribuido
    """

    def __init__(self, ticket_repo: TicketRepository, actor_repo: ActorRepository, uow: UnitOfWork):
        self.ticket_repo = ticket_repo
        self.actor_repo = actor_repo
        self.uow = uow

    def execute(self, ator, ticket_id: str, responsavel_id: str) -> TicketOutputDTO:
        """
        Raises:
            PermissionDeniedError: Sem capacidade ou fora do escopo
            EntityNotFoundError: Ticket ou responsável inexistente
            ValidationError: Responsável inativo ou papel inadequado
            InvalidTransitionError: Ticket encerrado
            ConcurrencyError: Status mudou desde a leitura
        """
        exigir_capacidade(ator, Capability.TICKETS_ATRIBUIR)

        with self.uow:
            ticket = _carregar_acessivel(self.ticket_repo, ator, ticket_id)
            responsavel = self.actor_repo.get_by_id(responsavel_id)
            if not responsavel:
                raise EntityNotFoundError(
                    f"Agente {responsavel_id} não encontrado",
                    entity_type="Ator",
                    entity_id=responsavel_id,
                )

            status_anterior = ticket.status
            responsavel_anterior = ticket.responsavel_id

            ticket.atribuir_a(responsavel, autor_id=ator.id)
            _gravar_atribuicao(self.ticket_repo, ticket, status_anterior, responsavel_anterior)

            self.uow.publish_event(
                TicketAtribuidoEvent(
                    aggregate_id=ticket.id,
                    ator_id=ator.id,
                    numero=ticket.numero,
                    assunto=ticket.assunto,
                    responsavel_id=responsavel.id,
                    responsavel_anterior_id=responsavel_anterior,
                    criador_id=ticket.criador_id,
                )
            )

        logger.info(f"Ticket {ticket.numero} atribuído a {responsavel.id} por {ator.id}")
        return TicketOutputDTO.from_entity(ticket)


# =============================================================================
# Ledger de trabalho
# =============================================================================

class RegistrarTrabalhoService:
    """
    Use Case: Registrar horas trabalhadas.

    O responsável registra nos próprios tickets; chefes e admins podem
    registrar em qualquer ticket do seu escopo. O incremento de
    horas_reais é atômico no repositório.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        work_log_repo: WorkLogRepository,
        uow: UnitOfWork,
        horas_maximas: float = WorkLogEntry.HORAS_MAXIMAS,
        janela_dias: int = WorkLogEntry.JANELA_DIAS,
    ):
        self.ticket_repo = ticket_repo
        self.work_log_repo = work_log_repo
        self.uow = uow
        self.horas_maximas = horas_maximas
        self.janela_dias = janela_dias

    def execute(self, ator, input_dto: RegistrarTrabalhoInputDTO) -> WorkLogEntry:
        """
        Raises:
            PermissionDeniedError: Sem capacidade, fora do escopo ou não responsável
            EntityNotFoundError: Ticket inexistente
            ValidationError: Horas, descrição ou data inválidas
        """
        exigir_capacidade(ator, Capability.TRABALHO_REGISTRAR)

        with self.uow:
            ticket = _carregar_acessivel(self.ticket_repo, ator, input_dto.ticket_id)

            if ticket.responsavel_id != ator.id and not tem_capacidade(
                ator, Capability.TRABALHO_REGISTRAR_QUALQUER
            ):
                raise PermissionDeniedError(
                    "Apenas o responsável pode registrar horas neste ticket",
                    capability=Capability.TRABALHO_REGISTRAR_QUALQUER.value,
                )

            registro = WorkLogEntry.criar(
                ticket_id=ticket.id,
                agente_id=ator.id,
                horas=input_dto.horas,
                descricao=input_dto.descricao,
                data_trabalho=input_dto.data_trabalho,
                horas_maximas=self.horas_maximas,
                janela_dias=self.janela_dias,
            )
            self.work_log_repo.add(registro)

            self.uow.publish_event(
                TrabalhoRegistradoEvent(
                    aggregate_id=ticket.id,
                    ator_id=ator.id,
                    numero=ticket.numero,
                    registro_id=registro.id,
                    agente_id=ator.id,
                    horas=registro.horas,
                    data_trabalho=registro.data_trabalho.isoformat(),
                )
            )

        logger.info(f"{registro.horas:g}h registradas no ticket {ticket.numero} por {ator.id}")
        return registro


class ListarTrabalhoService:
    """Use Case: Registros de horas de um ticket."""

    def __init__(self, ticket_repo: TicketRepository, work_log_repo: WorkLogRepository):
        self.ticket_repo = ticket_repo
        self.work_log_repo = work_log_repo

    def execute(self, ator, ticket_id: str) -> List[WorkLogEntry]:
        _carregar_acessivel(self.ticket_repo, ator, ticket_id)
        return self.work_log_repo.list_by_ticket(ticket_id)


# =============================================================================
# Edição, exclusão e operações em lote
# =============================================================================

class EditarTicketService:
    """
    Use Case: Editar campos descritivos (nunca o status).

    O update é condicional ao status lido, então uma edição nunca
    sobrescreve uma transição concorrente.
    """

    def __init__(self, ticket_repo: TicketRepository, uow: UnitOfWork):
        self.ticket_repo = ticket_repo
        self.uow = uow

    def execute(self, ator, ticket_id: str, input_dto: EditarTicketInputDTO) -> TicketOutputDTO:
        exigir_capacidade(ator, Capability.TICKETS_EDITAR_DEPARTAMENTO)
        prioridade = TicketPriority.from_string(input_dto.prioridade) if input_dto.prioridade else None

        with self.uow:
            ticket = _carregar_acessivel(self.ticket_repo, ator, ticket_id)
            status_atual = ticket.status
            ticket.editar(
                assunto=input_dto.assunto,
                descricao=input_dto.descricao,
                prioridade=prioridade,
                tags=list(input_dto.tags) if input_dto.tags is not None else None,
                horas_estimadas=input_dto.horas_estimadas,
                data_vencimento=input_dto.data_vencimento,
            )
            _gravar_condicional(self.ticket_repo, ticket, status_atual)

        logger.info(f"Ticket {ticket.numero} editado por {ator.id}")
        return TicketOutputDTO.from_entity(ticket)


class ExcluirTicketService:
    """
    Use Case: Exclusão definitiva (somente ADMIN).

    Remove em cascata comentários, histórico, registros de horas e
    notificações. Irreversível.
    """

    def __init__(self, ticket_repo: TicketRepository, uow: UnitOfWork):
        self.ticket_repo = ticket_repo
        self.uow = uow

    def execute(self, ator, ticket_id: str) -> None:
        exigir_capacidade(ator, Capability.TICKETS_EXCLUIR)

        with self.uow:
            ticket = _carregar_ticket(self.ticket_repo, ticket_id)
            self.ticket_repo.delete(ticket.id)

        logger.warning(f"Ticket {ticket.numero} excluído por {ator.id}")


class AtribuirEmLoteService:
    """
    Use Case: Atribuir vários tickets ao mesmo agente.

    Só tickets ABERTO ou EM_PROGRESSO dentro do escopo são atribuídos;
    os demais são ignorados. Cada ticket é uma transação própria.
    """

    STATUS_ELEGIVEIS = (TicketStatus.ABERTO, TicketStatus.EM_PROGRESSO)

    def __init__(
        self,
        ticket_repo: TicketRepository,
        actor_repo: ActorRepository,
        atribuir_service: AtribuirTicketService,
    ):
        self.ticket_repo = ticket_repo
        self.actor_repo = actor_repo
        self.atribuir_service = atribuir_service

    def execute(self, ator, ticket_ids: Iterable[str], responsavel_id: str) -> ResultadoLoteDTO:
        exigir_capacidade(ator, Capability.TICKETS_ATRIBUIR)

        responsavel = self.actor_repo.get_by_id(responsavel_id)
        if not responsavel:
            raise EntityNotFoundError(
                f"Agente {responsavel_id} não encontrado",
                entity_type="Ator",
                entity_id=responsavel_id,
            )
        if not responsavel.pode_ser_responsavel:
            raise ValidationError(
                "Responsável deve ser agente ou chefe de departamento ativo",
                field="responsavel_id",
            )

        resultado = ResultadoLoteDTO()
        for ticket_id in ticket_ids:
            ticket = self.ticket_repo.get_by_id(ticket_id)
            if (
                ticket is None
                or not pode_acessar(ator, ticket)
                or ticket.status not in self.STATUS_ELEGIVEIS
            ):
                resultado.ignorados.append(ticket_id)
                continue
            try:
                self.atribuir_service.execute(ator, ticket_id, responsavel_id)
            except DomainException as e:
                resultado.falhas[ticket_id] = e.message
            else:
                resultado.atualizados.append(ticket_id)

        logger.info(
            f"Atribuição em lote por {ator.id}: {len(resultado.atualizados)} atualizados, "
            f"{len(resultado.ignorados)} ignorados"
        )
        return resultado


class TransicionarEmLoteService:
    """
    Use Case: Mesma transição em vários tickets.

    Falhas por ticket (escopo, transição inválida, conflito) são
    coletadas sem abortar os demais.
    """

    def __init__(self, transicionar_service: TransicionarTicketService):
        self.transicionar_service = transicionar_service

    def execute(
        self,
        ator,
        ticket_ids: Iterable[str],
        novo_status: Union[str, TicketStatus],
        nota: Optional[str] = None,
    ) -> ResultadoLoteDTO:
        novo_status = _como_status(novo_status)
        resultado = ResultadoLoteDTO()

        for ticket_id in ticket_ids:
            try:
                self.transicionar_service.execute(ator, ticket_id, novo_status, nota)
            except DomainException as e:
                resultado.falhas[ticket_id] = e.message
            else:
                resultado.atualizados.append(ticket_id)

        return resultado


# =============================================================================
# Relatórios
# =============================================================================

class EstatisticasTicketsService:
    """Use Case: Contagem por status e prioridade no escopo do ator."""

    def __init__(self, ticket_repo: TicketRepository):
        self.ticket_repo = ticket_repo

    def execute(self, ator) -> dict:
        exigir_capacidade(ator, Capability.TICKETS_ESTATISTICAS)
        filtro = escopo_para(ator).como_filtro()

        por_status = self.ticket_repo.count_by_field(filtro, "status")
        por_prioridade = self.ticket_repo.count_by_field(filtro, "prioridade")

        return {
            "total": sum(por_status.values()),
            "por_status": {s.value: por_status.get(s.value, 0) for s in TicketStatus},
            "por_prioridade": {p.value: por_prioridade.get(p.value, 0) for p in TicketPriority},
        }


class ExportarTicketsCsvService:
    """Use Case: Exporta a listagem filtrada (sem paginação) em CSV."""

    CABECALHO = [
        "numero",
        "assunto",
        "status",
        "prioridade",
        "departamento_id",
        "categoria_id",
        "criador_id",
        "responsavel_id",
        "horas_estimadas",
        "horas_reais",
        "criado_em",
        "resolvido_em",
        "fechado_em",
    ]

    def __init__(self, ticket_repo: TicketRepository):
        self.ticket_repo = ticket_repo

    def execute(self, ator, query: Optional[ListarTicketsQueryDTO] = None) -> str:
        exigir_capacidade(ator, Capability.TICKETS_EXPORTAR)
        query = ListarTicketsService._normalizar(query or ListarTicketsQueryDTO())
        tickets = self.ticket_repo.list_filtered(escopo_para(ator).como_filtro(), query)

        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(self.CABECALHO)
        for t in tickets:
            writer.writerow([
                t.numero,
                t.assunto,
                t.status.value,
                t.prioridade.value,
                t.departamento_id,
                t.categoria_id,
                t.criador_id,
                t.responsavel_id or "",
                "" if t.horas_estimadas is None else t.horas_estimadas,
                "" if t.horas_reais is None else t.horas_reais,
                t.criado_em.isoformat(),
                t.resolvido_em.isoformat() if t.resolvido_em else "",
                t.fechado_em.isoformat() if t.fechado_em else "",
            ])
        return buffer.getvalue()


# =============================================================================
# Comentários
# =============================================================================

class AdicionarComentarioService:
    """
    Use Case: Comentar em um ticket.

    Apenas quem tem tickets.comment_internal pode marcar o comentário
    como interno. Comentários internos não geram notificação.
    """

    def __init__(self, ticket_repo: TicketRepository, comment_repo: CommentRepository, uow: UnitOfWork):
        self.ticket_repo = ticket_repo
        self.comment_repo = comment_repo
        self.uow = uow

    def execute(self, ator, ticket_id: str, conteudo: str, interno: bool = False) -> CommentEntity:
        exigir_capacidade(ator, Capability.TICKETS_COMENTAR)
        if interno:
            exigir_capacidade(ator, Capability.TICKETS_COMENTAR_INTERNO)

        with self.uow:
            ticket = _carregar_acessivel(self.ticket_repo, ator, ticket_id)
            comentario = CommentEntity.criar(ticket.id, ator.id, conteudo, interno)
            self.comment_repo.save(comentario)

            self.uow.publish_event(
                ComentarioAdicionadoEvent(
                    aggregate_id=ticket.id,
                    ator_id=ator.id,
                    numero=ticket.numero,
                    assunto=ticket.assunto,
                    comentario_id=comentario.id,
                    autor_id=ator.id,
                    conteudo_preview=comentario.conteudo[:100],
                    interno=comentario.interno,
                    criador_id=ticket.criador_id,
                    responsavel_id=ticket.responsavel_id,
                )
            )

        return comentario


class ListarComentariosService:
    """Use Case: Comentários do ticket, com internos ocultos para clientes."""

    def __init__(self, ticket_repo: TicketRepository, comment_repo: CommentRepository):
        self.ticket_repo = ticket_repo
        self.comment_repo = comment_repo

    def execute(self, ator, ticket_id: str) -> List[CommentEntity]:
        _carregar_acessivel(self.ticket_repo, ator, ticket_id)
        return comentarios_visiveis(ator, self.comment_repo.list_by_ticket(ticket_id))


def _carregar_comentario(comment_repo: CommentRepository, ticket_repo: TicketRepository, ator, comentario_id: str):
    comentario = comment_repo.get_by_id(comentario_id)
    # Comentário interno é inexistente para quem não pode vê-lo
    if not comentario or not comentarios_visiveis(ator, [comentario]):
        raise EntityNotFoundError(
            f"Comentário {comentario_id} não encontrado",
            entity_type="Comentario",
            entity_id=comentario_id,
        )
    _carregar_acessivel(ticket_repo, ator, comentario.ticket_id)
    return comentario


class EditarComentarioService:
    """
    Use Case: Editar comentário.

    O autor edita dentro da janela (24h por padrão); ADMIN edita a
    qualquer momento.
    """

    def __init__(
        self,
        comment_repo: CommentRepository,
        ticket_repo: TicketRepository,
        uow: UnitOfWork,
        janela_horas: int = CommentEntity.JANELA_EDICAO_HORAS,
    ):
        self.comment_repo = comment_repo
        self.ticket_repo = ticket_repo
        self.uow = uow
        self.janela_horas = janela_horas

    def execute(self, ator, comentario_id: str, conteudo: str) -> CommentEntity:
        with self.uow:
            comentario = _carregar_comentario(self.comment_repo, self.ticket_repo, ator, comentario_id)

            autor_na_janela = (
                comentario.autor_id == ator.id
                and comentario.dentro_da_janela_de_edicao(janela_horas=self.janela_horas)
            )
            if not autor_na_janela and not tem_capacidade(ator, Capability.COMENTARIOS_EDITAR_QUALQUER):
                raise PermissionDeniedError(
                    f"Comentários só podem ser editados pelo autor nas primeiras {self.janela_horas} horas"
                )

            comentario.editar(conteudo)
            self.comment_repo.save(comentario)

        return comentario


class ExcluirComentarioService:
    """Use Case: Excluir comentário (autor ou moderador)."""

    def __init__(self, comment_repo: CommentRepository, ticket_repo: TicketRepository, uow: UnitOfWork):
        self.comment_repo = comment_repo
        self.ticket_repo = ticket_repo
        self.uow = uow

    def execute(self, ator, comentario_id: str) -> None:
        with self.uow:
            comentario = _carregar_comentario(self.comment_repo, self.ticket_repo, ator, comentario_id)

            if comentario.autor_id != ator.id:
                exigir_capacidade(ator, Capability.COMENTARIOS_MODERAR)

            self.comment_repo.delete(comentario.id)

        logger.info(f"Comentário {comentario_id} excluído por {ator.id}")
