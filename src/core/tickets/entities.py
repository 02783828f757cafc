"""
Entidades do Domínio de Tickets.

Este módulo define as entidades de domínio que encapsulam
regras de negócio relacionadas a tickets de suporte.

Entidades:
- TicketEntity: Agregado principal do domínio (máquina de estados)
- HistoryEntry: Entrada imutável do histórico de status
- WorkLogEntry: Registro imutável de horas trabalhadas
- CommentEntity: Comentário (público ou interno) em um ticket
- DepartmentEntity / CategoryEntity: Organização dos tickets
- TicketStatus / TicketPriority: Enums do domínio

Regras de Negócio Encapsuladas:
- Status só muda através de transicionar/reabrir/atribuir_a
- Toda mudança de status gera exatamente uma HistoryEntry
- resolvido_em/fechado_em derivados das transições
- Validação de horas e janela de datas do registro de trabalho
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import List, Optional
import uuid

from src.core.shared.clock import agora
from src.core.shared.exceptions import (
    ValidationError,
    BusinessRuleViolationError,
    InvalidTransitionError,
)


class TicketStatus(Enum):
    """
    Estados possíveis de um ticket.

    Fluxo de Estados:
        ABERTO ⇄ EM_PROGRESSO ⇄ EM_ESPERA ⇄ RESOLVIDO
           (qualquer estado ativo) → FECHADO | CANCELADO

        FECHADO → ABERTO (apenas via reabrir)
        CANCELADO é terminal
    """

    ABERTO = "ABERTO"
    EM_PROGRESSO = "EM_PROGRESSO"
    EM_ESPERA = "EM_ESPERA"
    RESOLVIDO = "RESOLVIDO"
    FECHADO = "FECHADO"
    CANCELADO = "CANCELADO"

    @property
    def terminal(self) -> bool:
        """FECHADO e CANCELADO não aceitam transições genéricas."""
        return self in (TicketStatus.FECHADO, TicketStatus.CANCELADO)

    @classmethod
    def from_string(cls, value: str) -> "TicketStatus":
        """
        Converte string para enum.

        Aceita o nome do enum ("EM_PROGRESSO") e os nomes
        internacionais ("IN_PROGRESS").

        Raises:
            ValidationError: Se valor não é um dos seis status
        """
        normalizado = (value or "").strip().upper().replace(" ", "_")
        normalizado = _STATUS_ALIASES.get(normalizado, normalizado)
        try:
            return cls[normalizado]
        except KeyError:
            raise ValidationError(f"Status inválido: {value}", field="status")


_STATUS_ALIASES = {
    "OPEN": "ABERTO",
    "IN_PROGRESS": "EM_PROGRESSO",
    "ON_HOLD": "EM_ESPERA",
    "RESOLVED": "RESOLVIDO",
    "CLOSED": "FECHADO",
    "CANCELLED": "CANCELADO",
    "CANCELED": "CANCELADO",
}


class TicketPriority(Enum):
    """Níveis de prioridade."""

    BAIXA = "BAIXA"
    MEDIA = "MEDIA"
    ALTA = "ALTA"
    URGENTE = "URGENTE"

    @classmethod
    def from_string(cls, value: str) -> "TicketPriority":
        """
        Converte string para enum.

        Raises:
            ValidationError: Se valor inválido
        """
        normalizado = (value or "").strip().upper()
        normalizado = _PRIORIDADE_ALIASES.get(normalizado, normalizado)
        try:
            return cls[normalizado]
        except KeyError:
            raise ValidationError(f"Prioridade inválida: {value}", field="prioridade")


_PRIORIDADE_ALIASES = {
    "LOW": "BAIXA",
    "MEDIUM": "MEDIA",
    "MÉDIA": "MEDIA",
    "HIGH": "ALTA",
    "URGENT": "URGENTE",
}


@dataclass
class DepartmentEntity:
    """Departamento: define o escopo padrão dos tickets."""

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    nome: str = ""
    ativo: bool = True


@dataclass
class CategoryEntity:
    """Categoria: sempre pertence a um departamento."""

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    nome: str = ""
    departamento_id: str = ""
    ativo: bool = True


@dataclass(frozen=True)
class HistoryEntry:
    """
    Entrada do histórico de status (append-only).

    status_anterior é None apenas na entrada de criação do ticket.

    Attributes:
        ticket_id: Ticket ao qual a entrada pertence
        status_anterior: Status antes da mudança
        status_novo: Status depois da mudança
        nota: Comentário da mudança (ou mensagem padrão)
        autor_id: Ator que executou a mudança
        criado_em: Momento da mudança
    """

    ticket_id: str
    status_anterior: Optional[TicketStatus]
    status_novo: TicketStatus
    nota: Optional[str] = None
    autor_id: Optional[str] = None
    criado_em: datetime = field(default_factory=agora)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ticket_id": self.ticket_id,
            "status_anterior": self.status_anterior.value if self.status_anterior else None,
            "status_novo": self.status_novo.value,
            "nota": self.nota,
            "autor_id": self.autor_id,
            "criado_em": self.criado_em.isoformat(),
        }


@dataclass(frozen=True)
class WorkLogEntry:
    """
    Registro de trabalho (append-only).

    A soma das horas de um ticket espelha TicketEntity.horas_reais.

    Attributes:
        ticket_id: Ticket trabalhado
        agente_id: Ator que registrou as horas
        horas: Horas trabalhadas (> 0 e <= limite diário)
        descricao: O que foi feito
        data_trabalho: Dia do trabalho (dentro da janela permitida)
        criado_em: Momento do registro
    """

    ticket_id: str
    agente_id: str
    horas: float
    descricao: str
    data_trabalho: date
    criado_em: datetime = field(default_factory=agora)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    HORAS_MAXIMAS = 24.0
    JANELA_DIAS = 30
    DESCRICAO_MIN_LENGTH = 10
    DESCRICAO_MAX_LENGTH = 1000

    @classmethod
    def criar(
        cls,
        ticket_id: str,
        agente_id: str,
        horas,
        descricao: str,
        data_trabalho: date,
        momento: Optional[datetime] = None,
        horas_maximas: Optional[float] = None,
        janela_dias: Optional[int] = None,
    ) -> "WorkLogEntry":
        """
        Factory com as validações do ledger.

        Regras:
        - 0 < horas <= horas_maximas
        - hoje - janela_dias <= data_trabalho <= hoje

        Raises:
            ValidationError: Se horas, descrição ou data inválidas
        """
        momento = momento or agora()
        horas_maximas = cls.HORAS_MAXIMAS if horas_maximas is None else horas_maximas
        janela_dias = cls.JANELA_DIAS if janela_dias is None else janela_dias

        try:
            horas = float(horas)
        except (TypeError, ValueError):
            raise ValidationError("Horas devem ser numéricas", field="horas")

        if horas <= 0:
            raise ValidationError("Horas devem ser maiores que zero", field="horas")

        if horas > horas_maximas:
            raise ValidationError(
                f"Horas devem ser no máximo {horas_maximas:g}",
                field="horas",
            )

        descricao_limpa = (descricao or "").strip()
        if not (cls.DESCRICAO_MIN_LENGTH <= len(descricao_limpa) <= cls.DESCRICAO_MAX_LENGTH):
            raise ValidationError(
                f"Descrição deve ter entre {cls.DESCRICAO_MIN_LENGTH} e "
                f"{cls.DESCRICAO_MAX_LENGTH} caracteres",
                field="descricao",
            )

        if isinstance(data_trabalho, datetime):
            data_trabalho = data_trabalho.date()
        if not isinstance(data_trabalho, date):
            raise ValidationError("Data de trabalho inválida", field="data_trabalho")

        hoje = momento.date()
        if data_trabalho > hoje:
            raise ValidationError(
                "Data de trabalho não pode estar no futuro",
                field="data_trabalho",
            )

        if data_trabalho < hoje - timedelta(days=janela_dias):
            raise ValidationError(
                f"Data de trabalho deve estar nos últimos {janela_dias} dias",
                field="data_trabalho",
            )

        return cls(
            ticket_id=ticket_id,
            agente_id=agente_id,
            horas=horas,
            descricao=descricao_limpa,
            data_trabalho=data_trabalho,
            criado_em=momento,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ticket_id": self.ticket_id,
            "agente_id": self.agente_id,
            "horas": self.horas,
            "descricao": self.descricao,
            "data_trabalho": self.data_trabalho.isoformat(),
            "criado_em": self.criado_em.isoformat(),
        }


@dataclass
class CommentEntity:
    """
    Comentário em um ticket.

    Comentários internos nunca são exibidos a clientes (redação feita
    pelo filtro de escopo).
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    ticket_id: str = ""
    autor_id: str = ""
    conteudo: str = ""
    interno: bool = False
    criado_em: datetime = field(default_factory=agora)
    atualizado_em: datetime = field(default_factory=agora)

    CONTEUDO_MAX_LENGTH = 2000
    JANELA_EDICAO_HORAS = 24

    @classmethod
    def criar(
        cls,
        ticket_id: str,
        autor_id: str,
        conteudo: str,
        interno: bool = False,
    ) -> "CommentEntity":
        cls._validar_conteudo(conteudo)
        return cls(
            ticket_id=ticket_id,
            autor_id=autor_id,
            conteudo=conteudo.strip(),
            interno=bool(interno),
        )

    @classmethod
    def _validar_conteudo(cls, conteudo: str) -> None:
        conteudo_limpo = (conteudo or "").strip()
        if not conteudo_limpo:
            raise ValidationError("Conteúdo é obrigatório", field="conteudo")
        if len(conteudo_limpo) > cls.CONTEUDO_MAX_LENGTH:
            raise ValidationError(
                f"Conteúdo deve ter no máximo {cls.CONTEUDO_MAX_LENGTH} caracteres",
                field="conteudo",
            )

    def dentro_da_janela_de_edicao(
        self,
        momento: Optional[datetime] = None,
        janela_horas: Optional[int] = None,
    ) -> bool:
        momento = momento or agora()
        janela_horas = self.JANELA_EDICAO_HORAS if janela_horas is None else janela_horas
        return momento - self.criado_em <= timedelta(hours=janela_horas)

    def editar(self, conteudo: str, momento: Optional[datetime] = None) -> None:
        self._validar_conteudo(conteudo)
        self.conteudo = conteudo.strip()
        self.atualizado_em = momento or agora()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ticket_id": self.ticket_id,
            "autor_id": self.autor_id,
            "conteudo": self.conteudo,
            "interno": self.interno,
            "criado_em": self.criado_em.isoformat(),
            "atualizado_em": self.atualizado_em.isoformat(),
        }


@dataclass
class TicketEntity:
    """
    Entidade de Domínio: Ticket.

    Agregado principal do domínio de help-desk. O status é privado:
    só muda por `transicionar`, `reabrir` ou `atribuir_a`, e cada
    mudança deixa uma HistoryEntry pendente que o repositório grava
    junto com o ticket (mesma chamada, mesma transação).

    Invariantes:
    - resolvido_em definido sse o ticket entrou em RESOLVIDO desde a
      última reabertura; fechado_em análogo para FECHADO
    - criador_id e departamento_id imutáveis após a criação
    - horas_reais só cresce via registro de trabalho (incremento atômico
      feito pelo repositório, nunca pela entidade)

    Example:
        ticket = TicketEntity.criar(
            numero="2025-07-000001",
            assunto="Impressora parada",
            descricao="A impressora do 3º andar não liga desde ontem",
            criador_id="cliente-1",
            departamento_id="ti",
            categoria_id="hardware",
        )
        ticket.atribuir_a(agente, autor_id="chefe-1")
        ticket.transicionar(TicketStatus.RESOLVIDO, autor_id=agente.id)
    """

    # Identificação
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    numero: str = ""

    # Dados principais
    assunto: str = ""
    descricao: str = ""
    prioridade: TicketPriority = TicketPriority.MEDIA
    tags: List[str] = field(default_factory=list)

    # Horas
    horas_estimadas: Optional[float] = None
    horas_reais: Optional[float] = None

    # Datas
    data_vencimento: Optional[datetime] = None
    resolvido_em: Optional[datetime] = None
    fechado_em: Optional[datetime] = None
    criado_em: datetime = field(default_factory=agora)
    atualizado_em: datetime = field(default_factory=agora)

    # Relacionamentos
    criador_id: str = ""
    responsavel_id: Optional[str] = None
    departamento_id: str = ""
    categoria_id: str = ""
    projeto_id: Optional[str] = None

    # Estado (privado)
    _status: TicketStatus = field(default=TicketStatus.ABERTO, repr=False)
    _historico_pendente: List[HistoryEntry] = field(
        default_factory=list, repr=False, compare=False
    )

    # Constantes de validação
    ASSUNTO_MIN_LENGTH = 5
    ASSUNTO_MAX_LENGTH = 200
    DESCRICAO_MIN_LENGTH = 10
    DESCRICAO_MAX_LENGTH = 2000
    TAGS_MAX = 10
    TAG_MAX_LENGTH = 50
    HORAS_ESTIMADAS_MIN = 0.1
    HORAS_ESTIMADAS_MAX = 999.0

    @classmethod
    def criar(
        cls,
        numero: str,
        assunto: str,
        descricao: str,
        criador_id: str,
        departamento_id: str,
        categoria_id: str,
        prioridade: TicketPriority = TicketPriority.MEDIA,
        tags: Optional[List[str]] = None,
        horas_estimadas: Optional[float] = None,
        data_vencimento: Optional[datetime] = None,
        projeto_id: Optional[str] = None,
        momento: Optional[datetime] = None,
    ) -> "TicketEntity":
        """
        Factory method para criar ticket com validações.

        O ticket nasce ABERTO com uma entrada de histórico
        (None → ABERTO, "Ticket criado").

        Raises:
            ValidationError: Se dados de entrada inválidos
        """
        cls._validar_assunto(assunto)
        cls._validar_descricao(descricao)
        if not criador_id:
            raise ValidationError("Criador é obrigatório", field="criador_id")
        if not departamento_id:
            raise ValidationError("Departamento é obrigatório", field="departamento_id")
        if not categoria_id:
            raise ValidationError("Categoria é obrigatória", field="categoria_id")

        momento = momento or agora()
        ticket = cls(
            numero=numero,
            assunto=assunto.strip(),
            descricao=descricao.strip(),
            prioridade=prioridade,
            tags=cls._normalizar_tags(tags),
            horas_estimadas=cls._validar_horas_estimadas(horas_estimadas),
            data_vencimento=data_vencimento,
            criador_id=criador_id,
            departamento_id=departamento_id,
            categoria_id=categoria_id,
            projeto_id=projeto_id,
            criado_em=momento,
            atualizado_em=momento,
        )
        ticket._registrar_historico(None, TicketStatus.ABERTO, "Ticket criado", criador_id, momento)
        return ticket

    @classmethod
    def reconstituir(cls, status: TicketStatus, **campos) -> "TicketEntity":
        """
        Recria entidade a partir de dados persistidos (sem validações
        e sem histórico pendente). Usado pelos mappers.
        """
        return cls(_status=status, **campos)

    # =========================================================================
    # Validações
    # =========================================================================

    @classmethod
    def _validar_assunto(cls, assunto: str) -> None:
        assunto_limpo = (assunto or "").strip()
        if not assunto_limpo:
            raise ValidationError("Assunto é obrigatório", field="assunto")
        if len(assunto_limpo) < cls.ASSUNTO_MIN_LENGTH:
            raise ValidationError(
                f"Assunto deve ter pelo menos {cls.ASSUNTO_MIN_LENGTH} caracteres",
                field="assunto",
            )
        if len(assunto_limpo) > cls.ASSUNTO_MAX_LENGTH:
            raise ValidationError(
                f"Assunto deve ter no máximo {cls.ASSUNTO_MAX_LENGTH} caracteres",
                field="assunto",
            )

    @classmethod
    def _validar_descricao(cls, descricao: str) -> None:
        descricao_limpa = (descricao or "").strip()
        if not descricao_limpa:
            raise ValidationError("Descrição é obrigatória", field="descricao")
        if len(descricao_limpa) < cls.DESCRICAO_MIN_LENGTH:
            raise ValidationError(
                f"Descrição deve ter pelo menos {cls.DESCRICAO_MIN_LENGTH} caracteres",
                field="descricao",
            )
        if len(descricao_limpa) > cls.DESCRICAO_MAX_LENGTH:
            raise ValidationError(
                f"Descrição deve ter no máximo {cls.DESCRICAO_MAX_LENGTH} caracteres",
                field="descricao",
            )

    @classmethod
    def _normalizar_tags(cls, tags: Optional[List[str]]) -> List[str]:
        """Remove vazias e duplicadas preservando a ordem."""
        resultado: List[str] = []
        for tag in tags or []:
            tag_limpa = str(tag).strip().lower()
            if not tag_limpa or tag_limpa in resultado:
                continue
            if len(tag_limpa) > cls.TAG_MAX_LENGTH:
                raise ValidationError(
                    f"Tag deve ter no máximo {cls.TAG_MAX_LENGTH} caracteres",
                    field="tags",
                )
            resultado.append(tag_limpa)
        if len(resultado) > cls.TAGS_MAX:
            raise ValidationError(f"Máximo de {cls.TAGS_MAX} tags", field="tags")
        return resultado

    @classmethod
    def _validar_horas_estimadas(cls, horas) -> Optional[float]:
        if horas is None:
            return None
        try:
            horas = float(horas)
        except (TypeError, ValueError):
            raise ValidationError("Horas estimadas devem ser numéricas", field="horas_estimadas")
        if not (cls.HORAS_ESTIMADAS_MIN <= horas <= cls.HORAS_ESTIMADAS_MAX):
            raise ValidationError(
                f"Horas estimadas devem estar entre {cls.HORAS_ESTIMADAS_MIN:g} "
                f"e {cls.HORAS_ESTIMADAS_MAX:g}",
                field="horas_estimadas",
            )
        return horas

    # =========================================================================
    # Máquina de estados
    # =========================================================================

    @property
    def status(self) -> TicketStatus:
        return self._status

    def transicionar(
        self,
        novo_status: TicketStatus,
        autor_id: Optional[str] = None,
        nota: Optional[str] = None,
        momento: Optional[datetime] = None,
    ) -> HistoryEntry:
        """
        Aplica uma transição genérica de status.

        Regras:
        - Mesmo status: permitido e registrado no histórico, sem
          alterar resolvido_em/fechado_em
        - FECHADO só sai via reabrir(); CANCELADO é terminal
        - Entrar em RESOLVIDO define resolvido_em
        - Entrar em FECHADO define fechado_em

        Returns:
            A HistoryEntry gerada (também fica pendente na entidade)

        Raises:
            InvalidTransitionError: Se destino inalcançável
        """
        if not isinstance(novo_status, TicketStatus):
            raise ValidationError(f"Status inválido: {novo_status}", field="status")

        momento = momento or agora()
        anterior = self._status
        nota = (nota or "").strip() or f"Status alterado para {novo_status.value}"

        if novo_status == anterior:
            self.atualizado_em = momento
            return self._registrar_historico(anterior, novo_status, nota, autor_id, momento)

        if anterior == TicketStatus.FECHADO:
            raise InvalidTransitionError(
                "Ticket fechado só pode voltar a ABERTO pela reabertura",
                rule="fechado_exige_reabertura",
            )

        if anterior == TicketStatus.CANCELADO:
            raise InvalidTransitionError(
                "Ticket cancelado não aceita novas transições",
                rule="cancelado_terminal",
            )

        self._status = novo_status
        if novo_status == TicketStatus.RESOLVIDO:
            self.resolvido_em = momento
        elif novo_status == TicketStatus.FECHADO:
            self.fechado_em = momento
        self.atualizado_em = momento

        return self._registrar_historico(anterior, novo_status, nota, autor_id, momento)

    def reabrir(
        self,
        autor_id: Optional[str] = None,
        autor_nome: str = "",
        momento: Optional[datetime] = None,
    ) -> HistoryEntry:
        """
        Reabre um ticket FECHADO (FECHADO → ABERTO).

        Limpa resolvido_em e fechado_em. A checagem de papel fica no
        caso de uso.

        Raises:
            InvalidTransitionError: Se ticket não está fechado
        """
        if self._status != TicketStatus.FECHADO:
            raise InvalidTransitionError(
                "Apenas tickets fechados podem ser reabertos",
                rule="apenas_fechado_pode_reabrir",
            )

        momento = momento or agora()
        self._status = TicketStatus.ABERTO
        self.resolvido_em = None
        self.fechado_em = None
        self.atualizado_em = momento

        nota = f"Ticket reaberto por {autor_nome}" if autor_nome else "Ticket reaberto"
        return self._registrar_historico(
            TicketStatus.FECHADO, TicketStatus.ABERTO, nota, autor_id, momento
        )

    def atribuir_a(
        self,
        responsavel,
        autor_id: Optional[str] = None,
        momento: Optional[datetime] = None,
    ) -> Optional[HistoryEntry]:
        """
        Atribui o ticket a um agente ou chefe de departamento ativo.

        Regras:
        - Ticket FECHADO/CANCELADO não pode ser atribuído
        - Ticket ABERTO passa a EM_PROGRESSO (com HistoryEntry)
        - Nos demais status só o responsável muda (sem HistoryEntry)

        Args:
            responsavel: ActorEntity do novo responsável

        Returns:
            HistoryEntry da transição forçada, ou None

        Raises:
            ValidationError: Se responsável inativo ou com papel inadequado
            InvalidTransitionError: Se ticket encerrado
        """
        if not responsavel.pode_ser_responsavel:
            raise ValidationError(
                "Responsável deve ser agente ou chefe de departamento ativo",
                field="responsavel_id",
            )

        if self._status.terminal:
            raise InvalidTransitionError(
                f"Não é possível atribuir ticket {self._status.value}",
                rule="ticket_encerrado_imutavel",
            )

        momento = momento or agora()
        self.responsavel_id = responsavel.id
        self.atualizado_em = momento

        if self._status != TicketStatus.ABERTO:
            return None

        anterior = self._status
        self._status = TicketStatus.EM_PROGRESSO
        return self._registrar_historico(
            anterior,
            TicketStatus.EM_PROGRESSO,
            f"Ticket atribuído a {responsavel.nome}",
            autor_id,
            momento,
        )

    # =========================================================================
    # Edição de campos
    # =========================================================================

    def editar(
        self,
        assunto: Optional[str] = None,
        descricao: Optional[str] = None,
        prioridade: Optional[TicketPriority] = None,
        tags: Optional[List[str]] = None,
        horas_estimadas: Optional[float] = None,
        data_vencimento: Optional[datetime] = None,
        momento: Optional[datetime] = None,
    ) -> None:
        """
        Edita campos descritivos. Status nunca é editável aqui.

        Raises:
            BusinessRuleViolationError: Se ticket encerrado
            ValidationError: Se algum valor inválido
        """
        if self._status.terminal:
            raise BusinessRuleViolationError(
                f"Não é possível editar ticket {self._status.value}",
                rule="ticket_encerrado_imutavel",
            )

        if assunto is not None:
            self._validar_assunto(assunto)
            self.assunto = assunto.strip()
        if descricao is not None:
            self._validar_descricao(descricao)
            self.descricao = descricao.strip()
        if prioridade is not None:
            self.prioridade = prioridade
        if tags is not None:
            self.tags = self._normalizar_tags(tags)
        if horas_estimadas is not None:
            self.horas_estimadas = self._validar_horas_estimadas(horas_estimadas)
        if data_vencimento is not None:
            self.data_vencimento = data_vencimento
        self.atualizado_em = momento or agora()

    # =========================================================================
    # Histórico pendente
    # =========================================================================

    def _registrar_historico(
        self,
        anterior: Optional[TicketStatus],
        novo: TicketStatus,
        nota: Optional[str],
        autor_id: Optional[str],
        momento: datetime,
    ) -> HistoryEntry:
        entrada = HistoryEntry(
            ticket_id=self.id,
            status_anterior=anterior,
            status_novo=novo,
            nota=nota,
            autor_id=autor_id,
            criado_em=momento,
        )
        self._historico_pendente.append(entrada)
        return entrada

    @property
    def historico_pendente(self) -> List[HistoryEntry]:
        return list(self._historico_pendente)

    def coletar_historico(self) -> List[HistoryEntry]:
        """Retorna e limpa as entradas pendentes (chamado pelo repositório)."""
        pendentes = list(self._historico_pendente)
        self._historico_pendente.clear()
        return pendentes

    def renumerar(self, numero: str) -> None:
        """Troca o número antes da primeira gravação (retry de colisão)."""
        self.numero = numero

    def __repr__(self) -> str:
        return (
            f"TicketEntity("
            f"numero={self.numero}, "
            f"assunto='{self.assunto[:20]}', "
            f"status={self._status.value}, "
            f"prioridade={self.prioridade.value}"
            f")"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TicketEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
