"""
Exceções de Domínio do HelpDesk.

Este módulo define exceções específicas do domínio que permitem
comunicar erros de forma clara e tipada entre as camadas.

Hierarquia:
    DomainException (base)
    ├── ValidationError (dados malformados: horas, datas, enums)
    ├── EntityNotFoundError (ticket/agente/categoria inexistente)
    ├── PermissionDeniedError (ator sem escopo ou capacidade)
    ├── BusinessRuleViolationError (regra de negócio violada)
    │   └── InvalidTransitionError (status inalcançável / reabertura negada)
    ├── ConcurrencyError (conflito otimista)
    │   └── DuplicateTicketNumberError (colisão de número de ticket)
    └── DependencyFailureError (colaborador externo indisponível)

As camadas externas mapeiam cada tipo para uma resposta (ex: HTTP 403
para PermissionDeniedError). DependencyFailureError nunca chega ao
chamador de uma operação de ciclo de vida: é registrada e descartada
pelo despachante de efeitos.
"""


class DomainException(Exception):
    """
    Exceção base para todos os erros de domínio.

    Todas as exceções específicas do domínio devem herdar desta classe.
    Isso permite capturar qualquer erro de domínio de forma genérica.

    Example:
        try:
            ticket.transicionar(TicketStatus.FECHADO)
        except DomainException as e:
            logger.error(f"Erro de domínio: {e}")
    """

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Serializa exceção para dicionário (útil para APIs)."""
        return {
            "error": self.code,
            "message": self.message,
        }


class ValidationError(DomainException):
    """
    Erro de validação de dados de entrada.

    Lançada quando horas, datas, textos ou valores de enum não
    atendem aos requisitos mínimos para processamento.

    Example:
        if horas <= 0:
            raise ValidationError("Horas devem ser positivas", field="horas")
    """

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class EntityNotFoundError(DomainException):
    """
    Entidade não encontrada no repositório.

    Example:
        ticket = repo.get_by_id(ticket_id)
        if not ticket:
            raise EntityNotFoundError(f"Ticket {ticket_id} não encontrado")
    """

    def __init__(self, message: str, entity_type: str = None, entity_id: str = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "ENTITY_NOT_FOUND")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity_type:
            result["entity_type"] = self.entity_type
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


class PermissionDeniedError(DomainException):
    """
    Ator sem permissão para a operação.

    Lançada quando falta a capacidade exigida pelo papel do ator ou
    quando o ticket está fora do seu escopo. A mensagem nunca revela
    dados do recurso além de "acesso negado".

    Attributes:
        capability: Capacidade que faltou (se a negação for por papel)
    """

    def __init__(self, message: str = "Acesso negado", capability: str = None):
        self.capability = capability
        super().__init__(message, "PERMISSION_DENIED")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.capability:
            result["capability"] = self.capability
        return result


class BusinessRuleViolationError(DomainException):
    """
    Violação de regra de negócio.

    Example:
        if ticket.status.terminal:
            raise BusinessRuleViolationError(
                "Não é possível atribuir ticket encerrado"
            )
    """

    def __init__(self, message: str, rule: str = None):
        self.rule = rule
        super().__init__(message, "BUSINESS_RULE_VIOLATION")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.rule:
            result["rule"] = self.rule
        return result


class InvalidTransitionError(BusinessRuleViolationError):
    """
    Transição de status não permitida pela máquina de estados.

    Cobre status de destino inalcançável a partir do atual e
    reabertura solicitada por papel sem privilégio.
    """

    def __init__(self, message: str, rule: str = "transicao_invalida"):
        super().__init__(message, rule)
        self.code = "INVALID_TRANSITION"


class ConcurrencyError(DomainException):
    """
    Erro de concorrência/conflito de versão.

    Lançada quando o status lido antes da operação não é mais o
    status gravado no momento da escrita (update condicional falhou).
    """

    def __init__(self, message: str):
        super().__init__(message, "CONCURRENCY_ERROR")


class DuplicateTicketNumberError(ConcurrencyError):
    """
    Número de ticket já utilizado por outra inserção concorrente.

    Sinaliza ao caso de uso que deve gerar novo número e tentar de novo.
    """

    def __init__(self, numero: str):
        self.numero = numero
        super().__init__(f"Número de ticket {numero} já está em uso")


class DependencyFailureError(DomainException):
    """
    Colaborador externo (email, relatório) falhou ou está inacessível.

    Nunca propagada como falha da operação de ciclo de vida que
    originou o efeito.

    Attributes:
        dependency: Nome do colaborador que falhou
    """

    def __init__(self, message: str, dependency: str = None):
        self.dependency = dependency
        super().__init__(message, "DEPENDENCY_FAILURE")
