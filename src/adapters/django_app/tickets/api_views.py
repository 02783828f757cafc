"""
API Views JSON para o HelpDesk.

RESTful API para integração com frontends e sistemas externos.

Endpoints (prefixo /tickets/api/):
- GET    /                         - Listar tickets do escopo
- POST   /                         - Criar ticket
- GET    /estatisticas/            - Contagens por status/prioridade
- GET    /exportar/                - CSV da listagem filtrada
- POST   /lote/atribuir/           - Atribuição em lote
- POST   /lote/status/             - Transição em lote
- GET    /<id>/                    - Obter ticket
- PATCH  /<id>/                    - Editar campos
- DELETE /<id>/                    - Excluir ticket
- POST   /<id>/status/             - Transicionar status
- POST   /<id>/reabrir/            - Reabrir ticket fechado
- POST   /<id>/atribuir/           - Atribuir ticket
- GET    /<id>/historico/          - Histórico de status
- GET    /<id>/trabalho/           - Horas registradas
- POST   /<id>/trabalho/           - Registrar horas
- GET    /<id>/comentarios/        - Comentários visíveis
- POST   /<id>/comentarios/        - Comentar
- PATCH  /comentarios/<id>/        - Editar comentário
- DELETE /comentarios/<id>/        - Excluir comentário
- GET    /notificacoes/            - Caixa de entrada
- GET    /notificacoes/nao-lidas/  - Contador de não lidas
- POST   /notificacoes/marcar-todas/
- POST   /notificacoes/<id>/lida/
- DELETE /notificacoes/<id>/

Formato:
- Entrada: JSON
- Saída: JSON com estrutura {success, data/error, meta}

Autenticação:
- Feita fora deste app; o ator autenticado chega no header X-Actor-Id
"""

from datetime import date, datetime
import json
import logging
from typing import Any, Dict, Optional, Tuple

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils.dateparse import parse_date, parse_datetime
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from src.config.container import get_container
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    ConcurrencyError,
    DomainException,
    EntityNotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from src.core.tickets.dtos import (
    CriarTicketInputDTO,
    EditarTicketInputDTO,
    ListarTicketsQueryDTO,
    RegistrarTrabalhoInputDTO,
)

logger = logging.getLogger(__name__)


ACTOR_HEADER = 'HTTP_X_ACTOR_ID'


class NotAuthenticated(Exception):
    """Requisição sem ator autenticado reconhecido."""


# =============================================================================
# Helpers
# =============================================================================

def json_response(success: bool, data: Any = None, error: Any = None,
                  status: int = 200, meta: Dict = None) -> JsonResponse:
    """
    Cria resposta JSON padronizada.

    Args:
        success: Se operação foi bem sucedida
        data: Dados da resposta
        error: Erro (mensagem ou dicionário de DomainException.to_dict())
        status: HTTP status code
        meta: Metadados adicionais
    """
    response = {'success': success}

    if data is not None:
        response['data'] = data

    if error is not None:
        response['error'] = error

    if meta is not None:
        response['meta'] = meta

    return JsonResponse(response, status=status)


def parse_json_body(request: HttpRequest) -> Dict:
    """
    Raises:
        ValidationError: Se o corpo não é um objeto JSON
    """
    if not request.body:
        return {}

    try:
        data = json.loads(request.body)
    except json.JSONDecodeError as e:
        raise ValidationError(f"JSON inválido: {e}")
    if not isinstance(data, dict):
        raise ValidationError("Corpo deve ser um objeto JSON")
    return data


def _parse_datetime(valor: Optional[str], campo: str) -> Optional[datetime]:
    if not valor:
        return None
    resultado = parse_datetime(valor)
    if resultado is None:
        raise ValidationError(f"Data/hora inválida: {valor}", field=campo)
    return resultado


def _parse_date(valor: Optional[str], campo: str) -> date:
    resultado = parse_date(valor) if valor else None
    if resultado is None:
        raise ValidationError(f"Data inválida: {valor}", field=campo)
    return resultado


def _parse_int(valor: Optional[str], padrao: int, campo: str) -> int:
    if valor in (None, ''):
        return padrao
    try:
        return int(valor)
    except ValueError:
        raise ValidationError(f"{campo} deve ser um número inteiro", field=campo)


def _parse_tags(valor: Any) -> Optional[Tuple[str, ...]]:
    """None quando ausente; lista de strings vira tupla."""
    if valor is None:
        return None
    if not isinstance(valor, list) or not all(isinstance(tag, str) for tag in valor):
        raise ValidationError("tags deve ser uma lista de strings", field="tags")
    return tuple(valor)


def _obrigatorio(data: Dict, campo: str) -> Any:
    valor = data.get(campo)
    if valor in (None, ''):
        raise ValidationError(f"{campo} é obrigatório", field=campo)
    return valor


def _query_from_request(request: HttpRequest) -> ListarTicketsQueryDTO:
    return ListarTicketsQueryDTO(
        status=request.GET.get('status') or None,
        prioridade=request.GET.get('prioridade') or None,
        departamento_id=request.GET.get('departamento_id') or None,
        categoria_id=request.GET.get('categoria_id') or None,
        responsavel_id=request.GET.get('responsavel_id') or None,
        busca=request.GET.get('busca') or None,
        pagina=_parse_int(request.GET.get('page'), 1, 'page'),
        por_pagina=_parse_int(request.GET.get('per_page'), 20, 'per_page'),
    )


# =============================================================================
# Base API View
# =============================================================================

@method_decorator(csrf_exempt, name='dispatch')
class BaseAPIView(View):
    """
    View base para APIs JSON.

    Fornece:
    - Parsing de JSON
    - Resolução do ator autenticado
    - Acesso ao container DI
    - Tratamento de erros padronizado
    """

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except Exception as e:
            return self.handle_exception(e)

    def get_container(self):
        return get_container()

    def get_service(self, service_name: str):
        return getattr(self.get_container(), service_name)()

    def get_actor(self, request: HttpRequest):
        """
        Raises:
            NotAuthenticated: Se o header não identifica um ator conhecido
                e ativo
        """
        actor_id = request.META.get(ACTOR_HEADER)
        if not actor_id:
            raise NotAuthenticated("Ator não autenticado")
        ator = self.get_container().actor_repository().get_by_id(actor_id)
        if ator is None:
            raise NotAuthenticated("Ator não autenticado")
        if not ator.ativo:
            raise NotAuthenticated("Ator desativado")
        return ator

    def parse_body(self, request: HttpRequest) -> Dict:
        return parse_json_body(request)

    def handle_exception(self, e: Exception) -> JsonResponse:
        """
        Mapeia exceções para status HTTP.

        400 validação, 401 sem ator, 403 acesso negado, 404 não
        encontrado, 409 conflito, 422 regra de negócio / transição
        inválida, 500 inesperado.
        """
        if isinstance(e, NotAuthenticated):
            return json_response(success=False, error={'error': 'NOT_AUTHENTICATED', 'message': str(e)}, status=401)

        if isinstance(e, ValidationError):
            return json_response(success=False, error=e.to_dict(), status=400)

        if isinstance(e, PermissionDeniedError):
            return json_response(success=False, error=e.to_dict(), status=403)

        if isinstance(e, EntityNotFoundError):
            return json_response(success=False, error=e.to_dict(), status=404)

        if isinstance(e, ConcurrencyError):
            return json_response(success=False, error=e.to_dict(), status=409)

        if isinstance(e, BusinessRuleViolationError):
            return json_response(success=False, error=e.to_dict(), status=422)

        if isinstance(e, DomainException):
            return json_response(success=False, error=e.to_dict(), status=400)

        logger.exception(f"Erro inesperado na API: {e}")
        return json_response(
            success=False,
            error={'error': 'INTERNAL_ERROR', 'message': 'Erro interno do servidor'},
            status=500,
        )


# =============================================================================
# Ticket API Views
# =============================================================================

class TicketAPIListView(BaseAPIView):
    """
    GET /tickets/api/ - Lista tickets do escopo do ator
    POST /tickets/api/ - Cria ticket
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        """
        Query params: status, prioridade, departamento_id, categoria_id,
        responsavel_id, busca, page (default 1), per_page (default 20)
        """
        ator = self.get_actor(request)
        resultado = self.get_service('listar_tickets_service').execute(ator, _query_from_request(request))
        dados = resultado.to_dict()
        items = dados.pop('items')
        return json_response(success=True, data=items, meta=dados)

    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Body JSON:
        {
            "assunto": "string (obrigatório)",
            "descricao": "string (obrigatório)",
            "departamento_id": "string (obrigatório)",
            "categoria_id": "string (obrigatório)",
            "prioridade": "BAIXA|MEDIA|ALTA|URGENTE (opcional)",
            "tags": ["string"] (opcional),
            "horas_estimadas": number (opcional),
            "data_vencimento": "ISO 8601" (opcional),
            "projeto_id": "string" (opcional)
        }
        """
        ator = self.get_actor(request)
        data = self.parse_body(request)

        input_dto = CriarTicketInputDTO(
            assunto=data.get('assunto', ''),
            descricao=data.get('descricao', ''),
            departamento_id=data.get('departamento_id', ''),
            categoria_id=data.get('categoria_id', ''),
            prioridade=data.get('prioridade') or 'MEDIA',
            tags=_parse_tags(data.get('tags')) or (),
            horas_estimadas=data.get('horas_estimadas'),
            data_vencimento=_parse_datetime(data.get('data_vencimento'), 'data_vencimento'),
            projeto_id=data.get('projeto_id'),
        )

        output = self.get_service('criar_ticket_service').execute(ator, input_dto)
        logger.info(f"API: Ticket criado: {output.numero}")
        return json_response(success=True, data=output.to_dict(), status=201)


class TicketAPIDetailView(BaseAPIView):
    """
    GET /tickets/api/<id>/ - Obter ticket
    PATCH /tickets/api/<id>/ - Editar assunto, descrição, prioridade,
        tags, horas estimadas e vencimento (status nunca)
    DELETE /tickets/api/<id>/ - Excluir ticket
    """

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        ator = self.get_actor(request)
        ticket = self.get_service('obter_ticket_service').execute(ator, pk)
        return json_response(success=True, data=ticket.to_dict())

    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        ator = self.get_actor(request)
        data = self.parse_body(request)

        if 'status' in data:
            raise ValidationError("Status não é editável; use /status/", field="status")

        input_dto = EditarTicketInputDTO(
            assunto=data.get('assunto'),
            descricao=data.get('descricao'),
            prioridade=data.get('prioridade'),
            tags=_parse_tags(data.get('tags')),
            horas_estimadas=data.get('horas_estimadas'),
            data_vencimento=_parse_datetime(data.get('data_vencimento'), 'data_vencimento'),
        )
        output = self.get_service('editar_ticket_service').execute(ator, pk, input_dto)
        return json_response(success=True, data=output.to_dict())

    def delete(self, request: HttpRequest, pk: str) -> JsonResponse:
        ator = self.get_actor(request)
        self.get_service('excluir_ticket_service').execute(ator, pk)
        return json_response(success=True, status=200)


class TicketAPIStatusView(BaseAPIView):
    """
    POST /tickets/api/<id>/status/

    Body JSON: {"status": "EM_ESPERA", "nota": "string (opcional)"}
    """

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        ator = self.get_actor(request)
        data = self.parse_body(request)
        output = self.get_service('transicionar_ticket_service').execute(
            ator, pk, _obrigatorio(data, 'status'), data.get('nota')
        )
        logger.info(f"API: Ticket {output.numero} agora {output.status}")
        return json_response(success=True, data=output.to_dict())


class TicketAPIReabrirView(BaseAPIView):
    """POST /tickets/api/<id>/reabrir/"""

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        ator = self.get_actor(request)
        output = self.get_service('reabrir_ticket_service').execute(ator, pk)
        logger.info(f"API: Ticket {output.numero} reaberto")
        return json_response(success=True, data=output.to_dict())


class TicketAPIAtribuirView(BaseAPIView):
    """
    POST /tickets/api/<id>/atribuir/

    Body JSON: {"responsavel_id": "string (obrigatório)"}
    """

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        ator = self.get_actor(request)
        data = self.parse_body(request)
        responsavel_id = _obrigatorio(data, 'responsavel_id')
        output = self.get_service('atribuir_ticket_service').execute(ator, pk, responsavel_id)
        logger.info(f"API: Ticket {output.numero} atribuído a {responsavel_id}")
        return json_response(success=True, data=output.to_dict())


class TicketAPIHistoricoView(BaseAPIView):
    """GET /tickets/api/<id>/historico/"""

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        ator = self.get_actor(request)
        historico = self.get_service('obter_historico_service').execute(ator, pk)
        return json_response(success=True, data=[h.to_dict() for h in historico])


class TicketAPITrabalhoView(BaseAPIView):
    """
    GET /tickets/api/<id>/trabalho/ - Lista horas registradas
    POST /tickets/api/<id>/trabalho/ - Registra horas

    Body JSON: {"horas": 2.5, "descricao": "string", "data_trabalho": "YYYY-MM-DD"}
    """

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        ator = self.get_actor(request)
        registros = self.get_service('listar_trabalho_service').execute(ator, pk)
        return json_response(
            success=True,
            data=[r.to_dict() for r in registros],
            meta={'total_horas': sum(r.horas for r in registros)},
        )

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        ator = self.get_actor(request)
        data = self.parse_body(request)
        input_dto = RegistrarTrabalhoInputDTO(
            ticket_id=pk,
            horas=_obrigatorio(data, 'horas'),
            descricao=data.get('descricao', ''),
            data_trabalho=_parse_date(data.get('data_trabalho'), 'data_trabalho'),
        )
        registro = self.get_service('registrar_trabalho_service').execute(ator, input_dto)
        return json_response(success=True, data=registro.to_dict(), status=201)


class TicketAPIEstatisticasView(BaseAPIView):
    """GET /tickets/api/estatisticas/"""

    def get(self, request: HttpRequest) -> JsonResponse:
        ator = self.get_actor(request)
        return json_response(success=True, data=self.get_service('estatisticas_service').execute(ator))


class TicketAPIExportarView(BaseAPIView):
    """GET /tickets/api/exportar/ - mesmos filtros da listagem"""

    def get(self, request: HttpRequest) -> HttpResponse:
        ator = self.get_actor(request)
        conteudo = self.get_service('exportar_csv_service').execute(ator, _query_from_request(request))
        response = HttpResponse(conteudo, content_type='text/csv; charset=utf-8')
        response['Content-Disposition'] = 'attachment; filename="tickets.csv"'
        return response


class TicketAPILoteAtribuirView(BaseAPIView):
    """
    POST /tickets/api/lote/atribuir/

    Body JSON: {"ticket_ids": ["..."], "responsavel_id": "..."}
    """

    def post(self, request: HttpRequest) -> JsonResponse:
        ator = self.get_actor(request)
        data = self.parse_body(request)
        resultado = self.get_service('atribuir_em_lote_service').execute(
            ator, list(_obrigatorio(data, 'ticket_ids')), _obrigatorio(data, 'responsavel_id')
        )
        return json_response(success=True, data=resultado.to_dict())


class TicketAPILoteStatusView(BaseAPIView):
    """
    POST /tickets/api/lote/status/

    Body JSON: {"ticket_ids": ["..."], "status": "...", "nota": "..."}
    """

    def post(self, request: HttpRequest) -> JsonResponse:
        ator = self.get_actor(request)
        data = self.parse_body(request)
        resultado = self.get_service('transicionar_em_lote_service').execute(
            ator, list(_obrigatorio(data, 'ticket_ids')), _obrigatorio(data, 'status'), data.get('nota')
        )
        return json_response(success=True, data=resultado.to_dict())


# =============================================================================
# Comentários
# =============================================================================

class ComentarioAPIListView(BaseAPIView):
    """
    GET /tickets/api/<id>/comentarios/
    POST /tickets/api/<id>/comentarios/

    Body JSON: {"conteudo": "string", "interno": false}
    """

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        ator = self.get_actor(request)
        comentarios = self.get_service('listar_comentarios_service').execute(ator, pk)
        return json_response(success=True, data=[c.to_dict() for c in comentarios])

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        ator = self.get_actor(request)
        data = self.parse_body(request)
        comentario = self.get_service('adicionar_comentario_service').execute(
            ator, pk, data.get('conteudo', ''), bool(data.get('interno', False))
        )
        return json_response(success=True, data=comentario.to_dict(), status=201)


class ComentarioAPIDetailView(BaseAPIView):
    """
    PATCH /tickets/api/comentarios/<id>/ - {"conteudo": "string"}
    DELETE /tickets/api/comentarios/<id>/
    """

    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        ator = self.get_actor(request)
        data = self.parse_body(request)
        comentario = self.get_service('editar_comentario_service').execute(ator, pk, data.get('conteudo', ''))
        return json_response(success=True, data=comentario.to_dict())

    def delete(self, request: HttpRequest, pk: str) -> JsonResponse:
        ator = self.get_actor(request)
        self.get_service('excluir_comentario_service').execute(ator, pk)
        return json_response(success=True)


# =============================================================================
# Notificações
# =============================================================================

class NotificacaoAPIListView(BaseAPIView):
    """GET /tickets/api/notificacoes/?nao_lidas=true&page=1&per_page=20"""

    def get(self, request: HttpRequest) -> JsonResponse:
        ator = self.get_actor(request)
        resultado = self.get_service('listar_notificacoes_service').execute(
            ator,
            apenas_nao_lidas=request.GET.get('nao_lidas', '').lower() in ('true', '1', 'yes'),
            pagina=_parse_int(request.GET.get('page'), 1, 'page'),
            por_pagina=_parse_int(request.GET.get('per_page'), 20, 'per_page'),
        )
        items = resultado.pop('items')
        return json_response(success=True, data=items, meta=resultado)


class NotificacaoAPINaoLidasView(BaseAPIView):
    """GET /tickets/api/notificacoes/nao-lidas/"""

    def get(self, request: HttpRequest) -> JsonResponse:
        ator = self.get_actor(request)
        return json_response(
            success=True,
            data={'nao_lidas': self.get_service('contar_nao_lidas_service').execute(ator)},
        )


class NotificacaoAPIMarcarTodasView(BaseAPIView):
    """POST /tickets/api/notificacoes/marcar-todas/"""

    def post(self, request: HttpRequest) -> JsonResponse:
        ator = self.get_actor(request)
        alteradas = self.get_service('marcar_todas_como_lidas_service').execute(ator)
        return json_response(success=True, data={'alteradas': alteradas})


class NotificacaoAPILidaView(BaseAPIView):
    """POST /tickets/api/notificacoes/<id>/lida/"""

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        ator = self.get_actor(request)
        notificacao = self.get_service('marcar_como_lida_service').execute(ator, pk)
        return json_response(success=True, data=notificacao.to_dict())


class NotificacaoAPIDetailView(BaseAPIView):
    """DELETE /tickets/api/notificacoes/<id>/"""

    def delete(self, request: HttpRequest, pk: str) -> JsonResponse:
        ator = self.get_actor(request)
        self.get_service('excluir_notificacao_service').execute(ator, pk)
        return json_response(success=True)
