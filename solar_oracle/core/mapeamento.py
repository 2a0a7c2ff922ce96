"""
mapeamento.py

Resolução inverter_id → endereço.

Fluxo por mensagem:

    decodificação → lookup → {não encontrado | encontrado → publicação}

Cada ramo termina a invocação; nada é repetido aqui dentro. A decisão de
reprocessar fica com o loop de consumo, a partir do Desfecho devolvido.
"""

from typing import Protocol, Union

from solar_oracle.core.erros import ErroDecodificacao, ErroPublicacao
from solar_oracle.core.schemas import (
    Desfecho,
    EstadoMapeamento,
    PedidoMapeamento,
    RespostaMapeamento,
    ResultadoMapeamento,
    decodificar_mensagem,
)
from solar_oracle.utils.logger import get_logger

logger = get_logger(__name__)


class LookupStore(Protocol):
    """
    Fonte dos endereços cadastrados.

    Deve devolver "" tanto quando não há linha para o inverter_id quanto
    quando a consulta falha.
    """

    def buscar_endereco(self, inverter_id: str) -> str:
        ...


class MessagePublisher(Protocol):
    """
    Publica uma mensagem no tópico de respostas.
    Falhas de transporte devem ser levantadas como ErroPublicacao.
    """

    def publicar(self, chave: bytes, valor: bytes) -> None:
        ...


def resolver_e_publicar(
    raw: Union[bytes, str],
    store: LookupStore,
    publisher: MessagePublisher,
) -> ResultadoMapeamento:
    """
    Decodifica um PedidoMapeamento, busca o endereço e publica a resposta.

    - Payload inválido: warning, sem lookup e sem publicação (IGNORADA).
    - Endereço vazio: warning "Nenhum endereço encontrado", sem publicação (IGNORADA).
    - Falha ao publicar: error, sem retry (FALHA_INFRA).
    - Sucesso: uma única publicação, chave = device_id (PROCESSADA).

    `store` e `publisher` são compartilhados entre invocações e não
    pertencem a este handler.
    """
    try:
        pedido = decodificar_mensagem(raw, PedidoMapeamento)
    except ErroDecodificacao as exc:
        logger.warning("[Mapping] Erro ao decodificar pedido de mapeamento: %s", exc)
        return ResultadoMapeamento(
            desfecho=Desfecho.IGNORADA,
            estado=EstadoMapeamento.DECODIFICACAO_INVALIDA,
        )

    inverter_id = pedido.device_id
    endereco = store.buscar_endereco(inverter_id)

    if endereco == "":
        logger.warning(
            "[Mapping] Nenhum endereço encontrado para inverter_id=%s",
            inverter_id,
            extra={"device_id": inverter_id},
        )
        return ResultadoMapeamento(
            desfecho=Desfecho.IGNORADA,
            estado=EstadoMapeamento.NAO_ENCONTRADO,
            inverter_id=inverter_id,
        )

    resposta = RespostaMapeamento(inverter_id=inverter_id, address=endereco)

    try:
        publisher.publicar(
            inverter_id.encode("utf-8"),
            resposta.model_dump_json().encode("utf-8"),
        )
    except ErroPublicacao as exc:
        logger.error(
            "[Mapping] Erro ao publicar mapeamento de inverter_id=%s: %s",
            inverter_id,
            exc,
            extra={"device_id": inverter_id},
        )
        return ResultadoMapeamento(
            desfecho=Desfecho.FALHA_INFRA,
            estado=EstadoMapeamento.FALHA_PUBLICACAO,
            inverter_id=inverter_id,
            resposta=resposta,
        )

    logger.info(
        "[Mapping] inverter_id=%s → address=%s",
        inverter_id,
        endereco,
        extra={"device_id": inverter_id},
    )

    return ResultadoMapeamento(
        desfecho=Desfecho.PROCESSADA,
        estado=EstadoMapeamento.PUBLICADO,
        inverter_id=inverter_id,
        resposta=resposta,
    )
