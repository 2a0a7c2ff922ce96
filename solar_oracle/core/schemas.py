"""
schemas.py

Schemas Pydantic das mensagens trocadas via Kafka e dos resultados
devolvidos pelos handlers.
Compatível com Pydantic v2.
"""

from enum import Enum
from typing import Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from solar_oracle.core.erros import ErroDecodificacao

M = TypeVar("M", bound=BaseModel)


class TelemetriaSolar(BaseModel):
    """
    Leitura de irradiância reportada por um inversor.

    Compatível com o payload:

        {
          "device_id": "INV001",
          "latitude": 37.5,
          "longitude": 127.0,
          "timestamp": "2024-01-01T12:00:00Z",
          "irradiance": 1000.0
        }
    """

    # NaN/Infinity não são JSON válido: tratados como erro de decodificação
    model_config = ConfigDict(allow_inf_nan=False)

    device_id: str
    latitude: float
    longitude: float
    timestamp: str
    irradiance: float


class PedidoMapeamento(BaseModel):
    """
    Pedido de mapeamento. `device_id` é, na prática, o inverter_id.

        {"device_id": "INV001"}
    """

    device_id: str


class RespostaMapeamento(BaseModel):
    """
    Resposta publicada no tópico de mapeamentos:

        {"inverter_id": "INV001", "address": "123 Main St"}
    """

    inverter_id: str
    address: str


class Desfecho(str, Enum):
    """
    Resultado do processamento de uma mensagem, do ponto de vista do
    loop de consumo.

    - PROCESSADA: sucesso, pode commitar.
    - IGNORADA: mensagem inválida ou sem correspondência; commitar e seguir.
    - FALHA_INFRA: banco/broker/estimador indisponível; não commitar.
    """

    PROCESSADA = "processada"
    IGNORADA = "ignorada"
    FALHA_INFRA = "falha_infra"


class Veredito(str, Enum):
    VALIDA = "valid"
    SUSPEITA = "suspicious"


class ResultadoValidacao(BaseModel):
    desfecho: Desfecho
    device_id: Optional[str] = None
    reported: Optional[float] = None
    expected: Optional[float] = None
    delta: Optional[float] = None
    veredito: Optional[Veredito] = None


class EstadoMapeamento(str, Enum):
    DECODIFICACAO_INVALIDA = "decodificacao_invalida"
    NAO_ENCONTRADO = "nao_encontrado"
    PUBLICADO = "publicado"
    FALHA_PUBLICACAO = "falha_publicacao"


class ResultadoMapeamento(BaseModel):
    desfecho: Desfecho
    estado: EstadoMapeamento
    inverter_id: Optional[str] = None
    resposta: Optional[RespostaMapeamento] = None


def decodificar_mensagem(raw: Union[bytes, str], modelo: Type[M]) -> M:
    """
    Decodifica o payload bruto de uma mensagem para o modelo informado.

    JSON inválido, payload que não é objeto, campos ausentes ou tipos
    incompatíveis resultam todos em ErroDecodificacao.
    """
    try:
        return modelo.model_validate_json(raw)
    except (ValidationError, UnicodeDecodeError) as exc:
        raise ErroDecodificacao(str(exc)) from exc
