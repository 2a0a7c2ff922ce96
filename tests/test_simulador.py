"""
Testes do simulador: os payloads gerados precisam ser aceitos pelos handlers.
"""

import json
from unittest.mock import MagicMock

from solar_oracle.config.settings import settings
from solar_oracle.core.schemas import PedidoMapeamento, TelemetriaSolar
from solar_oracle.streaming.simulador import criar_inversores_simulados


def test_inversores_recebem_ids_sequenciais():
    inversores = criar_inversores_simulados(MagicMock())

    assert [i.device_id for i in inversores] == [
        "INV001",
        "INV002",
        "INV003",
        "INV004",
        "INV005",
    ]


def test_telemetria_gerada_respeita_o_schema():
    inversor = criar_inversores_simulados(MagicMock())[0]

    telemetria = TelemetriaSolar.model_validate(inversor.gerar_telemetria())

    assert telemetria.device_id == "INV001"
    assert 600.0 <= telemetria.irradiance <= 1200.0


def test_publicacoes_usam_device_id_como_chave():
    producer = MagicMock()
    inversor = criar_inversores_simulados(producer)[0]

    inversor.publicar_pedido_mapeamento()

    producer.send.assert_called_once()
    args, kwargs = producer.send.call_args
    assert args == (settings.KAFKA_TOPICO_PEDIDOS_MAPEAMENTO,)
    assert kwargs["key"] == b"INV001"
    assert PedidoMapeamento.model_validate(json.loads(kwargs["value"])).device_id == "INV001"
