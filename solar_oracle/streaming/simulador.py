"""
simulador.py

Simulador Kafka do solar-oracle.

Responsável por:
- Simular inversores publicando leituras de irradiância no tópico de
  telemetria.
- Publicar, para cada inversor simulado, um pedido de mapeamento.

Os valores de irradiância são sorteados em torno do valor esperado
padrão, de forma que parte das leituras caia fora do limiar e apareça
como suspeita no consumer.
"""

import json
import random
import time
from datetime import datetime, timezone
from typing import List

from kafka import KafkaProducer
from kafka.errors import KafkaError

from solar_oracle.config.settings import settings
from solar_oracle.streaming.publisher import criar_produtor_kafka
from solar_oracle.utils.logger import get_logger

logger = get_logger(__name__)


class InversorSimulado:
    """
    Representa um inversor simulado.

    Cada instância:
    - possui um device_id próprio;
    - usa o producer compartilhado para publicar.
    """

    def __init__(self, device_id: str, producer: KafkaProducer):
        self.device_id = device_id
        self.producer = producer

    def gerar_telemetria(self) -> dict:
        """
        Gera uma leitura no formato de TelemetriaSolar.
        """
        esperado = settings.IRRADIANCIA_ESPERADA_PADRAO
        # ±2x o limiar: aproximadamente metade das leituras fica suspeita
        desvio = settings.LIMIAR_IRRADIANCIA * 2

        return {
            "device_id": self.device_id,
            "latitude": settings.SIMULATOR_LATITUDE,
            "longitude": settings.SIMULATOR_LONGITUDE,
            "timestamp": datetime.now(tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "irradiance": round(random.uniform(esperado - desvio, esperado + desvio), 1),
        }

    def _enviar(self, topico: str, payload: dict):
        try:
            self.producer.send(
                topico,
                key=self.device_id.encode("utf-8"),
                value=json.dumps(payload).encode("utf-8"),
            )
        except KafkaError:
            logger.exception("Falha ao publicar em %s (Dispositivo=%s).", topico, self.device_id)
            return
        logger.debug("Publicado em %s: %s", topico, payload)

    def publicar_telemetria(self):
        self._enviar(settings.KAFKA_TOPICO_TELEMETRIA, self.gerar_telemetria())

    def publicar_pedido_mapeamento(self):
        self._enviar(settings.KAFKA_TOPICO_PEDIDOS_MAPEAMENTO, {"device_id": self.device_id})


def criar_inversores_simulados(producer: KafkaProducer) -> List[InversorSimulado]:
    """
    Cria SIMULATOR_DEVICE_COUNT inversores com ids
    <SIMULATOR_DEVICE_PREFIX>001, <SIMULATOR_DEVICE_PREFIX>002, ...
    """
    return [
        InversorSimulado(f"{settings.SIMULATOR_DEVICE_PREFIX}{i:03d}", producer)
        for i in range(1, settings.SIMULATOR_DEVICE_COUNT + 1)
    ]


def run_simulator():
    """
    Publica uma rodada (telemetria + pedido de mapeamento por inversor)
    a cada SIMULATOR_INTERVAL_SECONDS segundos, até Ctrl+C.
    """

    producer = criar_produtor_kafka()
    inversores = criar_inversores_simulados(producer)

    intervalo = settings.SIMULATOR_INTERVAL_SECONDS

    logger.info(
        "Iniciando simulador com %s inversores, intervalo %ss.",
        len(inversores),
        intervalo,
    )

    try:
        while True:
            for inversor in inversores:
                inversor.publicar_telemetria()
                inversor.publicar_pedido_mapeamento()

            producer.flush()
            time.sleep(intervalo)

    except KeyboardInterrupt:
        logger.info("Encerrando simulador (Ctrl+C recebido).")
    finally:
        producer.close()


if __name__ == "__main__":
    run_simulator()
