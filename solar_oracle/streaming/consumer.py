"""
consumer.py

Consumer Kafka do solar-oracle.

Responsável por:
- Conectar ao Kafka e assinar os tópicos de telemetria e de pedidos
  de mapeamento.
- Encaminhar cada mensagem ao handler do seu tópico.
- Decidir o commit de offset a partir do Desfecho devolvido:
    - PROCESSADA / IGNORADA: commit e segue;
    - FALHA_INFRA: volta o offset da partição e espera (backoff
      exponencial) antes de reler a mesma mensagem.
"""

import time
from typing import Callable, Dict

from kafka import KafkaConsumer, TopicPartition
from kafka.errors import NoBrokersAvailable

from solar_oracle.config.settings import settings
from solar_oracle.core.irradiancia import ValidadorIrradiancia
from solar_oracle.core.mapeamento import resolver_e_publicar
from solar_oracle.core.schemas import Desfecho
from solar_oracle.database.repositorio import EnderecoRepositorio
from solar_oracle.streaming.publisher import KafkaMessagePublisher, criar_produtor_kafka
from solar_oracle.utils.logger import get_logger

logger = get_logger(__name__)

Handler = Callable[[bytes], Desfecho]


class ControleBackoff:
    """
    Backoff exponencial entre releituras de mensagens com falha de
    infraestrutura. Volta ao valor base após qualquer sucesso.
    """

    def __init__(self, base: float, maximo: float):
        self.base = base
        self.maximo = maximo
        self.atual = base

    def proximo(self) -> float:
        delay = self.atual
        self.atual = min(self.atual * 2, self.maximo)
        return delay

    def resetar(self):
        self.atual = self.base


def criar_roteador(
    validador: ValidadorIrradiancia,
    repositorio: EnderecoRepositorio,
    publisher: KafkaMessagePublisher,
) -> Dict[str, Handler]:
    """
    Mapeia cada tópico assinado para a função que processa suas mensagens.
    """
    return {
        settings.KAFKA_TOPICO_TELEMETRIA: lambda raw: validador.validar(raw).desfecho,
        settings.KAFKA_TOPICO_PEDIDOS_MAPEAMENTO: lambda raw: resolver_e_publicar(
            raw, repositorio, publisher
        ).desfecho,
    }


def processar_mensagem(mensagem, roteador: Dict[str, Handler]) -> Desfecho:
    """
    Encaminha uma mensagem ao handler do seu tópico.

    Mensagens de tópicos sem handler são ignoradas.
    """
    handler = roteador.get(mensagem.topic)
    if handler is None:
        logger.warning("Mensagem recebida em tópico sem handler: %s", mensagem.topic)
        return Desfecho.IGNORADA

    if mensagem.value is None:
        logger.warning(
            "Mensagem sem payload em %s [partição %s, offset %s]",
            mensagem.topic,
            mensagem.partition,
            mensagem.offset,
        )
        return Desfecho.IGNORADA

    logger.debug(
        "Mensagem recebida em %s [partição %s, offset %s]",
        mensagem.topic,
        mensagem.partition,
        mensagem.offset,
    )
    return handler(mensagem.value)


def consumir(
    consumer: KafkaConsumer,
    roteador: Dict[str, Handler],
    backoff: ControleBackoff,
    dormir: Callable[[float], None] = time.sleep,
):
    """
    Loop principal: processa mensagens até o iterador do consumer terminar.
    """
    for mensagem in consumer:
        desfecho = processar_mensagem(mensagem, roteador)

        if desfecho is Desfecho.FALHA_INFRA:
            delay = backoff.proximo()
            logger.error(
                "Falha de infraestrutura em %s [partição %s, offset %s]. Relendo em %.2fs.",
                mensagem.topic,
                mensagem.partition,
                mensagem.offset,
                delay,
            )
            consumer.seek(
                TopicPartition(mensagem.topic, mensagem.partition),
                mensagem.offset,
            )
            dormir(delay)
            continue

        backoff.resetar()
        consumer.commit()


def _conectar_com_retries() -> KafkaConsumer:
    """
    Cria o KafkaConsumer com retries e backoff exponencial.
    """
    delay = settings.KAFKA_CONNECT_BACKOFF_BASE
    max_retries = settings.KAFKA_CONNECT_MAX_RETRIES

    for attempt in range(1, max_retries + 1):
        try:
            return KafkaConsumer(
                settings.KAFKA_TOPICO_TELEMETRIA,
                settings.KAFKA_TOPICO_PEDIDOS_MAPEAMENTO,
                bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
                group_id=settings.KAFKA_GROUP_ID,
                enable_auto_commit=False,
                auto_offset_reset="earliest",
            )
        except NoBrokersAvailable:
            if attempt >= max_retries:
                logger.exception(
                    "Falha ao conectar ao Kafka após %s tentativas.",
                    attempt,
                )
                raise

            logger.warning(
                "Kafka indisponível (tentativa %s/%s). Retentando em %.2fs.",
                attempt,
                max_retries,
                delay,
            )
            time.sleep(delay)
            delay *= 2


def run_consumer():
    """
    Função principal do consumer.

    - cria validador, repositório e publisher (compartilhados por todas
      as mensagens);
    - conecta ao Kafka e entra no loop.
    """

    validador = ValidadorIrradiancia()
    repositorio = EnderecoRepositorio()
    producer = criar_produtor_kafka()
    publisher = KafkaMessagePublisher(producer, settings.KAFKA_TOPICO_RESPOSTAS_MAPEAMENTO)

    roteador = criar_roteador(validador, repositorio, publisher)
    consumer = _conectar_com_retries()

    logger.info(
        "Iniciando consumer. Brokers=%s, Tópicos=%s, Respostas=%s, Limiar=%.1f",
        settings.KAFKA_BOOTSTRAP_SERVERS,
        list(roteador),
        settings.KAFKA_TOPICO_RESPOSTAS_MAPEAMENTO,
        validador.limiar,
    )

    backoff = ControleBackoff(
        base=settings.KAFKA_CONNECT_BACKOFF_BASE,
        maximo=settings.CONSUMER_BACKOFF_MAX_SECONDS,
    )

    try:
        consumir(consumer, roteador, backoff)
    except KeyboardInterrupt:
        logger.info("Encerrando consumer (Ctrl+C).")
    finally:
        consumer.close()
        producer.flush()
        producer.close()


if __name__ == "__main__":
    run_consumer()
