"""
publisher.py

Publicação no Kafka.

Responsável por:
- Criar o KafkaProducer com retries e backoff exponencial na conexão.
- Adaptar o producer à interface MessagePublisher usada pelo resolvedor
  de mapeamentos.
"""

import time
from typing import Optional

from kafka import KafkaProducer
from kafka.errors import KafkaError, NoBrokersAvailable

from solar_oracle.config.settings import settings
from solar_oracle.core.erros import ErroPublicacao
from solar_oracle.utils.logger import get_logger

logger = get_logger(__name__)


class KafkaMessagePublisher:
    """
    Publica mensagens já serializadas (bytes) em um tópico fixo.

    O KafkaProducer é thread-safe; uma única instância pode ser
    compartilhada por todo o processo.
    """

    def __init__(
        self,
        producer: KafkaProducer,
        topico: str,
        timeout: Optional[float] = None,
    ):
        self.producer = producer
        self.topico = topico
        self.timeout = (
            timeout if timeout is not None else settings.KAFKA_PUBLISH_TIMEOUT_SECONDS
        )

    def publicar(self, chave: bytes, valor: bytes) -> None:
        """
        Envia a mensagem e aguarda a confirmação do broker.

        Qualquer KafkaError (inclusive timeout) vira ErroPublicacao.
        """
        try:
            futuro = self.producer.send(self.topico, key=chave, value=valor)
            metadata = futuro.get(timeout=self.timeout)
        except KafkaError as exc:
            raise ErroPublicacao(
                f"falha ao publicar em {self.topico}: {exc}"
            ) from exc

        logger.debug(
            "Publicado em %s [partição %s, offset %s]",
            metadata.topic,
            metadata.partition,
            metadata.offset,
        )


def criar_produtor_kafka() -> KafkaProducer:
    """
    Cria o KafkaProducer, tentando novamente com backoff exponencial
    enquanto nenhum broker estiver disponível.
    """
    delay = settings.KAFKA_CONNECT_BACKOFF_BASE
    max_retries = settings.KAFKA_CONNECT_MAX_RETRIES

    for attempt in range(1, max_retries + 1):
        try:
            return KafkaProducer(bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS)
        except NoBrokersAvailable:
            if attempt >= max_retries:
                logger.exception(
                    "Falha ao conectar producer ao Kafka após %s tentativas.",
                    attempt,
                )
                raise

            logger.warning(
                "Kafka indisponível para o producer (tentativa %s/%s). Retentando em %.2fs.",
                attempt,
                max_retries,
                delay,
            )
            time.sleep(delay)
            delay *= 2
