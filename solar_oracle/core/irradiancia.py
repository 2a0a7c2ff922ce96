"""
irradiancia.py

Validação de leituras de irradiância.

Para cada telemetria recebida:
- obtém a irradiância esperada a partir do estimador configurado;
- calcula Δ = |esperado - reportado|;
- classifica a leitura como válida (Δ <= limiar) ou suspeita;
- registra o resultado em log.

Nenhuma mensagem de saída é produzida.
"""

from typing import Optional, Protocol, Union

from solar_oracle.config.settings import settings
from solar_oracle.core.erros import ErroDecodificacao, ErroEstimativa
from solar_oracle.core.schemas import (
    Desfecho,
    ResultadoValidacao,
    TelemetriaSolar,
    Veredito,
    decodificar_mensagem,
)
from solar_oracle.utils.logger import get_logger

logger = get_logger(__name__)


class EstimadorIrradiancia(Protocol):
    """
    Fonte da irradiância esperada para um ponto e instante.

    Implementações reais (modelo de posição solar, API de clima) devem
    levantar ErroEstimativa quando não conseguirem responder. Qualquer
    outra exceção também é contida pelo validador e registrada com
    traceback; em ambos os casos o desfecho é FALHA_INFRA.
    """

    def estimar(self, latitude: float, longitude: float, timestamp: str) -> float:
        ...


class EstimadorConstante:
    """
    Estimador provisório: sempre devolve o mesmo valor,
    independente de posição e horário.
    """

    def __init__(self, valor: float = 900.0):
        self.valor = valor

    def estimar(self, latitude: float, longitude: float, timestamp: str) -> float:
        return self.valor


def classificar_irradiancia(delta: float, limiar: float) -> Veredito:
    """
    Δ menor ou igual ao limiar é válido; acima disso, suspeito.
    """
    if delta <= limiar:
        return Veredito.VALIDA
    return Veredito.SUSPEITA


class ValidadorIrradiancia:
    """
    Handler de telemetria. Sem estado mutável: a mesma instância pode ser
    usada por vários consumidores em paralelo.
    """

    def __init__(
        self,
        estimador: Optional[EstimadorIrradiancia] = None,
        limiar: Optional[float] = None,
    ):
        if estimador is None:
            estimador = EstimadorConstante(settings.IRRADIANCIA_ESPERADA_PADRAO)
        if limiar is None:
            limiar = settings.LIMIAR_IRRADIANCIA
        self.estimador = estimador
        self.limiar = limiar

    @staticmethod
    def _falha_estimativa(telemetria: TelemetriaSolar) -> ResultadoValidacao:
        return ResultadoValidacao(
            desfecho=Desfecho.FALHA_INFRA,
            device_id=telemetria.device_id,
            reported=telemetria.irradiance,
        )

    def avaliar(self, telemetria: TelemetriaSolar) -> ResultadoValidacao:
        """
        Avalia uma telemetria já decodificada.
        """
        try:
            esperado = self.estimador.estimar(
                telemetria.latitude,
                telemetria.longitude,
                telemetria.timestamp,
            )
        except ErroEstimativa as exc:
            logger.error(
                "Falha ao estimar irradiância para Dispositivo=%s: %s",
                telemetria.device_id,
                exc,
                extra={"device_id": telemetria.device_id},
            )
            return self._falha_estimativa(telemetria)
        except Exception:
            # Erro não previsto pelo estimador (cliente HTTP, bug etc.)
            logger.exception(
                "Erro inesperado no estimador para Dispositivo=%s",
                telemetria.device_id,
                extra={"device_id": telemetria.device_id},
            )
            return self._falha_estimativa(telemetria)

        delta = abs(esperado - telemetria.irradiance)

        logger.info(
            "Dispositivo=%s, Reportado=%.1f, Esperado=%.1f, Δ=%.1f",
            telemetria.device_id,
            telemetria.irradiance,
            esperado,
            delta,
            extra={"device_id": telemetria.device_id},
        )

        veredito = classificar_irradiancia(delta, self.limiar)
        if veredito is Veredito.VALIDA:
            logger.info(
                "Irradiância válida (Dispositivo=%s).",
                telemetria.device_id,
                extra={"device_id": telemetria.device_id},
            )
        else:
            logger.warning(
                "Dados suspeitos (Dispositivo=%s).",
                telemetria.device_id,
                extra={"device_id": telemetria.device_id},
            )

        return ResultadoValidacao(
            desfecho=Desfecho.PROCESSADA,
            device_id=telemetria.device_id,
            reported=telemetria.irradiance,
            expected=esperado,
            delta=delta,
            veredito=veredito,
        )

    def validar(self, raw: Union[bytes, str]) -> ResultadoValidacao:
        """
        Ponto de entrada do consumer: decodifica o payload bruto e avalia.

        Payload inválido gera apenas um warning e o desfecho IGNORADA;
        o estimador não é consultado.
        """
        try:
            telemetria = decodificar_mensagem(raw, TelemetriaSolar)
        except ErroDecodificacao as exc:
            logger.warning("Erro ao decodificar telemetria: %s", exc)
            return ResultadoValidacao(desfecho=Desfecho.IGNORADA)

        return self.avaliar(telemetria)
