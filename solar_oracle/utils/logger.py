"""
logger.py

Padroniza os logs do solar-oracle.

- Respeita `settings.LOG_LEVEL` e `settings.LOG_JSON`.
- Configura um único handler de console na raiz.
- Em JSON, cada linha leva o nome do serviço e, quando o registro vem de
  um handler de mensagens, o device_id (via `extra=`).
- Mantém o cliente Kafka em WARNING, exceto com LOG_LEVEL=DEBUG: o
  kafka-python registra cada fetch/heartbeat em INFO.
- Expõe `get_logger(name)` para uso nos módulos.
"""

import json
import logging
from typing import Any, Dict

from solar_oracle.config.settings import settings

SERVICE_NAME = "solar-oracle"

# Loggers de bibliotecas que poluem o console em INFO
LOGGERS_RUIDOSOS = ("kafka",)

_CONFIGURED = False


class JSONFormatter(logging.Formatter):
    """
    Formata cada registro como uma linha JSON.
    """

    def __init__(self, service: str = SERVICE_NAME):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "service": self.service,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "time": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
        }
        device_id = getattr(record, "device_id", None)
        if device_id is not None:
            payload["device_id"] = device_id
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        # ensure_ascii=False preserva "Δ", "→" e acentos nas mensagens
        return json.dumps(payload, ensure_ascii=False)


def _silenciar_bibliotecas(nivel_raiz: str) -> None:
    nivel = logging.DEBUG if nivel_raiz == "DEBUG" else logging.WARNING
    for nome in LOGGERS_RUIDOSOS:
        logging.getLogger(nome).setLevel(nivel)


def _configure_logging() -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return

    root = logging.getLogger()
    root.setLevel(settings.LOG_LEVEL)

    handler = logging.StreamHandler()

    if settings.LOG_JSON:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            fmt=f"%(asctime)s [%(levelname)s] {SERVICE_NAME} %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    handler.setFormatter(formatter)

    root.handlers.clear()
    root.addHandler(handler)

    _silenciar_bibliotecas(settings.LOG_LEVEL)

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """
    Retorna um logger configurado.
    """
    if not _CONFIGURED:
        _configure_logging()
    return logging.getLogger(name)
