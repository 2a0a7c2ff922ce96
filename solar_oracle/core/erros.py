"""
erros.py

Exceções do solar-oracle. Nenhuma delas atravessa a fronteira dos
handlers: cada handler as converte em um Desfecho.
"""


class ErroSolarOracle(Exception):
    """Base de todas as exceções do projeto."""


class ErroDecodificacao(ErroSolarOracle):
    """Payload não corresponde ao schema esperado."""


class ErroEstimativa(ErroSolarOracle):
    """O estimador não conseguiu produzir a irradiância esperada."""


class ErroPublicacao(ErroSolarOracle):
    """Falha de transporte ao publicar uma mensagem."""
