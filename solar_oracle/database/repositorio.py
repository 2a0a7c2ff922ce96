"""
repositorio.py

Camada de acesso a dados (Repository) para o cadastro de endereços.

Objetivos:
- Isolar as consultas à tabela 'userData'.
- Evitar espalhar 'criar_sessao()' por todo o código.
- Facilitar testes unitários (o resolvedor só depende de buscar_endereco).
"""

from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from solar_oracle.database.modelagem_banco import DadosUsuario, criar_sessao
from solar_oracle.utils.logger import get_logger

logger = get_logger(__name__)


class EnderecoRepositorio:
    """
    Repositório somente-leitura sobre DadosUsuario.
    Cada chamada abre e fecha sua própria sessão.
    """

    def buscar_endereco(self, inverter_id: str) -> str:
        """
        Retorna o endereço cadastrado para o inverter_id.

        Retorna "" quando:
            - não existe linha para o inverter_id;
            - o endereço está nulo;
            - a consulta falha (conexão, SQL, etc.).

        Os dois primeiros casos geram warning; falha de consulta gera error
        com traceback.
        """
        sessao = criar_sessao()
        try:
            stmt = (
                select(DadosUsuario.address)
                .where(DadosUsuario.inverter_id == inverter_id)
                .limit(1)
            )
            endereco = sessao.execute(stmt).scalar()
        except SQLAlchemyError:
            logger.exception(
                "[Mapping] Erro na consulta ao banco para inverter_id=%s",
                inverter_id,
            )
            return ""
        finally:
            sessao.close()

        if endereco is None:
            logger.warning(
                "[Mapping] Consulta sem resultado para inverter_id=%s",
                inverter_id,
            )
            return ""

        return endereco

    def listar_mapeamentos(self, limite: int = 100) -> List[DadosUsuario]:
        """
        Retorna até 'limite' linhas do cadastro, ordenadas por inverter_id.
        """
        sessao = criar_sessao()
        try:
            stmt = (
                select(DadosUsuario)
                .order_by(DadosUsuario.inverter_id.asc())
                .limit(limite)
            )
            return list(sessao.execute(stmt).scalars().all())
        finally:
            sessao.close()
