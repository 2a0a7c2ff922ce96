"""
conftest.py

Configuração de testes para o projeto solar-oracle.

Aqui:
- Criamos um banco SQLite em memória para os testes.
- Reconfiguramos o engine e o SessionLocal do módulo modelagem_banco
  para usar esse banco de teste.
- Criamos as tabelas antes dos testes rodarem e limpamos o cadastro
  entre um teste e outro.
"""

import pytest
from sqlalchemy import create_engine, delete
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from solar_oracle.database import modelagem_banco as db


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """
    Cria um engine SQLite em memória e aponta o módulo modelagem_banco
    para ele.

    StaticPool mantém uma única conexão, de modo que o TestClient do
    FastAPI (que roda as rotas em outra thread) enxerga as mesmas tabelas.
    """

    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    db.engine = engine
    db.SessionLocal = sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
    )

    db.Base.metadata.create_all(engine)

    yield

    engine.dispose()


@pytest.fixture(autouse=True)
def limpar_cadastro():
    """
    Garante que cada teste começa com a tabela userData vazia.
    """
    yield

    sessao = db.criar_sessao()
    try:
        sessao.execute(delete(db.DadosUsuario))
        sessao.commit()
    finally:
        sessao.close()


@pytest.fixture
def cadastrar():
    """
    Insere linhas em userData: cadastrar("INV001", "123 Main St").
    """

    def _cadastrar(inverter_id, address):
        sessao = db.criar_sessao()
        try:
            sessao.add(db.DadosUsuario(inverter_id=inverter_id, address=address))
            sessao.commit()
        finally:
            sessao.close()

    return _cadastrar
