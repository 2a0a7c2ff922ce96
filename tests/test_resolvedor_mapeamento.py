"""
Testes para resolver_e_publicar.

Objetivo:
- Garantir que um pedido com endereço cadastrado gera exatamente uma
  publicação com chave = device_id.
- Garantir que endereço vazio nunca gera publicação.
- Garantir que payload inválido não chega ao banco nem ao broker.
- Garantir que falha de publicação não derruba o fluxo.
"""

import json
import logging

import pytest

from solar_oracle.core.erros import ErroPublicacao
from solar_oracle.core.mapeamento import resolver_e_publicar
from solar_oracle.core.schemas import Desfecho, EstadoMapeamento
from solar_oracle.database.repositorio import EnderecoRepositorio


class StoreFalso:
    def __init__(self, enderecos=None):
        self.enderecos = enderecos or {}
        self.consultas = []

    def buscar_endereco(self, inverter_id):
        self.consultas.append(inverter_id)
        return self.enderecos.get(inverter_id, "")


class PublisherFalso:
    def __init__(self, erro=None):
        self.erro = erro
        self.mensagens = []

    def publicar(self, chave, valor):
        if self.erro is not None:
            raise self.erro
        self.mensagens.append((chave, valor))


def test_pedido_com_endereco_publica_resposta(caplog):
    store = StoreFalso({"INV001": "123 Main St"})
    publisher = PublisherFalso()

    with caplog.at_level(logging.INFO):
        resultado = resolver_e_publicar(b'{"device_id":"INV001"}', store, publisher)

    assert resultado.desfecho is Desfecho.PROCESSADA
    assert resultado.estado is EstadoMapeamento.PUBLICADO

    assert len(publisher.mensagens) == 1
    chave, valor = publisher.mensagens[0]
    assert chave == b"INV001"
    assert valor == b'{"inverter_id":"INV001","address":"123 Main St"}'
    assert json.loads(valor) == {"inverter_id": "INV001", "address": "123 Main St"}

    assert any(
        r.getMessage() == "[Mapping] inverter_id=INV001 → address=123 Main St"
        for r in caplog.records
    )


def test_pedido_sem_endereco_nao_publica(caplog):
    store = StoreFalso()
    publisher = PublisherFalso()

    resultado = resolver_e_publicar(b'{"device_id":"INV404"}', store, publisher)

    assert resultado.desfecho is Desfecho.IGNORADA
    assert resultado.estado is EstadoMapeamento.NAO_ENCONTRADO
    assert publisher.mensagens == []

    nao_encontrados = [
        r for r in caplog.records if "Nenhum endereço encontrado" in r.getMessage()
    ]
    assert len(nao_encontrados) == 1
    assert "inverter_id=INV404" in nao_encontrados[0].getMessage()


@pytest.mark.parametrize(
    "raw",
    [
        b"{nao e json}",
        b'"INV001"',
        b"{}",
        b'{"device_id": 17}',
    ],
)
def test_payload_invalido_nao_consulta_nem_publica(raw):
    store = StoreFalso({"INV001": "123 Main St"})
    publisher = PublisherFalso()

    resultado = resolver_e_publicar(raw, store, publisher)

    assert resultado.desfecho is Desfecho.IGNORADA
    assert resultado.estado is EstadoMapeamento.DECODIFICACAO_INVALIDA
    assert store.consultas == []
    assert publisher.mensagens == []


def test_falha_de_publicacao_e_registrada_sem_excecao(caplog):
    store = StoreFalso({"INV001": "123 Main St"})
    publisher = PublisherFalso(erro=ErroPublicacao("broker indisponível"))

    resultado = resolver_e_publicar(b'{"device_id":"INV001"}', store, publisher)

    assert resultado.desfecho is Desfecho.FALHA_INFRA
    assert resultado.estado is EstadoMapeamento.FALHA_PUBLICACAO
    assert resultado.resposta.address == "123 Main St"
    assert any(
        r.levelno == logging.ERROR and "Erro ao publicar" in r.getMessage()
        for r in caplog.records
    )


def test_fluxo_completo_com_repositorio(cadastrar):
    cadastrar("INV001", "123 Main St")
    publisher = PublisherFalso()

    resultado = resolver_e_publicar(
        b'{"device_id":"INV001"}', EnderecoRepositorio(), publisher
    )

    assert resultado.desfecho is Desfecho.PROCESSADA
    assert publisher.mensagens == [
        (b"INV001", b'{"inverter_id":"INV001","address":"123 Main St"}')
    ]


def test_fluxo_completo_sem_linha_no_cadastro(caplog):
    publisher = PublisherFalso()

    resultado = resolver_e_publicar(
        b'{"device_id":"INV999"}', EnderecoRepositorio(), publisher
    )

    assert resultado.estado is EstadoMapeamento.NAO_ENCONTRADO
    assert publisher.mensagens == []
    nao_encontrados = [
        r for r in caplog.records if "Nenhum endereço encontrado" in r.getMessage()
    ]
    assert len(nao_encontrados) == 1
