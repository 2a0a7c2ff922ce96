"""
Testes da API HTTP (FastAPI TestClient sobre o banco de teste).
"""

from fastapi.testclient import TestClient

from solar_oracle.api.main import app

client = TestClient(app)


def test_ping():
    resposta = client.get("/ping")

    assert resposta.status_code == 200
    assert resposta.json() == {"status": "ok"}


def test_buscar_mapeamento_cadastrado(cadastrar):
    cadastrar("INV001", "123 Main St")

    resposta = client.get("/mapeamentos/INV001")

    assert resposta.status_code == 200
    assert resposta.json() == {"inverter_id": "INV001", "address": "123 Main St"}


def test_buscar_mapeamento_inexistente_retorna_404():
    resposta = client.get("/mapeamentos/INV404")

    assert resposta.status_code == 404


def test_listar_mapeamentos(cadastrar):
    cadastrar("INV002", "Rua B, 2")
    cadastrar("INV001", "Rua A, 1")

    resposta = client.get("/mapeamentos", params={"limite": 10})

    assert resposta.status_code == 200
    assert resposta.json() == [
        {"inverter_id": "INV001", "address": "Rua A, 1"},
        {"inverter_id": "INV002", "address": "Rua B, 2"},
    ]


def test_listar_mapeamentos_limite_invalido():
    resposta = client.get("/mapeamentos", params={"limite": 0})

    assert resposta.status_code == 422


def test_validar_irradiancia_suspeita():
    resposta = client.post(
        "/irradiancia/validar",
        json={
            "device_id": "INV001",
            "latitude": 37.5,
            "longitude": 127.0,
            "timestamp": "2024-01-01T12:00:00Z",
            "irradiance": 500.0,
        },
    )

    assert resposta.status_code == 200
    corpo = resposta.json()
    assert corpo["desfecho"] == "processada"
    assert corpo["veredito"] == "suspicious"
    assert corpo["expected"] == 900.0
    assert corpo["delta"] == 400.0
