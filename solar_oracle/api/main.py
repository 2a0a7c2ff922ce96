"""
main.py

API HTTP do solar-oracle usando FastAPI.

Rotas principais:
- GET  /ping
- GET  /mapeamentos
- GET  /mapeamentos/{inverter_id}
- POST /irradiancia/validar
"""

from typing import List

from fastapi import FastAPI, HTTPException, Query

from solar_oracle.api.schemas import MapeamentoOut
from solar_oracle.core.irradiancia import ValidadorIrradiancia
from solar_oracle.core.schemas import RespostaMapeamento, ResultadoValidacao, TelemetriaSolar
from solar_oracle.database.repositorio import EnderecoRepositorio

app = FastAPI(
    title="solar-oracle API",
    version="0.1.0",
    description="Consulta de mapeamentos de inversores e validação de irradiância.",
)

validador = ValidadorIrradiancia()


def get_repositorio() -> EnderecoRepositorio:
    return EnderecoRepositorio()


# ------------------- HEALTHCHECK ------------------- #


@app.get("/ping")
def ping():
    """
    Endpoint simples para healthcheck.
    """
    return {"status": "ok"}


# ------------------- MAPEAMENTOS ------------------- #


@app.get(
    "/mapeamentos",
    response_model=List[MapeamentoOut],
    summary="Lista inversores cadastrados",
)
def listar_mapeamentos(
    limite: int = Query(100, ge=1, le=1000, description="Quantidade de linhas"),
):
    repo = get_repositorio()
    return repo.listar_mapeamentos(limite=limite)


@app.get(
    "/mapeamentos/{inverter_id}",
    response_model=RespostaMapeamento,
    summary="Resolve o endereço de um inversor",
)
def buscar_mapeamento(inverter_id: str):
    """
    Mesma regra do consumer: endereço vazio conta como não encontrado.
    """
    repo = get_repositorio()
    endereco = repo.buscar_endereco(inverter_id)
    if endereco == "":
        raise HTTPException(
            status_code=404,
            detail=f"Nenhum endereço encontrado para inverter_id={inverter_id}",
        )
    return RespostaMapeamento(inverter_id=inverter_id, address=endereco)


# ------------------- IRRADIÂNCIA ------------------- #


@app.post(
    "/irradiancia/validar",
    response_model=ResultadoValidacao,
    summary="Classifica uma leitura de irradiância",
)
def validar_irradiancia(telemetria: TelemetriaSolar):
    return validador.avaliar(telemetria)
