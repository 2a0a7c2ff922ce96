"""
schemas.py

Modelos Pydantic usados nas respostas da API.
Independentes do modelo ORM (DadosUsuario), mas compatíveis
para conversão via from_attributes.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class MapeamentoOut(BaseModel):
    """
    Uma linha do cadastro inverter_id → endereço.
    """

    model_config = ConfigDict(from_attributes=True)

    inverter_id: str
    address: Optional[str] = None
