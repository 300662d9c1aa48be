from __future__ import annotations

from typing import Any, Mapping

import pandas as pd


# Spreadsheet header row (source language).
NOME = "Nome"
SOBRENOME = "Sobrenome"
EMPRESA = "Empresa"
CARGO = "Cargo"
ORIGEM = "Origem"
DATA_CONEXAO = "Data Conexão"
DATA_RESPOSTA = "Data de Resposta"
RESPOSTA = "Resposta"
RESULTADO = "Resultado"
TOUCH_VENCEDOR = "Touch Vencedor"

TOUCH_SLOTS = tuple(f"Touch {n}" for n in range(1, 8))


def as_text(value: Any) -> str:
    """Trimmed string form of a cell; missing, empty and falsy values become ''."""
    if value is None:
        return ""
    if not isinstance(value, str):
        try:
            if pd.isna(value):
                return ""
        except (TypeError, ValueError):
            pass
    if not value:
        return ""
    if isinstance(value, float) and value.is_integer():
        # 45000.0 from a numeric column reads back as "45000"
        value = int(value)
    return str(value).strip()


def as_lower_text(value: Any) -> str:
    return as_text(value).lower()


def get_text(record: Mapping[str, Any], field: str) -> str:
    return as_text(record.get(field))


def get_lower(record: Mapping[str, Any], field: str) -> str:
    return as_lower_text(record.get(field))


def full_name(record: Mapping[str, Any]) -> str:
    return " ".join(p for p in (get_text(record, NOME), get_text(record, SOBRENOME)) if p)
