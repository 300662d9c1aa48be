from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import pytest


def build_record(fields: Optional[Dict[str, Any]] = None, touches: Iterable[str] = ()) -> Dict[str, Any]:
    record: Dict[str, Any] = {"Nome": "Ana", "Sobrenome": "Souza", "Empresa": "Acme", "Cargo": "CTO"}
    for n, text in enumerate(touches, start=1):
        if text:
            record[f"Touch {n}"] = text
    record.update(fields or {})
    return record


@pytest.fixture
def make_record():
    return build_record


@pytest.fixture
def hundred_records():
    """100 contacts: 40 answered, 10 of those booked a meeting, 60 still being prospected."""
    records = []
    for i in range(100):
        fields: Dict[str, Any] = {"Nome": f"Contato {i}"}
        if i < 40:
            fields["Resposta"] = "Tenho interesse"
        if i < 10:
            fields["Resultado"] = "Agendado"
        records.append(build_record(fields, touches=["LinkedIn: convite"]))
    return records
