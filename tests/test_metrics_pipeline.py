from datetime import date

from core.filters import DashboardFilters
from core.metrics_pipeline import compute_kanban

TODAY = date(2025, 1, 10)


def _columns(payload):
    return {col["stage"]: col for col in payload["columns"]}


def test_kanban_columns_follow_stage_order(make_record, hundred_records):
    payload = compute_kanban(DashboardFilters(), {"filtered_records": hundred_records}, today=TODAY)
    assert [col["stage"] for col in payload["columns"]] == ["Prospecting", "Responded", "Scheduled", "Closed"]
    assert [col["count"] for col in payload["columns"]] == [60, 30, 10, 0]
    assert payload["today"] == "10/01/2025"


def test_prospecting_cards(make_record):
    records = [
        make_record({"Próximo Touch": "01/01/2025"}, touches=["LinkedIn convite"]),
        make_record(touches=[f"Email {n}" for n in range(1, 8)]),
    ]
    cards = _columns(compute_kanban(DashboardFilters(), {"filtered_records": records}, today=TODAY))["Prospecting"]["cards"]

    late = cards[0]
    assert late["name"] == "Ana Souza"
    assert late["company"] == "Acme"
    assert late["last_touch"] == "Touch 1"
    assert late["last_channel"] == "linkedin"
    assert late["pending"] == {"label": "Touch 2", "num": 2, "date_str": "01/01/2025", "date": "01/01/2025"}
    assert late["is_late"] is True
    assert late["is_exhausted"] is False

    exhausted = cards[1]
    assert exhausted["pending"] is None
    assert exhausted["is_exhausted"] is True
    assert exhausted["is_late"] is False
    assert exhausted["last_channel"] == "email"


def test_responded_card_snippet(make_record):
    long_reply = "Obrigado pelo contato, vamos conversar na semana que vem sobre a proposta enviada."
    records = [make_record({"Resposta": long_reply, "Próximo Touch": "01/01/2020"}, touches=["LinkedIn"])]
    card = _columns(compute_kanban(DashboardFilters(), {"filtered_records": records}, today=TODAY))["Responded"]["cards"][0]
    assert card["response_snippet"] == long_reply[:60] + "..."
    assert card["pending"] is None
    assert card["is_late"] is False
    assert card["caption"] == "RESPONDIDO"
