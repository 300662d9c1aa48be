from core.filters import DashboardFilters
from core.metrics_channels import channel_efficiency, channel_volume, compute_channels


def _as_dict(rows):
    return {row["channel"]: row["count"] for row in rows}


def test_volume_counts_every_sent_touch(make_record):
    records = [
        make_record(touches=["LinkedIn convite", "Email: apresentação", "[14:32, 02/02/2024] Oi", "Ligação"]),
        make_record(touches=["LinkedIn", "", "LinkedIn follow-up"]),
    ]
    volume = channel_volume(records)
    assert [row["channel"] for row in volume] == ["linkedin", "email", "whatsapp", "other"]
    assert _as_dict(volume) == {"linkedin": 3, "email": 1, "whatsapp": 1, "other": 1}


def test_efficiency_uses_last_touch_of_scheduled_contacts(make_record):
    records = [
        make_record({"Resultado": "Agendado"}, touches=["LinkedIn", "WhatsApp áudio"]),
        make_record({"Resultado": "Reunião agendada"}, touches=["Assunto: demo"]),
        make_record({"Resultado": "Agendado"}),
        make_record({"Resultado": "Perdido"}, touches=["LinkedIn"]),
        make_record({"Resposta": "Oi"}, touches=["LinkedIn"]),
    ]
    assert _as_dict(channel_efficiency(records)) == {"linkedin": 0, "email": 1, "whatsapp": 1, "other": 1}


def test_breakdowns_are_independent(make_record):
    records = [make_record({"Resultado": "Agendado"}, touches=["LinkedIn", "Email", "Email"])]
    assert _as_dict(channel_volume(records)) == {"linkedin": 1, "email": 2, "whatsapp": 0, "other": 0}
    assert _as_dict(channel_efficiency(records)) == {"linkedin": 0, "email": 1, "whatsapp": 0, "other": 0}


def test_compute_channels_payload(make_record):
    ctx = {"filtered_records": [make_record(touches=["LinkedIn"])]}
    payload = compute_channels(DashboardFilters(), ctx)
    assert _as_dict(payload["volume"])["linkedin"] == 1
    assert "channel_volume" in payload["charts"]
    # nothing scheduled yet, so no efficiency donut
    assert "channel_efficiency" not in payload["charts"]
