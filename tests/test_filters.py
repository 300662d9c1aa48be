from core.filters import DashboardFilters, apply_filters, filter_options, normalize_filters


def test_normalize_filters():
    assert normalize_filters(None) == DashboardFilters()
    assert normalize_filters({"company": " Acme ", "winning_touch": 3}) == DashboardFilters(company="Acme", winning_touch="3")


def test_apply_filters(make_record):
    records = [
        make_record({"Empresa": "Acme", "Origem": "Inbound", "Touch Vencedor": 3}),
        make_record({"Empresa": "Acme", "Origem": "Outbound"}),
        make_record({"Empresa": "Beta", "Origem": "Inbound"}),
    ]
    assert apply_filters(records, DashboardFilters()) == records
    assert apply_filters(records, DashboardFilters(company="Acme")) == records[:2]
    assert apply_filters(records, DashboardFilters(company="Acme", source="Inbound")) == records[:1]
    assert apply_filters(records, DashboardFilters(winning_touch="3")) == records[:1]
    assert apply_filters(records, DashboardFilters(company="Gamma")) == []


def test_filter_options(make_record):
    records = [
        make_record({"Empresa": "Beta", "Origem": "Inbound"}),
        make_record({"Empresa": "Acme", "Touch Vencedor": "Touch 2"}),
        make_record({"Empresa": "Acme", "Origem": " "}),
    ]
    assert filter_options(records) == {
        "company": ["Acme", "Beta"],
        "winning_touch": ["Touch 2"],
        "source": ["Inbound"],
    }
