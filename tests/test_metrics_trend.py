from core.filters import DashboardFilters
from core.metrics_trend import TrendPoint, compute_cumulative_series, compute_trend


def test_cumulative_series(make_record):
    records = [
        make_record({"Data Conexão": "05/03/2024"}),
        make_record({"Data Conexão": "05/03/2024"}),
        make_record({"Data Conexão": "01/02/2024"}),
        make_record({"Data de Resposta": "10/03/2024", "Resposta": "Oi", "Resultado": "Agendado"}),
        # response date without a response text opens the bucket but counts nothing
        make_record({"Data de Resposta": "12/03/2024"}),
    ]
    assert compute_cumulative_series(records) == [
        TrendPoint("01/02", 1, 0, 0),
        TrendPoint("05/03", 3, 0, 0),
        TrendPoint("10/03", 3, 1, 1),
        TrendPoint("12/03", 3, 1, 1),
    ]


def test_buckets_sort_by_month_then_day(make_record):
    records = [
        make_record({"Data Conexão": "02/03/2024"}),
        make_record({"Data Conexão": "10/02/2024"}),
    ]
    labels = [p.bucket_label for p in compute_cumulative_series(records)]
    assert labels == ["10/02", "02/03"]


def test_year_is_ignored_when_sorting(make_record):
    records = [
        make_record({"Data Conexão": "20/12/2024"}),
        make_record({"Data Conexão": "15/01/2025"}),
    ]
    labels = [p.bucket_label for p in compute_cumulative_series(records)]
    assert labels == ["15/01", "20/12"]


def test_same_day_different_years_share_a_bucket(make_record):
    records = [
        make_record({"Data Conexão": "15/01/2024"}),
        make_record({"Data Conexão": "15/01/2025"}),
    ]
    assert compute_cumulative_series(records) == [TrendPoint("15/01", 2, 0, 0)]


def test_counters_never_decrease(make_record):
    records = [
        make_record({"Data Conexão": f"{day:02d}/0{month}/2024", "Data de Resposta": f"{day:02d}/0{month + 1}/2024", "Resposta": "ok"})
        for day in (3, 14, 27)
        for month in (1, 4, 7)
    ]
    points = compute_cumulative_series(records)
    for prev, cur in zip(points, points[1:]):
        assert cur.cumulative_connections >= prev.cumulative_connections
        assert cur.cumulative_responses >= prev.cumulative_responses
        assert cur.cumulative_meetings >= prev.cumulative_meetings
    assert points[-1].cumulative_connections == 9
    assert points[-1].cumulative_responses == 9


def test_unparseable_dates_are_skipped(make_record):
    assert compute_cumulative_series([make_record({"Data Conexão": "ontem"})]) == []


def test_compute_trend_payload(make_record):
    ctx = {"filtered_records": [make_record({"Data Conexão": "05/03/2024"})]}
    payload = compute_trend(DashboardFilters(), ctx)
    assert payload["series"] == [
        {"bucket_label": "05/03", "cumulative_connections": 1, "cumulative_responses": 0, "cumulative_meetings": 0}
    ]
    assert "cumulative_trend" in payload["charts"]
    assert compute_trend(DashboardFilters(), {})["charts"] == {}
