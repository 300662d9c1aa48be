from core.filters import DashboardFilters
from core.metrics_goal import compute_goal, compute_goal_projection


def test_projection_from_history(hundred_records):
    p = compute_goal_projection(hundred_records, goal=20, touches_per_cycle=7, working_days=20)
    assert p["scheduled"] == 10
    assert p["remaining"] == 10
    assert p["responses_needed"] == 40
    assert p["contacts_needed"] == 100
    assert p["daily_new_contacts"] == 5
    assert p["total_touches"] == 350


def test_goal_already_met(hundred_records):
    p = compute_goal_projection(hundred_records, goal=5)
    assert p["remaining"] == 0
    assert p["responses_needed"] == 0
    assert p["contacts_needed"] == 0
    assert p["daily_new_contacts"] == 0


def test_zero_conversion_uses_multipliers(make_record):
    records = [make_record({"Resposta": "Oi"}), make_record()]
    p = compute_goal_projection(records, goal=3)
    assert p["schedule_from_response_rate"] == 0
    assert p["responses_needed"] == 15
    assert p["contacts_needed"] == 60


def test_no_history_uses_default_rates():
    p = compute_goal_projection([], goal=1)
    assert p["schedule_from_response_rate"] == 0.2
    assert p["schedule_from_total_rate"] == 0.05
    assert p["responses_needed"] == 5
    assert p["contacts_needed"] == 20


def test_inputs_are_clamped(hundred_records):
    p = compute_goal_projection(hundred_records, goal=-4, touches_per_cycle=-1, working_days=0)
    assert p["goal"] == 0
    assert p["touches_per_cycle"] == 0
    assert p["working_days"] == 1


def test_compute_goal_payload(hundred_records):
    payload = compute_goal(DashboardFilters(), {"filtered_records": hundred_records}, goal=30)
    assert payload["projection"]["remaining"] == 20
