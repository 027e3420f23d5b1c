import pytest

from spot_loadtest.config.profiles import get_profile
from spot_loadtest.load_shapes.profile_shape import ProfileLoadShape, users_at

STAGES = [
    {"duration": 10, "target": 10},
    {"duration": 20, "target": 10},
    {"duration": 10, "target": 0},
]


@pytest.mark.parametrize("run_time, users", [
    (0, 0),
    (5, 5),
    (9.9, 10),
    (10, 10),
    (29, 10),
    (30, 10),
    (35, 5),
    (39, 1),
])
def test_users_ramp_linearly_between_stage_targets(run_time, users):
    assert users_at(STAGES, run_time)[0] == users


def test_shape_finishes_after_last_stage():
    assert users_at(STAGES, 40) is None
    assert users_at([], 0) is None


def test_spawn_rate_covers_the_ramp():
    assert users_at(STAGES, 1)[1] == 1.0
    spike = get_profile("spike")["stages"]
    # 5 -> 100 users over 10 seconds
    assert users_at(spike, 12)[1] == pytest.approx(9.5)


def test_spike_profile_peaks_at_one_hundred_users():
    stages = get_profile("spike")["stages"]
    peak = max(users_at(stages, second)[0] for second in range(100))
    assert peak == 100


def test_shape_ticks_through_the_selected_profile(monkeypatch):
    shape = ProfileLoadShape()
    shape.set_profile(get_profile("smoke"))

    monkeypatch.setattr(shape, "get_run_time", lambda: 15)
    assert shape.tick() == (1, 1.0)

    monkeypatch.setattr(shape, "get_run_time", lambda: 40)
    assert shape.tick() is None


@pytest.mark.parametrize("run_time, users", [(1, 1), (2, 1), (3, 2), (5, 3), (7, 4)])
def test_half_way_points_round_up(run_time, users):
    # 0.5, 1.0, 1.5, 2.5, 3.5 users
    assert users_at([{"duration": 8, "target": 4}], run_time)[0] == users


def test_ramp_up_never_steps_back():
    stages = [{"duration": 10, "target": 5}]
    counts = [users_at(stages, tenth / 10)[0] for tenth in range(100)]
    assert counts == sorted(counts)
