from reveal_app.section_motion import compute_reveal_delays, compute_reveal_motion


def test_motion_alternates_direction():
    # Odd-length section ids start from the left.
    first, second = compute_reveal_motion("gap", 2)

    assert (first.travel_x, second.travel_x) == (-62.0, 62.0)
    assert (first.travel_y, second.travel_y) == (54.0, 48.0)
    assert (first.duration_ms, second.duration_ms) == (860, 950)


def test_motion_section_sign_flips_with_id_length():
    (first,) = compute_reveal_motion("hero", 1)
    assert first.travel_x == 62.0


def test_split_sections_push_later_nodes_further():
    motions = compute_reveal_motion("proof", 4, directional="split")

    assert [m.travel_x for m in motions] == [-62.0, 62.0, 140.0, -140.0]


def test_travel_y_bottoms_out():
    motions = compute_reveal_motion("hero", 6)
    assert [m.travel_y for m in motions] == [54.0, 48.0, 42.0, 36.0, 36.0, 36.0]


def test_delays_grow_with_position_and_index():
    assert compute_reveal_delays([0.0, 100.0, 200.0], [0, 1, 2]) == [30, 266, 502]


def test_micro_stagger_is_capped():
    assert compute_reveal_delays([0.0], [10]) == [30 + 140]


def test_delays_edge_cases():
    assert compute_reveal_delays([500.0], [0]) == [30]
    assert compute_reveal_delays([], []) == []
