from itertools import product
from pathlib import Path
import sys

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from polytope import (
    DegenerateBracketError,
    InvalidInputError,
    ParityPolytopeProjector,
    WaterfillState,
    clip_ranked,
    facet_sum,
    merge_breakpoints,
    parity_target,
    project_array,
    project_parity_polytope,
    rank,
)
from utils.projection import in_parity_polytope, most_violated_facet


def _even_vertices(n):
    return [np.array(bits, dtype=float) for bits in product((0, 1), repeat=n) if sum(bits) % 2 == 0]


def _assert_optimal(v, x, tol=1e-8):
    # x is the projection iff <v - x, u - x> <= 0 for every vertex u.
    residual = v - x
    worst = max(float(residual @ (u - x)) for u in _even_vertices(v.size))
    assert worst <= tol


def _ranked_total(values, r, beta):
    upper = np.clip(values[: r + 1] - beta, 0.0, 1.0).sum()
    lower = np.clip(values[r + 1 :] + beta, 0.0, 1.0).sum()
    return upper - lower


def test_all_nonpositive_projects_to_origin():
    np.testing.assert_array_equal(project_parity_polytope(np.array([-1.0, -2.0, -3.0])), [0.0, 0.0, 0.0])


def test_all_above_one_even_length_projects_to_ones():
    np.testing.assert_array_equal(project_parity_polytope(np.array([2.0, 3.0, 4.0, 5.0])), [1.0, 1.0, 1.0, 1.0])


def test_all_above_one_odd_length_is_not_all_ones():
    v = np.array([2.0, 3.0, 4.0])
    x = project_parity_polytope(v)
    assert not np.allclose(x, 1.0)
    np.testing.assert_allclose(x, [0.0, 1.0, 1.0], atol=1e-12)
    assert in_parity_polytope(x)
    _assert_optimal(v, x)


def test_feasible_point_is_returned_unchanged():
    v = np.array([0.9, 0.9, 0.9, 0.9])
    np.testing.assert_allclose(project_parity_polytope(v), v, atol=1e-12)


def test_clipped_point_inside_polytope_is_the_answer():
    v = np.array([1.2, 0.9, 0.1, -0.3])
    np.testing.assert_allclose(project_parity_polytope(v), [1.0, 0.9, 0.1, 0.0], atol=1e-12)


def test_violated_facet_is_met_with_equality():
    x = project_parity_polytope(np.array([1.0, 1.0, 1.0, 0.0]))
    np.testing.assert_allclose(x, [0.75, 0.75, 0.75, 0.25], atol=1e-12)
    assert x[:3].sum() - x[3] == pytest.approx(2.0, abs=1e-9)


@pytest.mark.parametrize(
    "v, expected",
    [
        ([1.1, 0.95, 0.9, -0.05], [0.85, 0.7, 0.65, 0.2]),
        ([1.5, 1.4, 0.3, 0.2], [1.0, 1.0, 0.25, 0.25]),
        ([0.8, 0.7, 0.6], [0.8 - 1 / 30, 0.7 - 1 / 30, 0.6 - 1 / 30]),
        ([5.0, 5.0, 5.0], [2 / 3, 2 / 3, 2 / 3]),
        ([2.0, -0.1], [0.95, 0.95]),
        ([0.7], [0.0]),
        ([5.0], [0.0]),
    ],
)
def test_known_projections(v, expected):
    v = np.asarray(v, dtype=float)
    x = project_parity_polytope(v)
    np.testing.assert_allclose(x, expected, atol=1e-9)
    _assert_optimal(v, x)


def test_projection_is_optimal_on_random_vectors():
    rng = np.random.default_rng(1204)
    for _ in range(300):
        n = int(rng.integers(1, 9))
        v = rng.uniform(-0.5, 1.5, size=n)
        x = project_parity_polytope(v)
        assert np.all((x >= 0.0) & (x <= 1.0))
        assert in_parity_polytope(x)
        _assert_optimal(v, x)


def test_projection_is_optimal_with_duplicated_values():
    rng = np.random.default_rng(7)
    levels = np.array([-0.2, 0.3, 0.6, 0.9, 1.2])
    for _ in range(200):
        n = int(rng.integers(2, 9))
        v = rng.choice(levels, size=n)
        x = project_parity_polytope(v)
        assert in_parity_polytope(x)
        _assert_optimal(v, x)


def test_wide_range_inputs_stay_in_unit_cube():
    rng = np.random.default_rng(3)
    for _ in range(200):
        v = rng.normal(0.5, 3.0, size=int(rng.integers(1, 30)))
        x = project_parity_polytope(v)
        assert np.all((x >= 0.0) & (x <= 1.0))
        assert in_parity_polytope(x)


def test_violated_facet_is_tight_after_projection():
    rng = np.random.default_rng(11)
    checked = 0
    for _ in range(500):
        v = rng.uniform(-0.5, 1.5, size=int(rng.integers(2, 12)))
        ranked = rank(v)
        clipped = clip_ranked(ranked)
        r = parity_target(clipped)
        if facet_sum(clipped, r) <= r:
            continue
        checked += 1
        x = project_parity_polytope(v)[[item.index for item in ranked]]
        assert x[: r + 1].sum() - x[r + 1 :].sum() == pytest.approx(r, abs=1e-9)
    assert checked > 0


def test_facet_total_is_non_increasing_in_beta():
    rng = np.random.default_rng(5)
    betas = np.linspace(0.0, 2.0, 201)
    for _ in range(50):
        v = rng.uniform(-1.0, 2.0, size=int(rng.integers(2, 10)))
        ranked = rank(v)
        r = parity_target(clip_ranked(ranked))
        values = np.array([item.value for item in ranked])
        totals = np.array([_ranked_total(values, r, beta) for beta in betas])
        assert np.all(np.diff(totals) <= 1e-12)


def test_permuted_input_gives_permuted_projection():
    rng = np.random.default_rng(42)
    for _ in range(50):
        v = rng.uniform(-0.5, 1.5, size=7)
        perm = rng.permutation(7)
        np.testing.assert_allclose(project_parity_polytope(v[perm]), project_parity_polytope(v)[perm], atol=1e-12)


def test_parity_target_is_even_and_bounded():
    rng = np.random.default_rng(9)
    for _ in range(100):
        v = rng.uniform(-1.0, 2.0, size=int(rng.integers(1, 12)))
        r = parity_target(clip_ranked(rank(v)))
        assert r % 2 == 0
        assert 0 <= r <= v.size


def test_rank_keeps_original_indices():
    ranked = rank(np.array([0.2, 0.9, -0.4, 0.5]))
    assert [item.index for item in ranked] == [1, 3, 0, 2]
    assert [item.value for item in ranked] == [0.9, 0.5, 0.2, -0.4]


def test_merged_breakpoints_are_sorted_and_prefer_lower_half_on_ties():
    ranked = rank(np.array([1.5, 0.5, -0.5]))
    merged = merge_breakpoints(ranked, 0)
    assert [bp.value for bp in merged] == [-0.5, 0.5, 0.5]
    assert [(bp.position, bp.upper) for bp in merged] == [(1, False), (2, False), (0, True)]

    rng = np.random.default_rng(0)
    for _ in range(50):
        v = rng.uniform(-1.0, 2.0, size=9)
        ranked = rank(v)
        merged = merge_breakpoints(ranked, parity_target(clip_ranked(ranked)))
        values = [bp.value for bp in merged]
        assert len(merged) == v.size
        assert values == sorted(values)


def test_zero_width_segment_is_degenerate():
    with pytest.raises(DegenerateBracketError):
        WaterfillState(clip_idx=2, zero_idx=3, active_sum=0.0).solve(2)


def test_saturated_inputs_just_above_one_do_not_collapse_the_window():
    v = np.full(3, 1.0 + 1e-11)
    x = project_parity_polytope(v)
    np.testing.assert_allclose(x, np.full(3, 2 / 3), atol=1e-9)


@pytest.mark.parametrize("bad", [np.array([]), np.array([0.1, np.nan]), np.array([np.inf, 0.2])])
def test_invalid_vectors_are_rejected(bad):
    with pytest.raises(InvalidInputError):
        project_parity_polytope(bad)


def test_matrix_input_is_rejected():
    with pytest.raises(InvalidInputError):
        project_parity_polytope(np.ones((2, 2)))
    with pytest.raises(InvalidInputError):
        project_array(np.ones((2, 3)))


def test_column_vector_keeps_its_shape():
    column = np.array([[1.0], [1.0], [1.0], [0.0]])
    x = project_array(column)
    assert x.shape == (4, 1)
    np.testing.assert_allclose(x.ravel(), [0.75, 0.75, 0.75, 0.25], atol=1e-12)


def test_projector_rejects_negative_tolerance():
    with pytest.raises(ValueError):
        ParityPolytopeProjector(zero_tol=-1.0)


def test_most_violated_facet_picks_odd_set():
    members, violation = most_violated_facet(np.array([1.0, 1.0, 1.0, 0.0]))
    assert members.sum() % 2 == 1
    assert violation == pytest.approx(1.0)
    assert in_parity_polytope(np.array([0.5, 0.5]))
    assert not in_parity_polytope(np.array([1.0, 0.0]))
    assert not in_parity_polytope(np.array([1.2, 0.8]))
