import time

import numpy as np
import pytest

from bktreex import AsyncSearchResult, BKTree, Integer, SearchOutcome, Word
from bktreex.datasets import perturb_words, random_words
from bktreex.queries.concurrent import _MatchAccumulator, radius_search_concurrent
from tests.utils.elements import ConcurrencyProbe, ProbedInteger


def _word_tree(seed: int = 41):
    rng = np.random.default_rng(seed)
    words = random_words(rng, 150, min_length=2, max_length=5, alphabet="abcde")
    return BKTree.from_elements(words), perturb_words(rng, words[:15], alphabet="abcde")


def test_complete_run_matches_synchronous_search():
    tree, queries = _word_tree()

    for query in queries:
        expected = tree.search(query, 2)
        result = tree.search_async(query, 2, workers=4, budget_ms=10_000)

        assert isinstance(result, AsyncSearchResult)
        assert result.complete is True
        assert sorted(result.descriptions()) == sorted(expected.descriptions())
        assert result.comparisons == expected.comparisons
        assert result.outcome is expected.outcome


def test_empty_tree_is_explicit():
    result = BKTree().search_async(Word("a"), 1, budget_ms=1_000)

    assert result.outcome is SearchOutcome.EMPTY_TREE
    assert result.matches == ()
    assert result.comparisons == 0
    assert result.complete is True


def test_no_matches_outcome():
    tree = BKTree.from_elements([Integer(0), Integer(50)])

    result = radius_search_concurrent(tree, Integer(25), 1, workers=2, budget_ms=5_000)

    assert result.complete is True
    assert result.outcome is SearchOutcome.NO_MATCHES
    # edge 50 lies outside [24, 26], so only the root is compared.
    assert result.comparisons == 1


def test_budget_expiry_returns_partial_result():
    tree = BKTree.from_elements(ProbedInteger(v) for v in (0, 5, 10, 15, 20, 25))
    probe = ConcurrencyProbe(delay=0.2)

    start = time.perf_counter()
    result = tree.search_async(ProbedInteger(7, probe), 100, workers=1, budget_ms=10)
    elapsed = time.perf_counter() - start

    assert result.complete is False
    assert len(result.matches) < tree.size
    assert result.comparisons < tree.size
    # Collection does not wait for the in-flight unit to finish.
    assert elapsed < 0.2


def test_late_units_are_discarded_after_seal():
    accumulator = _MatchAccumulator()
    assert accumulator.record(Integer(1), True) is True

    matches, comparisons = accumulator.seal()

    assert accumulator.record(Integer(2), True) is False
    assert matches == (Integer(1),)
    assert comparisons == 1
    assert accumulator.seal() == ((Integer(1),), 1)


def test_worker_pool_bounds_concurrency():
    values = list(range(0, 60, 3))
    tree = BKTree.from_elements(ProbedInteger(v) for v in values)
    probe = ConcurrencyProbe(delay=0.005)

    result = tree.search_async(ProbedInteger(30, probe), 1_000, workers=2, budget_ms=30_000)

    assert result.complete is True
    assert len(result.matches) == tree.size
    assert probe.calls == tree.size
    assert probe.max_active <= 2


def test_defaults_come_from_runtime(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("BKTREEX_ASYNC_WORKERS", "1")
    monkeypatch.setenv("BKTREEX_ASYNC_BUDGET_MS", "10000")
    tree = BKTree.from_elements(ProbedInteger(v) for v in range(0, 40, 4))
    probe = ConcurrencyProbe()

    result = tree.search_async(ProbedInteger(8, probe), 4)

    assert result.complete is True
    assert sorted(result.descriptions()) == ["12", "4", "8"]
    assert probe.max_active == 1


@pytest.mark.parametrize(
    "kwargs",
    [{"workers": 0}, {"budget_ms": 0}, {"budget_ms": -5.0}],
)
def test_invalid_arguments_rejected(kwargs):
    tree = BKTree.from_elements([Integer(0)])

    with pytest.raises(ValueError):
        tree.search_async(Integer(0), 1, **kwargs)


def test_negative_radius_rejected():
    tree = BKTree.from_elements([Integer(0)])

    with pytest.raises(ValueError):
        tree.search_async(Integer(0), -1)
