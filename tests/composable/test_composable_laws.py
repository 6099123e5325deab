# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from hypothesis import given
from hypothesis import strategies as st

from forwardable.composable import ComposableRegistry

# ---------- Strategies ----------

POOL_SIZE = 6
# sequence of extend/remove operations over a fixed pool of constituents
OPS = st.lists(
    st.tuples(st.sampled_from(["extend", "remove"]), st.integers(0, POOL_SIZE - 1)),
    max_size=30,
)


def _make_pool(calls):
    def make(i):
        def constituent(*_):
            calls.append(i)

        return constituent

    return [make(i) for i in range(POOL_SIZE)]


# ---------- Properties ----------


@given(ops=OPS)
def test_constituents_match_ordered_set_model(ops):
    """Constituents behave like an insertion-ordered set."""
    calls = []
    pool = _make_pool(calls)
    registry = ComposableRegistry()

    def base():
        calls.append("base")

    model: list[int] = []
    for op, i in ops:
        if op == "extend":
            registry.extend(base, pool[i])
            if i not in model:
                model.append(i)
        else:
            registry.remove(base, pool[i])
            if i in model:
                model.remove(i)

    assert registry.constituents_of(base) == tuple(pool[i] for i in model)

    registry.extend(base)()
    assert calls == ["base", *model]


@given(indices=st.lists(st.integers(0, POOL_SIZE - 1), min_size=1, max_size=10))
def test_one_wrapper_per_base(indices):
    pool = _make_pool([])
    registry = ComposableRegistry()

    def base():
        pass

    wrappers = {id(registry.extend(base, pool[i])) for i in indices}
    assert len(wrappers) == 1
    assert len(registry) == 1
