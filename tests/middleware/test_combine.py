"""Tests for combine()."""

from storelite import Immer, combine, create_store


def test_combine_merges_state_and_actions():
    store = create_store(
        combine(
            {"count": 0},
            lambda set_, get, api: {
                "increment": lambda: set_(lambda s: {"count": s["count"] + 1}),
            },
        )
    )

    store.get_state()["increment"]()
    assert store.get_state()["count"] == 1


def test_actions_override_initial_fields():
    store = create_store(combine({"value": 1}, lambda set_, get, api: {"value": 2}))
    assert store.get_state()["value"] == 2


def test_initial_state_not_mutated():
    initial = {"count": 0}
    store = create_store(combine(initial, lambda set_, get, api: {}))
    store.set_state({"count": 3})
    assert initial == {"count": 0}


def test_combine_with_middleware():
    def actions(set_, get, api):
        def push(value):
            set_(lambda draft: draft["values"].append(value))

        return {"push": push}

    store = create_store(combine({"values": []}, actions), middleware=[Immer()])
    store.get_state()["push"](1)
    assert store.get_state()["values"] == [1]
