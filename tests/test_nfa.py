import io

import pytest
from powerset.automata.fsa import EPSILON, NFA
from powerset.automata.states import (
    AutomatonError,
    EpsilonSymbolError,
    State,
    UnknownStateError,
)


def make_nfa():
    nfa = NFA()
    nfa.set_start("p")
    nfa.add_state("m")
    nfa.add_final_state("q")
    nfa.add_transition("p", "a", "p")
    nfa.add_transition("p", "a", "m")
    nfa.add_transition("m", EPSILON, "q")
    nfa.add_transition("q", "b", "p")
    return nfa


def test_queries():
    nfa = make_nfa()
    assert nfa.start_state == State("p")
    assert nfa.final_states == {State("q")}
    assert nfa.states == {State("m")}
    assert nfa.alphabet == {"a", "b"}
    assert nfa.all_states() == {State("p"), State("m"), State("q")}
    assert len(nfa) == 3


def test_epsilon_not_in_alphabet():
    nfa = make_nfa()
    assert EPSILON not in nfa.alphabet


def test_get_to_state():
    nfa = make_nfa()
    assert nfa.get_to_state("p", "a") == {State("p"), State("m")}
    assert nfa.get_to_state(State("q"), "b") == {State("p")}
    assert nfa.get_to_state("m", "a") == frozenset()

    with pytest.raises(EpsilonSymbolError):
        nfa.get_to_state("m", EPSILON)


def test_set_start_replaces():
    nfa = NFA()
    nfa.set_start("a")
    nfa.add_start_state("b")
    assert nfa.start_state.name == "b"
    with pytest.raises(UnknownStateError):
        nfa.find_state("a")


def test_readding_names():
    nfa = NFA()
    nfa.set_start("s")
    nfa.add_state("x")
    nfa.add_state("x")
    nfa.add_final_state("f")
    nfa.add_final_state("f")
    assert len(nfa.states) == 1
    assert len(nfa.final_states) == 1


def test_lookup_priority():
    # A name added as start and final resolves to the start state object
    nfa = NFA()
    nfa.set_start("s")
    nfa.add_final_state("s")
    nfa.add_transition("s", "a", "s")
    assert nfa.find_state("s") is nfa.start_state
    assert nfa.start_state.transitions("a") == {State("s")}
    assert nfa.accept("aaa")
    assert nfa.accept("")


def test_unknown_names():
    nfa = NFA()
    nfa.set_start("p")

    with pytest.raises(UnknownStateError) as exc:
        nfa.add_transition("p", "a", "nowhere")
    assert exc.value.name == "nowhere"
    assert "nowhere" in str(exc.value)
    assert nfa.alphabet == frozenset()
    assert nfa.start_state.transitions("a") == frozenset()

    with pytest.raises(KeyError):
        nfa.add_transition("ghost", "a", "p")
    with pytest.raises(AutomatonError):
        nfa.epsilon_closure("ghost")


def test_no_start_state():
    nfa = NFA()
    nfa.add_state("a")
    with pytest.raises(UnknownStateError):
        nfa.add_transition("a", "x", "b")
    with pytest.raises(AutomatonError):
        nfa.to_dfa()


def test_epsilon_rejected_in_alphabet():
    with pytest.raises(EpsilonSymbolError):
        NFA(alphabet=["a", EPSILON])

    nfa = NFA(epsilon="e", alphabet="ab")
    assert nfa.alphabet == {"a", "b"}
    with pytest.raises(EpsilonSymbolError):
        nfa.add_symbol("e")
    with pytest.raises(ValueError):
        nfa.add_symbol("e")


def test_letter_epsilon():
    nfa = NFA(epsilon="e")
    nfa.set_start("s")
    nfa.add_final_state("f")
    nfa.add_transition("s", "e", "f")
    assert nfa.alphabet == frozenset()
    assert nfa.epsilon_closure("s") == {State("s"), State("f")}
    with pytest.raises(EpsilonSymbolError):
        nfa.accept("e")


def test_transitive_closure():
    nfa = NFA()
    nfa.set_start("a")
    for name in "bcde":
        nfa.add_state(name)
    nfa.add_transition("a", EPSILON, "b")
    nfa.add_transition("b", EPSILON, "c")
    nfa.add_transition("c", EPSILON, "a")
    nfa.add_transition("c", "x", "d")
    nfa.add_transition("d", EPSILON, "e")

    assert {s.name for s in nfa.epsilon_closure("a")} == {"a", "b", "c"}
    assert {s.name for s in nfa.epsilon_closure("d")} == {"d", "e"}
    assert {s.name for s in nfa.epsilon_closure("e")} == {"e"}


def test_closure_is_idempotent():
    nfa = make_nfa()
    for state in nfa.all_states():
        closed = nfa.epsilon_closure(state)
        assert nfa.closure(closed) == closed

    both = nfa.closure(["p", "m"])
    assert both == {State("p"), State("m"), State("q")}
    assert nfa.closure(both) == both


def test_move():
    nfa = make_nfa()
    p = nfa.find_state("p")
    m = nfa.find_state("m")
    assert nfa.move([p, m], "a") == {State("p"), State("m")}
    assert nfa.move([m], "a") == frozenset()


def test_accept():
    nfa = make_nfa()
    assert nfa.accept("a")
    assert nfa.accept("aaba")
    assert not nfa.accept("")
    assert not nfa.accept("b")
    assert not nfa.accept("ab")
    assert not nfa.accept("ac")


def test_triples():
    nfa = make_nfa()
    assert set(nfa.triples()) == {
        ("p", "a", "p"),
        ("p", "a", "m"),
        ("m", EPSILON, "q"),
        ("q", "b", "p"),
    }


def test_dump():
    nfa = make_nfa()
    out = io.StringIO()
    nfa.dump(stream=out)
    text = out.getvalue()
    assert "@ p" in text
    assert "q ||" in text
