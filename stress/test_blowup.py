from powerset.automata.fsa import EPSILON, NFA


def nth_from_end_nfa(n):
    nfa = NFA()
    nfa.set_start("0")
    for i in range(1, n):
        nfa.add_state(str(i))
    nfa.add_final_state(str(n))
    nfa.add_transition("0", "a", "0")
    nfa.add_transition("0", "b", "0")
    nfa.add_transition("0", "a", "1")
    for i in range(1, n):
        nfa.add_transition(str(i), "a", str(i + 1))
        nfa.add_transition(str(i), "b", str(i + 1))
    return nfa


def test_blowup():
    n = 12
    dfa = nth_from_end_nfa(n).to_dfa()
    assert len(dfa) == 2**n
    assert dfa.accept("a" + "b" * (n - 1))
    assert not dfa.accept("b" * n)


def test_long_chain():
    # Far deeper than the interpreter's recursion limit
    count = 20000
    nfa = NFA()
    nfa.set_start("s0")
    for i in range(1, count):
        nfa.add_state(f"s{i}")
    nfa.add_final_state(f"s{count}")
    for i in range(count):
        label = EPSILON if i % 2 else "a"
        nfa.add_transition(f"s{i}", label, f"s{i + 1}")

    dfa = nfa.to_dfa()
    assert len(dfa) == count // 2 + 1
    assert dfa.accept("a" * (count // 2))
    assert not dfa.accept("a" * (count // 2 - 1))
