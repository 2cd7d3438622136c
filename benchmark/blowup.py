"""
Times the subset construction on the classic worst case: the language of
strings over {a, b} whose n-th symbol from the end is an a. The NFA has n + 1
states and the DFA has 2 ** n.

Usage: blowup.py [max_n]
"""

import sys

from powerset.automata.fsa import NFA
from powerset.util import elapsed_since, now


def nth_from_end_nfa(n):
    """
    Builds the (n + 1)-state NFA accepting strings whose n-th symbol from the
    end is an ``a``.
    """
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


def main(max_n=14):
    for n in range(2, max_n + 1):
        nfa = nth_from_end_nfa(n)
        t = now()
        dfa = nfa.to_dfa()
        print(f"n={n:<3} states={len(dfa):<7} time={elapsed_since(t):.4f}s")


if __name__ == "__main__":
    main(*(int(arg) for arg in sys.argv[1:2]))
