# Copyright 2014 Matt Chaput. All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
#    1. Redistributions of source code must retain the above copyright notice,
#       this list of conditions and the following disclaimer.
#
#    2. Redistributions in binary form must reproduce the above copyright
#       notice, this list of conditions and the following disclaimer in the
#       documentation and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY MATT CHAPUT ``AS IS'' AND ANY EXPRESS OR
# IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE IMPLIED WARRANTIES OF
# MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO
# EVENT SHALL MATT CHAPUT OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT
# LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA,
# OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING
# NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
#
# The views and conclusions contained in the software and documentation are
# those of the authors and should not be interpreted as representing official
# policies, either expressed or implied, of Matt Chaput.


import itertools
import sys

from loguru import logger

from powerset.automata.states import (
    DEFAULT_NAMER,
    AutomatonError,
    EpsilonSymbolError,
    State,
    StateSet,
    UnknownStateError,
)
from powerset.util import elapsed_since, now

# Marker constants


class Marker:
    """
    Represents a marker object.

    Markers are named sentinels that can never collide with a real input
    symbol, since they only compare equal to themselves.

    Attributes:
        name (str): The name of the marker.

    Example:
        >>> marker = Marker("start")
        >>> repr(marker)
        '<start>'
    """

    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return f"<{self.name}>"


EPSILON = Marker("EPSILON")


# Base class
class FSA:
    """
    Finite State Automaton (FSA) base class.

    Subclasses supply :meth:`start`, :meth:`next_state` and :meth:`is_final`;
    this class uses them to run an automaton over a string of symbols.

    Attributes:
        initial (object): The initial state of the automaton.
        epsilon (object): The marker used for epsilon transitions.
    """

    def __init__(self, initial, epsilon=EPSILON):
        self.initial = initial
        self.epsilon = epsilon

    def __len__(self):
        """
        Returns the number of states in the automaton.
        """
        return len(self.all_states())

    def all_states(self):
        raise NotImplementedError

    def start(self):
        """
        Returns the state the automaton is in before reading any input.
        """
        return self.initial

    def next_state(self, state, label):
        """
        Returns the state reached from ``state`` by reading ``label``.

        Raises:
            NotImplementedError: This method should be implemented in a subclass.
        """
        raise NotImplementedError

    def is_final(self, state):
        """
        Checks if a given state is a final (accepting) state.

        Raises:
            NotImplementedError: This method should be implemented in a subclass.
        """
        raise NotImplementedError

    def check_symbol(self, symbol):
        """
        Raises :class:`EpsilonSymbolError` if ``symbol`` is the epsilon marker.
        """
        if symbol == self.epsilon:
            raise EpsilonSymbolError(
                f"The epsilon marker {symbol!r} cannot be used as an input symbol"
            )

    def accept(self, string):
        """
        Checks if a given string is accepted by the automaton.

        Args:
            string (iterable): The input symbols, usually a str.

        Returns:
            bool: True if the string is accepted, False otherwise.

        Raises:
            EpsilonSymbolError: If the input contains the epsilon marker.

        Example:
            >>> nfa = NFA()
            >>> nfa.set_start("p")
            >>> nfa.add_final_state("q")
            >>> nfa.add_transition("p", "a", "q")
            >>> nfa.accept("a")
            True
        """
        state = self.start()

        for label in string:
            logger.trace("  {} -> {!r} ->", state, label)
            state = self.next_state(state, label)
            if state is None:
                break

        return self.is_final(state)


# Implementations


class NFA(FSA):
    """
    A nondeterministic finite automaton built up by name and converted to a
    :class:`DFA` with :meth:`to_dfa`.

    There is a single start state at a time; final and ordinary states are
    kept separately. Transitions are recorded on the :class:`State` objects
    themselves and may use the epsilon marker, which never becomes part of
    the alphabet.

    Args:
        epsilon (object, optional): The marker for epsilon transitions.
            Defaults to :data:`EPSILON`. Pass ``"e"`` to use the common
            single-letter convention.
        alphabet (iterable, optional): Input symbols to declare up front.

    Raises:
        EpsilonSymbolError: If ``alphabet`` contains the epsilon marker.

    Example:
        >>> nfa = NFA(epsilon="e")
        >>> nfa.set_start("s")
        >>> nfa.add_state("m")
        >>> nfa.add_final_state("f")
        >>> nfa.add_transition("s", "e", "m")
        >>> nfa.add_transition("m", "e", "f")
        >>> nfa.to_dfa().start()
        '[f, m, s]'
    """

    def __init__(self, epsilon=EPSILON, alphabet=()):
        super().__init__(None, epsilon)
        self._final_states = {}
        self._states = {}
        self._alphabet = {}
        for symbol in alphabet:
            self.add_symbol(symbol)

    def __repr__(self):
        return (
            f"<{type(self).__name__} start={self.initial!r} "
            f"states={len(self.all_states())} alphabet={len(self._alphabet)}>"
        )

    # Mutation

    def set_start(self, name):
        """
        Sets the start state, replacing any previous one.

        Args:
            name (str): The name of the start state.
        """
        self.initial = State(name)

    add_start_state = set_start

    def add_state(self, name):
        """
        Adds an ordinary (non-final) state.

        Args:
            name (str): The name of the state.
        """
        state = State(name)
        self._states.setdefault(state.name, state)

    def add_final_state(self, name):
        """
        Adds a final (accepting) state.

        Args:
            name (str): The name of the state.
        """
        state = State(name)
        self._final_states.setdefault(state.name, state)

    def add_symbol(self, symbol):
        """
        Declares an input symbol without adding a transition on it.

        Raises:
            EpsilonSymbolError: If ``symbol`` is the epsilon marker.
        """
        self.check_symbol(symbol)
        self._alphabet[symbol] = None

    def add_transition(self, src, label, dest):
        """
        Adds a transition from the state named ``src`` to the state named
        ``dest`` on ``label``.

        Both names must already have been added. Any label other than the
        epsilon marker is added to the alphabet.

        Args:
            src (str): The name of the source state.
            label (object): The input symbol or the epsilon marker.
            dest (str): The name of the destination state.

        Raises:
            UnknownStateError: If either name has not been added. The
                automaton is left unchanged.
        """
        from_state = self.find_state(src)
        to_state = self.find_state(dest)
        if label != self.epsilon:
            self._alphabet[label] = None
        from_state.add_transition(label, to_state)

    # Queries

    def _lookup(self, name):
        initial = self.initial
        if initial is not None and initial.name == name:
            return initial
        return self._final_states.get(name) or self._states.get(name)

    def find_state(self, name):
        """
        Returns the state called ``name``, looking at the start state first,
        then the final states, then the ordinary states.

        Raises:
            UnknownStateError: If no state has that name.
        """
        state = self._lookup(name)
        if state is None:
            logger.debug("Lookup of unknown state {!r} in {!r}", name, self)
            raise UnknownStateError(name)
        return state

    def _resolve(self, state):
        name = state.name if isinstance(state, State) else state
        return self.find_state(name)

    @property
    def start_state(self):
        return self.initial

    @property
    def final_states(self):
        return frozenset(self._final_states.values())

    @property
    def states(self):
        """The ordinary (non-final) states."""
        return frozenset(self._states.values())

    @property
    def alphabet(self):
        return frozenset(self._alphabet)

    def all_states(self):
        """
        Returns the set of all states: the start state, the final states and
        the ordinary states, unified by name.
        """
        stateset = set()
        if self.initial is not None:
            stateset.add(self.initial)
        stateset.update(self._final_states.values())
        stateset.update(self._states.values())
        return stateset

    def get_to_state(self, state, label):
        """
        Returns the states directly reachable from ``state`` on ``label``.

        Args:
            state (State or str): The source state or its name.
            label (object): A real input symbol.

        Returns:
            frozenset: The successor states, empty if there are none.

        Raises:
            EpsilonSymbolError: If ``label`` is the epsilon marker; use
                :meth:`epsilon_closure` instead.
            UnknownStateError: If the state is not part of this automaton.
        """
        self.check_symbol(label)
        return self._resolve(state).transitions(label)

    def triples(self):
        """
        Generates every transition as a ``(src, label, dest)`` tuple of state
        names, epsilon transitions included.
        """
        for src in sorted(self.all_states()):
            for label in src.labels():
                for dest in sorted(src.transitions(label)):
                    yield src.name, label, dest.name

    def _close(self, states):
        epsilon = self.epsilon
        closed = set(states)
        frontier = list(closed)
        while frontier:
            state = frontier.pop()
            for dest in state.transitions(epsilon):
                if dest not in closed:
                    closed.add(dest)
                    frontier.append(dest)
        return frozenset(closed)

    def epsilon_closure(self, state):
        """
        Returns the epsilon closure of a state: the state itself plus every
        state reachable from it through any chain of epsilon transitions.

        Args:
            state (State or str): The state or its name.

        Returns:
            frozenset: The closure.
        """
        return self._close([self._resolve(state)])

    def closure(self, states):
        """
        Returns the epsilon closure of a set of states, which is the union of
        the closures of its members.
        """
        return self._close(self._resolve(s) for s in states)

    def move(self, states, label):
        """
        Returns the union of the direct successors of ``states`` on ``label``,
        without following epsilon transitions.
        """
        dest_states = set()
        for state in states:
            dest_states.update(state.transitions(label))
        return frozenset(dest_states)

    def is_final(self, states):
        """
        Checks if any of the given states is a final state.
        """
        finals = self._final_states
        return any(s.name in finals for s in states)

    def start(self):
        """
        Returns the epsilon closure of the start state.

        Raises:
            AutomatonError: If no start state has been set.
        """
        if self.initial is None:
            raise AutomatonError("The automaton has no start state")
        return self._close([self.initial])

    def next_state(self, states, label):
        """
        Returns the closure of the states reachable from ``states`` on
        ``label``. An empty frozenset means the input is rejected.
        """
        self.check_symbol(label)
        return self._close(self.move(states, label))

    def dump(self, stream=sys.stdout):
        """
        Prints a textual representation of the NFA to the specified stream.
        The start state is marked with ``@`` and final states with ``||``.
        """
        for src in sorted(self.all_states()):
            beg = "@" if src == self.initial else " "
            end = "||" if self.is_final([src]) else ""
            print(beg, src.name, end, file=stream)
            for label in src.labels():
                dests = ", ".join(d.name for d in sorted(src.transitions(label)))
                print("  ", label, "->", dests, file=stream)

    # Subset construction

    def to_dfa(self, namer=None):
        """
        Converts the NFA to an equivalent DFA with the subset construction.

        Each DFA state stands for the set of NFA states the NFA can be in at
        once, and is named by ``namer`` (``[a, b, c]`` by default). A DFA
        state is final if any of its members is final. Symbols that lead
        nowhere from a composite get no transition, so the DFA rejects there.

        The NFA is only read; the returned DFA is complete and shares no
        mutable data with it.

        Args:
            namer (StateNamer, optional): Names the composite states.

        Returns:
            DFA: The converted DFA.

        Raises:
            AutomatonError: If no start state has been set.
        """
        namer = namer or DEFAULT_NAMER
        t = now()

        start = StateSet(self.start(), namer)
        dfa = DFA(start.name, epsilon=self.epsilon)
        for label in self._alphabet:
            dfa.add_symbol(label)
        seen = {start.name: start}
        self._materialize(dfa, start)
        logger.debug("Subset construction starts from {}", start.name)

        # Work-list of composites that have been added to the DFA but whose
        # transitions have not been computed yet
        frontier = [start]
        while frontier:
            current = frontier.pop()
            for label in self._alphabet:
                moved = self.move(current, label)
                if not moved:
                    continue

                target = StateSet(self._close(moved), namer)
                existing = seen.get(target.name)
                if existing is None:
                    seen[target.name] = target
                    self._materialize(dfa, target)
                    frontier.append(target)
                else:
                    assert existing == target, f"{target.name} names two state sets"
                dfa.add_transition(current.name, label, target.name)

        logger.debug(
            "Built DFA with {} states ({} final) from {} NFA states in {:.4f}s",
            len(dfa),
            len(dfa.final_states),
            len(self.all_states()),
            elapsed_since(t),
        )
        return dfa

    get_dfa = to_dfa

    def _materialize(self, dfa, stateset):
        names = stateset.names()
        if self.is_final(stateset):
            dfa.add_final_state(stateset.name, names)
        else:
            dfa.add_state(stateset.name, names)
        logger.trace("Added DFA state {}", stateset.name)


class DFA(FSA):
    """
    Deterministic Finite Automaton (DFA) class.

    Each (state, symbol) pair has at most one successor; a missing entry
    means the input is rejected. DFAs are normally produced by
    :meth:`NFA.to_dfa`, which records for every state the names of the NFA
    states it stands for.

    Args:
        initial (object): The name of the start state.
        epsilon (object, optional): The epsilon marker, which is rejected as
            a transition label.

    Attributes:
        transitions (dict): Maps each source state to a dictionary of input
            symbols and destination states.
        final_states (set): The final states.
    """

    def __init__(self, initial, epsilon=EPSILON):
        super().__init__(initial, epsilon)
        self.transitions = {}
        self.final_states = set()
        self._states = {}
        self._alphabet = {}

    def __repr__(self):
        return f"<{type(self).__name__} start={self.initial!r} states={len(self)}>"

    def __eq__(self, other):
        """
        Two DFAs are equal if they have the same start state, states, final
        states and transitions.
        """
        if not isinstance(other, DFA):
            return NotImplemented
        return (
            self.initial == other.initial
            and self.final_states == other.final_states
            and set(self._states) == set(other._states)
            and self.transitions == other.transitions
        )

    __hash__ = None

    def __str__(self):
        return self.describe()

    # Construction

    def add_state(self, name, members=()):
        """
        Adds a non-final state.

        Args:
            name (object): The name of the state.
            members (iterable, optional): Names of the NFA states this state
                stands for.
        """
        self._states.setdefault(name, frozenset(members))
        self.transitions.setdefault(name, {})

    def add_final_state(self, name, members=()):
        """
        Adds a final state.
        """
        self.add_state(name, members)
        self.final_states.add(name)

    def add_symbol(self, label):
        """
        Declares an input symbol. Symbols without transitions are rejected
        from every state but still belong to the alphabet.

        Raises:
            EpsilonSymbolError: If ``label`` is the epsilon marker.
        """
        self.check_symbol(label)
        self._alphabet[label] = None

    def add_transition(self, src, label, dest):
        """
        Sets the transition from ``src`` on ``label`` to ``dest``, replacing
        any previous destination for that pair.

        Raises:
            UnknownStateError: If either state has not been added.
            EpsilonSymbolError: If ``label`` is the epsilon marker.
        """
        self.check_symbol(label)
        for name in (src, dest):
            if name not in self._states:
                raise UnknownStateError(name)
        self._alphabet[label] = None
        self.transitions[src][label] = dest

    # Queries

    @property
    def states(self):
        return frozenset(self._states)

    @property
    def alphabet(self):
        return frozenset(self._alphabet)

    def all_states(self):
        return set(self._states)

    def nonfinal_states(self):
        return {s for s in self._states if s not in self.final_states}

    def members(self, name):
        """
        Returns the names of the NFA states that the DFA state ``name``
        stands for.

        Raises:
            UnknownStateError: If there is no such state.
        """
        try:
            return self._states[name]
        except KeyError:
            raise UnknownStateError(name) from None

    def is_final(self, state):
        return state in self.final_states

    def next_state(self, src, label):
        """
        Returns the state reached from ``src`` on ``label``, or None if there
        is no such transition.
        """
        self.check_symbol(label)
        return self.transitions.get(src, {}).get(label)

    def transition_table(self):
        """
        Returns the transitions as a dictionary mapping ``(src, label)``
        pairs to destination states.
        """
        return {
            (src, label): dest
            for src, trans in self.transitions.items()
            for label, dest in trans.items()
        }

    def describe(self):
        """
        Returns a multi-line description of the DFA listing the states
        ``Q``, the alphabet ``Sigma``, the transition table ``delta``, the
        start state ``q0`` and the final states ``F``. Missing transitions are
        shown as ``-``.
        """
        states = sorted(self._states, key=str)
        labels = sorted(self._alphabet, key=str)
        lines = [
            "Q = { " + " ".join(str(s) for s in states) + " }",
            "Sigma = { " + " ".join(str(label) for label in labels) + " }",
            "delta =",
            "\t\t" + "\t".join(str(label) for label in labels),
        ]
        for src in states:
            trans = self.transitions.get(src, {})
            row = [str(trans[label]) if label in trans else "-" for label in labels]
            lines.append(f"\t{src}\t" + "\t".join(row))
        lines.append(f"q0 = {self.initial}")
        finals = sorted(self.final_states, key=str)
        lines.append("F = { " + " ".join(str(s) for s in finals) + " }")
        return "\n".join(lines)

    def dump(self, stream=sys.stdout):
        """
        Prints :meth:`describe` to the specified stream.
        """
        print(self.describe(), file=stream)


# Useful functions


def renumber_dfa(dfa, base=0):
    """
    Returns a copy of a DFA whose states are consecutive integers starting
    from ``base``, numbered in breadth-first order from the start state.
    States that cannot be reached from the start state are numbered last.

    Args:
        dfa (DFA): The DFA to renumber.
        base (int, optional): The first number to use. Defaults to 0.

    Returns:
        DFA: The renumbered DFA. Each new state keeps the NFA member names of
        the state it replaces.
    """
    c = itertools.count(base)
    mapping = {}

    def remap(state):
        if state in mapping:
            newnum = mapping[state]
        else:
            newnum = next(c)
            mapping[state] = newnum
        return newnum

    order = [dfa.initial]
    remap(dfa.initial)
    for state in order:
        trans = dfa.transitions.get(state, {})
        for label in sorted(trans, key=str):
            dest = trans[label]
            if dest not in mapping:
                remap(dest)
                order.append(dest)
    for state in sorted(dfa.all_states() - set(mapping), key=str):
        remap(state)
        order.append(state)

    newdfa = DFA(mapping[dfa.initial], epsilon=dfa.epsilon)
    for label in sorted(dfa.alphabet, key=str):
        newdfa.add_symbol(label)
    for state in order:
        if dfa.is_final(state):
            newdfa.add_final_state(mapping[state], dfa.members(state))
        else:
            newdfa.add_state(mapping[state], dfa.members(state))
    for src, trans in dfa.transitions.items():
        for label, dest in trans.items():
            newdfa.add_transition(mapping[src], label, mapping[dest])
    return newdfa
