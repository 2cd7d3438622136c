# Copyright 2026 The Powerset Authors. All rights reserved.
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
# THIS SOFTWARE IS PROVIDED BY THE POWERSET AUTHORS ``AS IS'' AND ANY EXPRESS OR
# IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE IMPLIED WARRANTIES OF
# MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO
# EVENT SHALL THE POWERSET AUTHORS OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT
# LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA,
# OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING
# NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
#
# The views and conclusions contained in the software and documentation are
# those of the authors and should not be interpreted as representing official
# policies, either expressed or implied, of the Powerset Authors.


"""
Name-keyed automaton states and the canonical naming of composite states.

A :class:`State` is identified purely by its name: two states built with the
same name compare equal and hash the same even if they were created by
different automata. Subset construction relies on this to unify states, and
on :class:`StateNamer` to give every set of states one canonical name.
"""

from functools import total_ordering

from cached_property import cached_property

# Errors


class AutomatonError(Exception):
    """
    Base class for errors raised while building or converting an automaton.
    """


class UnknownStateError(AutomatonError, KeyError):
    """
    Raised when a transition refers to a state name that was never added to
    the automaton.
    """

    def __init__(self, name):
        super().__init__(name)
        self.name = name

    def __str__(self):
        return f"No state named {self.name!r} has been added"


class EpsilonSymbolError(AutomatonError, ValueError):
    """
    Raised when the epsilon marker is used where a real input symbol is
    expected, for example when declaring the alphabet.
    """


# States


@total_ordering
class State:
    """
    A named automaton state with a transition function from input symbols to
    sets of successor states.

    NFA states may record several successors per symbol; states of a DFA
    record at most one, but both are represented by this class.

    Attributes:
        name (str): The name of the state, unique within one automaton.
    """

    def __init__(self, name: str):
        if not isinstance(name, str):
            raise TypeError(f"State names must be strings, not {name!r}")
        if not name:
            raise ValueError("State names must not be empty")
        self.name = name
        self._transitions = {}

    def __repr__(self) -> str:
        return f"<State {self.name!r}>"

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, State):
            return NotImplemented
        return self.name == other.name

    def __lt__(self, other):
        if not isinstance(other, State):
            return NotImplemented
        return self.name < other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def add_transition(self, symbol, target: "State"):
        """
        Records that reading ``symbol`` in this state may move to ``target``.

        Calling this repeatedly with the same symbol accumulates targets
        instead of replacing them.

        Args:
            symbol (object): The input symbol (or epsilon marker).
            target (State): The successor state.
        """
        self._transitions.setdefault(symbol, set()).add(target)

    def transitions(self, symbol) -> frozenset:
        """
        Returns the set of successor states for ``symbol``.

        Returns:
            frozenset: The successors, empty if none were recorded.
        """
        return frozenset(self._transitions.get(symbol, ()))

    def labels(self):
        """
        Returns an iterator of the symbols this state has transitions on.
        """
        return iter(self._transitions)


# Canonical names


class StateNamer:
    """
    Derives the canonical name of a set of states.

    The member names are sorted, any backslash or separator character inside
    a name is escaped with a backslash, and the result is joined with the
    separator and wrapped in the brackets. The empty set is named by the bare
    brackets (``"[]"`` by default).

    The name depends only on the set of member names, never on the order the
    members were discovered in, and two different sets never share a name.

    Args:
        separator (str, optional): Placed between member names.
            Defaults to ``", "``.
        brackets (tuple, optional): The opening and closing delimiters.
            Defaults to ``("[", "]")``.

    Example:
        >>> StateNamer().name([State("q"), State("p")])
        '[p, q]'
        >>> StateNamer(separator="|", brackets=("{", "}")).name(["b", "a"])
        '{a|b}'
    """

    def __init__(self, separator=", ", brackets=("[", "]")):
        if not separator:
            raise ValueError("The separator must not be empty")
        if separator[0] == "\\":
            raise ValueError("The separator must not start with a backslash")
        self.separator = separator
        self.opener, self.closer = brackets
        self._special = frozenset("\\" + separator[0])

    def __repr__(self):
        return (
            f"{type(self).__name__}({self.separator!r}, "
            f"({self.opener!r}, {self.closer!r}))"
        )

    def escape(self, name: str) -> str:
        special = self._special
        if not special.intersection(name):
            return name
        return "".join("\\" + char if char in special else char for char in name)

    def name(self, states) -> str:
        """
        Returns the canonical name of ``states``, an iterable of
        :class:`State` objects or plain state names.
        """
        names = sorted({_state_name(s) for s in states})
        inner = self.separator.join(self.escape(n) for n in names)
        return f"{self.opener}{inner}{self.closer}"

    __call__ = name


DEFAULT_NAMER = StateNamer()


def _state_name(state):
    return state.name if isinstance(state, State) else state


def canonical_name(states, namer=None) -> str:
    """
    Returns the canonical name of a set of states using ``namer`` or the
    default ``[a, b, c]`` naming.
    """
    return (namer or DEFAULT_NAMER).name(states)


class StateSet(frozenset):
    """
    An immutable set of NFA states standing for one composite DFA state.

    Equality and hashing are those of the underlying frozenset, so two
    composites are equal when their members have the same names. The
    canonical name is computed once on first access.
    """

    def __new__(cls, states=(), namer=None):
        self = super().__new__(cls, states)
        self.namer = namer or DEFAULT_NAMER
        return self

    def __repr__(self):
        return f"<StateSet {self.name}>"

    @cached_property
    def name(self) -> str:
        return self.namer.name(self)

    def names(self) -> frozenset:
        """Returns the names of the member states."""
        return frozenset(s.name for s in self)
