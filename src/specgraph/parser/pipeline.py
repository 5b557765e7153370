"""Ordered, fail-fast composition of parser steps.

A :data:`ParserStep` is any callable that takes the run's
:class:`~specgraph.parser.state.ParserState` and returns a value, or an
awaitable of a value when the step has asynchronous work to do.  Steps are
always run one after another:

* :func:`sequence` awaits each step before even creating the next one, and the
  first exception ends the whole sequence.
* :func:`traverse` builds such a sequence from a list of items.
* :func:`run` / :func:`arun` execute a step against a state and mark the state
  failed when a specgraph error escapes, so it cannot be reused.

Steps are never scheduled concurrently, even when they are coroutines: model
resolution reads and writes the shared cache, and its placeholder protocol is
only safe when exactly one resolution is in flight.

Example::

    state = ParserState(document)
    run(parse_all_schemas(), state)
    for entry in state.models.models():
        print(entry.pointer, entry.type.describe())
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Iterable
from typing import Callable, TypeVar, Union

from specgraph.exceptions import SpecgraphError
from specgraph.parser.state import ParserState

T = TypeVar("T")
A = TypeVar("A")

ParserStep = Callable[[ParserState], Union[T, Awaitable[T]]]


async def evaluate(step: ParserStep[T], state: ParserState) -> T:
    """Run *step* against *state*, awaiting its result if it is awaitable."""
    result = step(state)
    if inspect.isawaitable(result):
        result = await result
    return result


async def sequence(state: ParserState, steps: Iterable[ParserStep[T]]) -> list[T]:
    """Run *steps* in order and collect their results.

    *steps* is consumed lazily, so a step that comes after a failure is never
    created, let alone run.
    """
    results: list[T] = []
    for step in steps:
        results.append(await evaluate(step, state))
    return results


def traverse(items: Iterable[A], fn: Callable[[A], ParserStep[T]]) -> ParserStep[list[T]]:
    """Return a step that runs ``fn(item)`` for every item, in order, stopping at the first failure."""

    async def _step(state: ParserState) -> list[T]:
        return await sequence(state, (fn(item) for item in items))

    return _step


def run(step: ParserStep[T], state: ParserState) -> T:
    """Execute *step* synchronously in a fresh event loop.

    Raises:
        SpecgraphError: Whatever the first failing step raised.  *state* is
            marked failed before the error propagates.
    """
    return asyncio.run(arun(step, state))


async def arun(step: ParserStep[T], state: ParserState) -> T:
    """Execute *step* from inside a running event loop.  See :func:`run`."""
    state.ensure_usable()
    try:
        return await evaluate(step, state)
    except SpecgraphError:
        state.mark_failed()
        raise
