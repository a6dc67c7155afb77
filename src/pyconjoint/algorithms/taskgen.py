"""Choice task generation.

Builds the per-agent sequence of choice sets shown during a run. Every
combination of ``choice_set_size`` alternatives is enumerated once and the
regular tasks cycle through that list, so with enough tasks each agent sees
every pairing (or triple) the same number of times.

Holdout tasks continue the cycle where the regular tasks stopped and are
kept out of model fitting. Repeat tasks re-show an earlier regular task's
alternatives so answer stability can be measured.
"""

from __future__ import annotations

import logging
import warnings
from itertools import combinations
from typing import Sequence, TypeVar, Union

import numpy as np

from pyconjoint.core.exceptions import DataQualityWarning
from pyconjoint.core.result import TaskStats
from pyconjoint.core.schema import CHOICE_FORMATS, Agent, Alternative, Task, TaskPlan
from pyconjoint.core.types import RandomSource, as_generator

logger = logging.getLogger(__name__)

T = TypeVar("T")


def choice_set_size_for(choice_format: str) -> int:
    """Number of alternatives per task for a choice format ("AB" -> 2)."""
    return CHOICE_FORMATS.get(choice_format, CHOICE_FORMATS["AB"])[0]


def includes_none(choice_format: str) -> bool:
    """Whether a choice format offers the "none of these" option."""
    return CHOICE_FORMATS.get(choice_format, CHOICE_FORMATS["AB"])[1]


def _shuffled(items: Sequence[T], rng: np.random.Generator) -> list[T]:
    # Fisher-Yates on a copy
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = int(rng.integers(0, i + 1))
        result[i], result[j] = result[j], result[i]
    return result


def _alternative_ids(alternatives: Sequence[Union[Alternative, str]]) -> list[str]:
    return [a if isinstance(a, str) else a.id for a in alternatives]


def generate_tasks(
    agents: Sequence[Agent],
    alternatives: Sequence[Union[Alternative, str]],
    choice_set_size: int | None = None,
    task_plan: TaskPlan | None = None,
    rng: RandomSource = None,
) -> list[Task]:
    """
    Generate the choice tasks for every agent.

    Per agent the plan yields ``tasks_per_agent - holdouts - repeats``
    regular tasks, then the holdouts, then the repeats. The agent's list is
    shuffled before ids ``f"{agent_id}_task_{index}"`` are assigned, and
    each repeat's ``is_repeat_of`` points at the final id of its source.

    Args:
        agents: Agents to generate tasks for
        alternatives: Alternatives (or their ids) in input order
        choice_set_size: Alternatives per task; defaults to the plan's
            choice format
        task_plan: Task allocation; defaults to ``TaskPlan()``
        rng: numpy Generator or seed used for every shuffle

    Returns:
        Tasks grouped by agent in agent order. Empty (with a
        DataQualityWarning) when there are fewer alternatives than
        ``choice_set_size``.

    Example:
        >>> plan = TaskPlan(tasks_per_agent=10, include_holdouts=2, include_repeats=2)
        >>> tasks = generate_tasks(agents, alternatives, 2, plan, rng=42)
    """
    plan = task_plan or TaskPlan()
    size = choice_set_size if choice_set_size is not None else plan.choice_set_size
    gen = as_generator(rng)

    alt_ids = _alternative_ids(alternatives)
    combos = list(combinations(alt_ids, size)) if size > 0 else []
    if not combos:
        warnings.warn(
            f"Not enough alternatives for the choice format: need {size}, "
            f"have {len(alt_ids)}. No tasks generated.",
            DataQualityWarning,
            stacklevel=2,
        )
        return []

    holdouts = plan.include_holdouts
    repeats = plan.include_repeats
    regular = plan.tasks_per_agent - holdouts - repeats
    if regular < 0:
        warnings.warn(
            f"Task plan reserves {holdouts} holdout and {repeats} repeat tasks "
            f"but only {plan.tasks_per_agent} tasks per agent; no regular tasks generated.",
            DataQualityWarning,
            stacklevel=2,
        )
        regular = 0

    def arrange(combo: Sequence[str]) -> tuple[str, ...]:
        return tuple(_shuffled(combo, gen)) if plan.randomize_order else tuple(combo)

    tasks: list[Task] = []
    for agent in agents:
        # (shown alternatives, is_holdout, index of source task or None)
        drafts: list[tuple[tuple[str, ...], bool, int | None]] = []

        for i in range(regular):
            drafts.append((arrange(combos[i % len(combos)]), False, None))

        for i in range(holdouts):
            drafts.append((arrange(combos[(regular + i) % len(combos)]), True, None))

        # Repeats draw from the regular tasks, or the holdouts if there are none
        pool = list(range(regular)) if regular > 0 else list(range(len(drafts)))
        for i in range(repeats):
            if not pool:
                break
            source = pool[i % len(pool)]
            drafts.append((arrange(drafts[source][0]), False, source))

        order = _shuffled(range(len(drafts)), gen)
        final_index = {draft_idx: position for position, draft_idx in enumerate(order)}

        for position, draft_idx in enumerate(order):
            shown, is_holdout, source = drafts[draft_idx]
            repeat_of = None
            if source is not None:
                repeat_of = f"{agent.id}_task_{final_index[source]}"
            tasks.append(
                Task(
                    id=f"{agent.id}_task_{position}",
                    agent_id=agent.id,
                    shown_alternatives=shown,
                    is_holdout=is_holdout,
                    is_repeat_of=repeat_of,
                )
            )

    logger.debug(
        "Generated %d tasks for %d agents from %d combinations",
        len(tasks),
        len(agents),
        len(combos),
    )
    return tasks


def task_stats(tasks: Sequence[Task]) -> TaskStats:
    """Count regular, holdout and repeat tasks and the agents they cover."""
    holdouts = sum(1 for t in tasks if t.is_holdout)
    repeats = sum(1 for t in tasks if t.is_repeat_of)
    regular = sum(1 for t in tasks if not t.is_holdout and not t.is_repeat_of)
    return TaskStats(
        total=len(tasks),
        regular=regular,
        holdouts=holdouts,
        repeats=repeats,
        unique_agents=len({t.agent_id for t in tasks}),
    )
