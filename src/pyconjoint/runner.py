"""End-to-end simulated run.

Expands segments into agents, generates their tasks and answers every task
with a ChoiceProducer. The heuristic simulator is used unless another
producer is supplied.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

from pyconjoint.algorithms.simulate import ChoiceProducer, HeuristicChoiceProducer, batch_simulate
from pyconjoint.algorithms.taskgen import generate_tasks, task_stats
from pyconjoint.core.config import EstimationConfig
from pyconjoint.core.result import ResultsSummary, TaskStats
from pyconjoint.core.schema import Agent, Experiment, Response, Task, expand_segments
from pyconjoint.core.types import RandomSource, as_generator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationRun:
    """
    Everything a simulated run produced.

    Attributes:
        experiment: The experiment that was run
        agents: Agents in the (shuffled) order they were processed
        tasks: Generated tasks, grouped by agent
        responses: One response per answered task
        stats: Task composition
        computation_time_ms: Wall time of the run
    """

    experiment: Experiment
    agents: tuple[Agent, ...]
    tasks: tuple[Task, ...]
    responses: tuple[Response, ...]
    stats: TaskStats
    computation_time_ms: float = 0.0

    def results(
        self,
        config: EstimationConfig | None = None,
        rng: RandomSource = None,
    ) -> ResultsSummary:
        """Estimate results from this run's responses."""
        from pyconjoint.estimator import compute_results

        return compute_results(
            responses=self.responses,
            alternatives=self.experiment.alternatives,
            features=self.experiment.features,
            segments=self.experiment.segments,
            tasks=self.tasks,
            agents=self.agents,
            config=config,
            rng=rng,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "tasks": [t.to_dict() for t in self.tasks],
            "responses": [r.to_dict() for r in self.responses],
            "stats": self.stats.to_dict(),
        }

    def __repr__(self) -> str:
        return (
            f"SimulationRun(agents={len(self.agents)}, tasks={len(self.tasks)}, "
            f"responses={len(self.responses)})"
        )


def run_simulation(
    experiment: Experiment,
    producer: ChoiceProducer | None = None,
    rng: RandomSource = None,
    shuffle_agents: bool = True,
) -> SimulationRun:
    """
    Run a complete simulated experiment.

    One Generator drives the agent shuffle, task generation and (for the
    default producer) the choice noise, so a seed reproduces the whole run.

    Args:
        experiment: Schema, alternatives, segments and task plan
        producer: Choice producer; defaults to HeuristicChoiceProducer
        rng: numpy Generator or seed
        shuffle_agents: Interleave segments instead of processing them in
            declaration order

    Returns:
        SimulationRun with agents, tasks and responses

    Example:
        >>> run = run_simulation(load_experiment("headphones.json"), rng=42)
        >>> summary = run.results(rng=42)
        >>> summary.shares.overall
    """
    start_time = time.perf_counter()
    gen = as_generator(rng)

    agents = expand_segments(list(experiment.segments))
    if shuffle_agents and len(agents) > 1:
        agents = [agents[i] for i in gen.permutation(len(agents))]

    plan = experiment.task_plan
    tasks = generate_tasks(agents, experiment.alternatives, plan.choice_set_size, plan, gen)

    producer = producer or HeuristicChoiceProducer(rng=gen)
    responses = batch_simulate(
        tasks,
        agents,
        experiment.alternatives,
        experiment.features,
        include_none=plan.include_none,
        producer=producer,
    )

    computation_time = (time.perf_counter() - start_time) * 1000
    logger.info(
        "Simulated %d agents, %d tasks, %d responses in %.1f ms",
        len(agents),
        len(tasks),
        len(responses),
        computation_time,
    )
    return SimulationRun(
        experiment=experiment,
        agents=tuple(agents),
        tasks=tuple(tasks),
        responses=tuple(responses),
        stats=task_stats(tasks),
        computation_time_ms=computation_time,
    )
