from __future__ import annotations

from histeval.strategies.base import Strategy, as_strategy
from histeval.strategies.baselines import FrequentStrategy, RandomStrategy
from histeval.strategies.directory import DirectorySensitiveStrategy
from histeval.strategies.distance import (
    DistParams,
    DynamicRecordDistanceStrategy,
    RecordDistanceStrategy,
)
from histeval.strategies.markov import MarkovChainCmdStrategy, MarkovChainStrategy
from histeval.strategies.recent import RecentStrategy
from histeval.strategies.recent_bash import RecentBashStrategy

DEFAULT_MAX_DEPTH = 3000


def default_strategies(
    *,
    slow: bool = False,
    baselines: bool = False,
    max_candidates: int = 50,
    seed: int | None = None,
) -> list[Strategy]:
    """Strategies evaluated by default, in evaluation order.

    Markov chains are ``slow`` and the frequency/random ``baselines`` are
    opt-in comparison points.
    """
    strategies: list[Strategy] = [
        DynamicRecordDistanceStrategy(
            DistParams(pwd=10, real_pwd=10, session_id=1, time=1, git=10),
            max_depth=DEFAULT_MAX_DEPTH,
            label="10*pwd,10*realpwd,session,time,10*git",
        ),
        RecordDistanceStrategy(
            DistParams(pwd=10, real_pwd=10, session_id=1, time=1),
            max_depth=DEFAULT_MAX_DEPTH,
            label="10*pwd,10*realpwd,session,time",
        ),
        RecentBashStrategy(),
        as_strategy(RecentStrategy()),
        DirectorySensitiveStrategy(),
    ]

    if baselines:
        strategies.append(as_strategy(FrequentStrategy()))
        strategies.append(as_strategy(RandomStrategy(candidates_size=max_candidates, seed=seed)))

    if slow:
        strategies.extend(
            [
                MarkovChainCmdStrategy(order=2),
                MarkovChainCmdStrategy(order=1),
                MarkovChainStrategy(order=2),
                MarkovChainStrategy(order=1),
            ]
        )
    return strategies
