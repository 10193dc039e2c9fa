from __future__ import annotations

from histeval.strategies.base import SimpleStrategy, SimpleStrategyWrapper, Strategy, as_strategy
from histeval.strategies.baselines import FrequentStrategy, RandomStrategy
from histeval.strategies.directory import DirectorySensitiveStrategy
from histeval.strategies.distance import (
    DistParams,
    DynamicRecordDistanceStrategy,
    RecordDistanceStrategy,
    record_distance,
)
from histeval.strategies.markov import MarkovChainCmdStrategy, MarkovChainStrategy
from histeval.strategies.presets import default_strategies
from histeval.strategies.recent import RecentStrategy
from histeval.strategies.recent_bash import RecentBashStrategy

__all__ = [
    "DirectorySensitiveStrategy",
    "DistParams",
    "DynamicRecordDistanceStrategy",
    "FrequentStrategy",
    "MarkovChainCmdStrategy",
    "MarkovChainStrategy",
    "RandomStrategy",
    "RecentBashStrategy",
    "RecentStrategy",
    "RecordDistanceStrategy",
    "SimpleStrategy",
    "SimpleStrategyWrapper",
    "Strategy",
    "as_strategy",
    "default_strategies",
    "record_distance",
]
