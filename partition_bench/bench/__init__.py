from .catalog import BENCHMARK_QUERIES, COMPARISON_PAIRS, QueryPair, QuerySpec
from .compare import ComparisonEngine, ComparisonPair, SkippedPair, describe_improvement, improvement
from .runner import BenchmarkResult, BenchmarkRunner, DurationSample, draw_params
from .stats import LatencyStats, summarize

__all__ = [
    'BENCHMARK_QUERIES',
    'COMPARISON_PAIRS',
    'QueryPair',
    'QuerySpec',
    'ComparisonEngine',
    'ComparisonPair',
    'SkippedPair',
    'describe_improvement',
    'improvement',
    'BenchmarkResult',
    'BenchmarkRunner',
    'DurationSample',
    'draw_params',
    'LatencyStats',
    'summarize',
]
