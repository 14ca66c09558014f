from __future__ import annotations

import json
from pathlib import Path

import pytest

from partition_bench.bench.catalog import COMPARISON_PAIRS
from partition_bench.bench.compare import ComparisonPair
from partition_bench.bench.recorder import ResultRecorder, list_runs
from partition_bench.bench.runner import BenchmarkResult, DurationSample
from partition_bench.bench.stats import summarize


def _result(name: str, durations: list[float]) -> BenchmarkResult:
    return BenchmarkResult(
        name=name,
        query='SELECT COUNT(*) FROM books',
        iterations=len(durations),
        samples=tuple(DurationSample(name, i, d) for i, d in enumerate(durations)),
        rows_observed=len(durations),
        last_row_count=1,
        stats=summarize(durations),
    )


def _lines(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text(encoding='utf-8').splitlines()]


def test_results_are_appended_as_json_lines(tmp_path: Path) -> None:
    recorder = ResultRecorder(tmp_path, suite='benchmark', iterations=2, warmup=1, run_id='run 1/a')
    recorder.record_result(_result('Full table count', [0.002, 0.004]))
    recorder.record_result(_result('Primary key lookup', [0.001, 0.001]))

    assert recorder.path == tmp_path / 'benchmark' / 'run_1_a.jsonl'
    first, second = _lines(recorder.path)
    assert first['type'] == 'result'
    assert first['scenario'] == 'Full table count'
    assert first['metrics']['avg_ms'] == pytest.approx(3.0)
    assert first['metrics']['failed'] == 0
    assert first['meta']['run_id'] == 'run 1/a'
    assert first['meta']['iterations'] == 2
    assert second['scenario'] == 'Primary key lookup'


def test_comparison_record_carries_improvement(tmp_path: Path) -> None:
    recorder = ResultRecorder(tmp_path, suite='compare', iterations=1, warmup=0, run_id='r')
    cmp = ComparisonPair(
        pair=COMPARISON_PAIRS[0],
        baseline=_result('No Partition', [0.010]),
        partitioned=_result('With Partition', [0.008]),
    )

    recorder.record_comparison(cmp)

    (line,) = _lines(recorder.path)
    assert line['type'] == 'comparison'
    assert line['strategy'] == 'hash'
    assert line['improvement_pct'] == pytest.approx(20.0)
    assert line['baseline']['avg_ms'] == pytest.approx(10.0)


def test_list_runs_groups_lines_by_run(tmp_path: Path) -> None:
    bench = ResultRecorder(tmp_path, suite='benchmark', iterations=1, warmup=0, run_id='b-run')
    bench.record_result(_result('Full table count', [0.001]))
    bench.record_result(_result('Primary key lookup', [0.001]))
    ResultRecorder(tmp_path, suite='compare', iterations=1, warmup=0, run_id='a-run').record_result(
        _result('No Partition', [0.001])
    )

    runs = list_runs(tmp_path)

    assert [r.run_id for r in runs] == ['a-run', 'b-run']
    assert runs[0].suites == ('compare',)
    assert runs[1].records == 2
    assert runs[1].format().startswith('b-run  ts=')
