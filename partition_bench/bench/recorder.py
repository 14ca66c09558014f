from __future__ import annotations

import json
import platform
import re
import sys
from collections import defaultdict
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from partition_bench.bench.compare import ComparisonPair
from partition_bench.bench.runner import BenchmarkResult


@dataclass(frozen=True)
class RunMeta:
    run_id: str
    ts_utc: str
    python: str
    platform: str
    suite: str
    iterations: int
    warmup: int


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='seconds')


def _default_run_id() -> str:
    return datetime.now(timezone.utc).strftime('%Y%m%dT%H%M%SZ')


def _sanitize_filename(name: str) -> str:
    s = re.sub(r'[^a-zA-Z0-9._-]+', '_', name.strip())
    return s[:180] if len(s) > 180 else s


def _metrics(r: BenchmarkResult) -> dict[str, float | int]:
    s = r.stats
    return {
        'count': s.count,
        'failed': r.failed,
        'rows': r.rows_observed,
        'min_ms': s.min * 1000,
        'max_ms': s.max * 1000,
        'avg_ms': s.mean * 1000,
        'median_ms': s.median * 1000,
        'p95_ms': s.p95 * 1000,
    }


class ResultRecorder:
    """
    < Append benchmark outcomes to <results_dir>/<suite>/<run_id>.jsonl >
    1. One JSON object per line, each carrying the run meta.
    2. Runs never overwrite each other; a run appends to its own file.
    """

    def __init__(self, results_dir: str | Path, *, suite: str, iterations: int, warmup: int, run_id: str | None = None):
        self.meta = RunMeta(
            run_id=run_id or _default_run_id(),
            ts_utc=_utc_now_iso(),
            python=sys.version.split()[0],
            platform=platform.platform(),
            suite=suite,
            iterations=iterations,
            warmup=warmup,
        )
        base = Path(results_dir) / suite
        base.mkdir(parents=True, exist_ok=True)
        self.path = base / f'{_sanitize_filename(self.meta.run_id)}.jsonl'

    def _write(self, record: dict[str, Any]) -> None:
        payload = {'meta': asdict(self.meta), **record}
        with self.path.open('a', encoding='utf-8') as f:
            f.write(json.dumps(payload, ensure_ascii=False))
            f.write('\n')

    def record_result(self, r: BenchmarkResult) -> None:
        self._write({'type': 'result', 'scenario': r.name, 'query': r.query, 'metrics': _metrics(r)})

    def record_comparison(self, cmp: ComparisonPair) -> None:
        self._write(
            {
                'type': 'comparison',
                'scenario': cmp.pair.name,
                'strategy': str(cmp.pair.strategy),
                'baseline': _metrics(cmp.baseline),
                'partitioned': _metrics(cmp.partitioned),
                'improvement_pct': cmp.improvement,
            }
        )


@dataclass(frozen=True)
class RunSummary:
    run_id: str
    ts_utc: str
    suites: tuple[str, ...]
    records: int

    def format(self) -> str:
        return f'{self.run_id}  ts={self.ts_utc}  suites={",".join(self.suites)}  records={self.records}'


def list_runs(results_dir: str | Path) -> list[RunSummary]:
    """One summary per run id found under `results_dir`, ordered by run id."""
    runs: dict[str, list[tuple[str, str]]] = defaultdict(list)  # run_id -> [(ts, suite)]
    for p in Path(results_dir).rglob('*.jsonl'):
        for line in p.read_text(encoding='utf-8').splitlines():
            if not line.strip():
                continue
            meta = json.loads(line)['meta']
            runs[meta['run_id']].append((meta['ts_utc'], meta['suite']))

    return [
        RunSummary(
            run_id=run_id,
            ts_utc=min(ts for ts, _ in entries),
            suites=tuple(sorted({suite for _, suite in entries})),
            records=len(entries),
        )
        for run_id, entries in sorted(runs.items())
    ]
