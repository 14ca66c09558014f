from __future__ import annotations

import argparse

from partition_bench.bench.recorder import list_runs


def main() -> None:
    parser = argparse.ArgumentParser(description='List recorded benchmark / comparison runs.')
    parser.add_argument('results_dir', nargs='?', default='results', help='Directory given to --results-dir')
    args = parser.parse_args()

    for run in list_runs(args.results_dir):
        print(run.format())


if __name__ == '__main__':
    main()
