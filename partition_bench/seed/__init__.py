from .batch import BatchBuilder, build_insert
from .pool import run_workers, split_ranges
from .progress import ProgressCounter, ProgressReporter
from .records import SeedTarget, build_seed_plan
from .seeder import Seeder, SeedSummary, run_seeding, truncate_tables
from .tracker import DuplicateTracker

__all__ = [
    'BatchBuilder',
    'build_insert',
    'run_workers',
    'split_ranges',
    'ProgressCounter',
    'ProgressReporter',
    'SeedTarget',
    'build_seed_plan',
    'Seeder',
    'SeedSummary',
    'run_seeding',
    'truncate_tables',
    'DuplicateTracker',
]
