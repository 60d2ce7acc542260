"""Provider adapters, one module per leaderboard."""

from .aider import AiderSource
from .arena import ArenaSource
from .artificial_analysis import ArtificialAnalysisSource
from .livebench import LiveBenchSource
from .seal import SealSource
from .swe_rebench import SweRebenchSource
from .swebench import SweBenchSource
from .terminal_bench import TerminalBenchSource

__all__ = [
    "AiderSource",
    "ArenaSource",
    "ArtificialAnalysisSource",
    "LiveBenchSource",
    "SealSource",
    "SweRebenchSource",
    "SweBenchSource",
    "TerminalBenchSource",
]
