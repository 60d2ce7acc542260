"""
Provider registry.

The set of providers is closed: ``ProviderId`` enumerates all of them and
``SOURCE_CLASSES`` must map every member to its adapter. Adding a provider
means adding an enum member, a module under ``sources/`` and a mapping entry.
"""

from enum import Enum
from typing import Dict, List, Optional, Type

from .aliases import AliasTable
from .base_source import BaseSource
from .browser import make_browser
from .sources import (
    AiderSource,
    ArenaSource,
    ArtificialAnalysisSource,
    LiveBenchSource,
    SealSource,
    SweBenchSource,
    SweRebenchSource,
    TerminalBenchSource,
)
from .transport import HttpTransport
from ..config.settings import Settings


class ProviderId(Enum):
    """Stable provider identifiers (also the cache keys)."""
    AIDER = "aider"
    ARENA = "arena"
    ARTIFICIAL_ANALYSIS = "artificial-analysis"
    LIVEBENCH = "livebench"
    SEAL = "seal"
    SWEBENCH = "swebench"
    SWE_REBENCH = "swe-rebench"
    TERMINAL_BENCH = "terminal-bench"


SOURCE_CLASSES: Dict[ProviderId, Type[BaseSource]] = {
    ProviderId.AIDER: AiderSource,
    ProviderId.ARENA: ArenaSource,
    ProviderId.ARTIFICIAL_ANALYSIS: ArtificialAnalysisSource,
    ProviderId.LIVEBENCH: LiveBenchSource,
    ProviderId.SEAL: SealSource,
    ProviderId.SWEBENCH: SweBenchSource,
    ProviderId.SWE_REBENCH: SweRebenchSource,
    ProviderId.TERMINAL_BENCH: TerminalBenchSource,
}

_unmapped = set(ProviderId) - set(SOURCE_CLASSES)
if _unmapped:
    raise RuntimeError(f"Providers without an adapter: {sorted(p.value for p in _unmapped)}")

for _pid, _cls in SOURCE_CLASSES.items():
    if _cls.source_id != _pid.value:
        raise RuntimeError(f"{_cls.__name__}.source_id {_cls.source_id!r} does not match {_pid.value!r}")


def build_sources(
    settings: Settings,
    aliases: AliasTable,
    transport: Optional[HttpTransport] = None,
    browser=None,
) -> List[BaseSource]:
    """
    Instantiate every adapter, sharing one transport and one browser.

    Args:
        settings: Runtime settings (timeout, browser backend)
        aliases: Alias table used for name resolution
        transport: HTTP transport (default: HttpTransport with settings timeout)
        browser: Browser capability (default: from settings.browser)

    Returns:
        Adapters ordered by provider id
    """
    transport = transport or HttpTransport(timeout=settings.http_timeout)
    browser = browser or make_browser(settings.browser, settings.agent_browser_path())

    return [
        SOURCE_CLASSES[pid](aliases, transport=transport, browser=browser)
        for pid in sorted(ProviderId, key=lambda p: p.value)
    ]
