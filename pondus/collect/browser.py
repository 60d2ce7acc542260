"""Browser snapshot capabilities for leaderboards that only render client-side.

A browser capability turns a URL into the page's accessibility-tree text:

    - row "1 Claude Code 52.9% 1.06% ...":
      - cell "1"
      - cell "Claude Code"

Two backends produce this format:

- AgentBrowser drives the external ``agent-browser`` CLI via subprocess.
- PlaywrightBrowser renders the page with headless Chromium and takes the
  ARIA snapshot of <body>.

``snapshot()`` never raises; failures come back on the SnapshotResult so the
scrape adapters (and their tests) only deal with one outcome type.
"""

import importlib.util
import logging
import shutil
import subprocess
import threading
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)

DEFAULT_AGENT_BROWSER = "agent-browser"

# Per-command timeout for agent-browser, seconds
COMMAND_TIMEOUT = 60

# Wait after navigation for client-side rendering, milliseconds
SETTLE_WAIT_MS = 2000

# Timeout for page load in milliseconds
PAGE_LOAD_TIMEOUT_MS = 30000


@dataclass
class SnapshotResult:
    """Outcome of one snapshot: text on success, error otherwise."""
    text: Optional[str] = None
    error: Optional[str] = None
    tool_missing: bool = False

    @property
    def ok(self) -> bool:
        return self.text is not None and self.error is None and not self.tool_missing


class AgentBrowser:
    """Snapshot pages through the ``agent-browser`` command-line tool.

    The tool drives a single shared page, so one open/wait/snapshot sequence
    runs at a time per instance.
    """

    name = "agent-browser"

    def __init__(self, path: str = DEFAULT_AGENT_BROWSER, timeout: float = COMMAND_TIMEOUT):
        self.path = path
        self.timeout = timeout
        self._lock = threading.Lock()

    def is_available(self) -> bool:
        return shutil.which(self.path) is not None

    def _run(self, args: List[str]) -> SnapshotResult:
        step = args[0]
        try:
            proc = subprocess.run(
                [self.path] + args,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            return SnapshotResult(error=f"{self.path} not found", tool_missing=True)
        except subprocess.TimeoutExpired:
            return SnapshotResult(error=f"agent-browser {step} timed out after {self.timeout}s")
        except OSError as e:
            return SnapshotResult(error=f"Failed to execute {self.path} {' '.join(args)}: {e}")

        if proc.returncode != 0:
            details = (proc.stderr or "").strip() or (proc.stdout or "").strip() or f"exit status {proc.returncode}"
            return SnapshotResult(error=f"agent-browser {' '.join(args)} failed: {details}")

        return SnapshotResult(text=proc.stdout or "")

    def snapshot(self, url: str) -> SnapshotResult:
        """Open ``url``, let it settle, and return the accessibility snapshot."""
        with self._lock:
            opened = self._run(["open", url])
            if not opened.ok:
                return opened

            waited = self._run(["wait", str(SETTLE_WAIT_MS)])
            if not waited.ok:
                logger.debug(f"agent-browser wait failed, snapshotting anyway: {waited.error}")

            return self._run(["snapshot"])


class PlaywrightBrowser:
    """Snapshot pages with Playwright's headless Chromium.

    Requires the ``browser`` extra: pip install pondus[browser] && playwright install chromium
    """

    name = "playwright"

    def __init__(self, timeout_ms: int = PAGE_LOAD_TIMEOUT_MS):
        self.timeout_ms = timeout_ms

    def is_available(self) -> bool:
        return importlib.util.find_spec("playwright") is not None

    def snapshot(self, url: str) -> SnapshotResult:
        try:
            from playwright.sync_api import Error as PlaywrightError
            from playwright.sync_api import sync_playwright
        except ImportError:
            return SnapshotResult(error="playwright is not installed", tool_missing=True)

        try:
            with sync_playwright() as p:
                browser = p.chromium.launch(headless=True)
                try:
                    page = browser.new_page(viewport={"width": 1280, "height": 2000})
                    page.goto(url, timeout=self.timeout_ms, wait_until="networkidle")
                    page.wait_for_timeout(SETTLE_WAIT_MS)
                    text = page.locator("body").aria_snapshot()
                finally:
                    browser.close()
        except PlaywrightError as e:
            return SnapshotResult(error=f"playwright snapshot of {url} failed: {e}")

        return SnapshotResult(text=text)


def make_browser(backend: str, agent_browser_path: str = DEFAULT_AGENT_BROWSER):
    """Build the configured browser capability."""
    if backend == PlaywrightBrowser.name:
        return PlaywrightBrowser()
    if backend == AgentBrowser.name:
        return AgentBrowser(agent_browser_path)
    raise ValueError(f"Unknown browser backend: {backend}. Expected: agent-browser, playwright")
