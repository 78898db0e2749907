"""Two-step redirect fallback for gateway checkout pages.

If the redirect cannot be opened automatically (popup blockers, embedded
browsers), the target is kept and the shopper follows it with an explicit
second click. Payment state is unaffected either way.
"""

import webbrowser
from collections.abc import Callable

import structlog

logger = structlog.get_logger(__name__)


class RedirectLauncher:
    def __init__(self, opener: Callable[[str], bool] = webbrowser.open) -> None:
        self.opener = opener
        self.pending_url: str | None = None

    def launch(self, url: str) -> bool:
        """Try to open ``url``. Returns False when a manual click is needed."""
        if self.opener(url):
            self.pending_url = None
            return True

        logger.info("Automatic redirect blocked, waiting for manual click", url=url)
        self.pending_url = url
        return False

    def follow_pending(self) -> str:
        """Navigate to the stored target on the shopper's explicit click."""
        if self.pending_url is None:
            raise LookupError("No pending redirect")
        url, self.pending_url = self.pending_url, None
        self.opener(url)
        return url
