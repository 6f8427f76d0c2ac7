# src/crawler/managers/progress_manager.py
import sys
from tqdm import tqdm
import logging

logger = logging.getLogger(__name__)


class ProgressManager:
    """
    Manages the complete lifecycle of a tqdm progress bar for a mini-crawl.
    """

    def __init__(self, total: int, desc: str, unit: str = "page"):
        if total <= 0:
            total = 1

        self.pbar = tqdm(
            total=total,
            desc=desc,
            unit=f" {unit}",
            dynamic_ncols=True,
            smoothing=0.1,
            mininterval=0.5,
            postfix={"pages": "0", "failures": 0},
            bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}] {postfix}",
            file=sys.stderr
        )

    def advance(self, steps: int = 1, pages_count: int = None, failures_count: int = None):
        """Increments the bar and refreshes the page/failure counters."""
        if not self.pbar:
            return
        self.pbar.update(steps)

        postfix = {}
        if pages_count is not None:
            postfix["pages"] = str(pages_count)
        if failures_count is not None:
            postfix["failures"] = failures_count
        if postfix:
            self.pbar.set_postfix(postfix, refresh=False)

    def close(self, final_pages: int, final_failures: int = 0, partial: bool = False):
        """
        Closes the bar with the final counters.

        Args:
            partial: True when the crawl was cut short by cancellation or its deadline.
        """
        if not self.pbar:
            return

        pages_str = f"{final_pages}/partial" if partial else str(final_pages)
        self.pbar.set_postfix({"pages": pages_str, "failures": final_failures}, refresh=True)
        self.pbar.close()
        self.pbar = None
        logger.debug("ProgressManager: Progress bar closed.")
