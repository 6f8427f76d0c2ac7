# src/sitelens/core/utils/path_utils.py
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for reliably retrieving important package and user paths.
    """

    @staticmethod
    def get_app_package_root() -> Path:
        """Returns the directory of the `sitelens` package (holds settings.json)."""
        return Path(__file__).resolve().parents[2]

    @staticmethod
    def get_settings_file() -> Path:
        return PathUtils.get_app_package_root() / "settings.json"

    @staticmethod
    def get_export_dir(configured: Optional[str] = None) -> Path:
        """
        Returns the directory exports are written to.
        Uses the configured directory when given, otherwise the current working directory.
        """
        path = Path(configured).expanduser() if configured else Path.cwd()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @staticmethod
    def resolve_output_file(output: str, default_dir: Path, suffix: str) -> Path:
        """
        Resolves a user supplied output path. Relative paths land in default_dir,
        and the suffix is enforced.
        """
        user_path = Path(output).expanduser()
        output_file = user_path if user_path.is_absolute() else default_dir / user_path
        return output_file.with_suffix(suffix)
