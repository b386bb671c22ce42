# src/a11y_audit/utils/path_utils.py
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for reliably retrieving important package and user paths.
    """

    # --- Package specific paths

    @staticmethod
    def get_package_root() -> Path:
        """Returns the directory of the installed a11y_audit package (holds settings.json)."""
        return Path(__file__).resolve().parent.parent

    @staticmethod
    def get_settings_file() -> Path:
        return PathUtils.get_package_root() / "settings.json"

    # --- User specific paths ---

    @staticmethod
    def get_user_data_dir() -> Path:
        """
        Returns the per-user data directory, creating it when missing.
        (e.g., ~/.a11y_audit/)
        """
        path = Path.home() / ".a11y_audit"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @staticmethod
    def get_report_db_path() -> Path:
        """Returns the default path of the SQLite report store."""
        return PathUtils.get_user_data_dir() / "reports.db"

    @staticmethod
    def get_user_documents_dir() -> Path:
        """
        Returns the absolute path to the current user's Documents directory.
        """
        return Path.home() / "Documents"
