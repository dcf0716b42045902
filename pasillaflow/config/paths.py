"""
Output path layout for PasillaFlow runs
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..exceptions import ExportError

logger = logging.getLogger(__name__)


@dataclass
class PathConfig:
    """Directories written by one pipeline run"""

    output_dir: Path
    tables_dir: Optional[Path] = None
    figures_dir: Optional[Path] = None

    def __post_init__(self):
        self.output_dir = Path(self.output_dir)
        if self.tables_dir is None:
            self.tables_dir = self.output_dir / "tables"
        if self.figures_dir is None:
            self.figures_dir = self.output_dir / "figures"
        self.tables_dir = Path(self.tables_dir)
        self.figures_dir = Path(self.figures_dir)

    @classmethod
    def from_config(cls, config) -> "PathConfig":
        return cls(output_dir=Path(config.output_dir or "."))

    def create_output_dirs(self) -> None:
        """Create output directories if they don't exist"""
        for dir_path in (self.output_dir, self.tables_dir, self.figures_dir):
            try:
                dir_path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ExportError(f"Failed to create directory {dir_path}: {e}") from e
            logger.debug(f"Output directory ready: {dir_path}")

    def validate(self) -> List[str]:
        """Report directories that exist but are not directories"""
        issues = []
        for dir_path in (self.output_dir, self.tables_dir, self.figures_dir):
            if dir_path.exists() and not dir_path.is_dir():
                issues.append(f"Output path is not a directory: {dir_path}")
        return issues
