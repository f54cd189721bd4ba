from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ProjectConfig:
    # Time-series metadata tables (repo-relative by default)
    orig_data_path: Path = Path('data/HCTSA_timeseries.csv')
    norm_data_path: Path = Path('data/HCTSA_N_timeseries.csv')
    default_data: str = 'norm'

    # Keyword labeling
    keyword_delimiter: str = ','
    save_back: bool = True

    # State-space order sweep
    max_order: int = 10
    maxiter: int = 200

    def data_path(self, what_data: str | Path | None = None) -> Path:
        """Resolve 'orig' / 'norm' (or an explicit path) to a metadata table."""
        what_data = what_data or self.default_data
        if what_data == 'orig':
            return self.orig_data_path
        if what_data == 'norm':
            return self.norm_data_path
        return Path(what_data)
