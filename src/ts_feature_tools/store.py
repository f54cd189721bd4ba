from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

import pandas as pd

from .grouping import Record


def split_keywords(s, delimiter: str = ',') -> frozenset:
    """'a, b,,c' -> {'a', 'b', 'c'}; empty or missing values give no keywords."""
    if pd.isna(s):
        return frozenset()
    return frozenset(k.strip() for k in str(s).split(delimiter) if k.strip())


class TimeSeriesStore:
    """CSV table of time-series metadata (Name, Keywords, ...), one row per series."""

    group_col = 'Group'

    def __init__(self, path: Path, keyword_delimiter: str = ','):
        self.path = Path(path)
        self.keyword_delimiter = keyword_delimiter

    @property
    def group_names_path(self) -> Path:
        return self.path.with_name(f'{self.path.stem}_group_names.csv')

    def read_table(self) -> pd.DataFrame:
        # keywords such as 'NA' or 'null' are tags, not missing values
        df = pd.read_csv(self.path, keep_default_na=False, dtype={'Name': str, 'Keywords': str})
        for c in ('Name', 'Keywords'):
            if c not in df.columns:
                raise ValueError(f'Missing required column: {c}')
        return df

    def load(self) -> List[Record]:
        df = self.read_table()
        ids = df['ID'].astype(int).tolist() if 'ID' in df.columns else list(range(1, len(df) + 1))
        return [
            Record(id=i, name=str(name), keywords=split_keywords(kw, self.keyword_delimiter))
            for i, name, kw in zip(ids, df['Name'], df['Keywords'])
        ]

    def write_groups(self, group_names: Sequence[str], labels: Sequence[int]) -> None:
        """Replace the Group column with `labels` and store the group names alongside."""
        df = self.read_table()
        if len(labels) != len(df):
            raise ValueError(f'Got {len(labels)} labels for {len(df)} time series')

        # replace, never merge with a previous grouping
        if self.group_col in df.columns:
            df = df.drop(columns=[self.group_col])
        df[self.group_col] = list(labels)
        df.to_csv(self.path, index=False)

        names = pd.DataFrame({
            self.group_col: range(1, len(group_names) + 1),
            'GroupName': list(group_names),
        })
        names.to_csv(self.group_names_path, index=False)

    def read_group_names(self) -> List[str]:
        if not self.group_names_path.exists():
            return []
        names = pd.read_csv(self.group_names_path, keep_default_na=False, dtype={'GroupName': str}).sort_values(self.group_col)
        return names['GroupName'].astype(str).tolist()
