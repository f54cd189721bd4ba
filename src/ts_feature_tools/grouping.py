from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple, Union

import numpy as np

from rich.console import Console

from .errors import AmbiguousRecordError, EmptyGroupError, UnassignedRecordError


@dataclass(frozen=True)
class Record:
    id: int
    name: str
    keywords: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class KeywordGroup:
    name: str
    keywords: Tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.keywords:
            raise ValueError(f'Keyword group {self.name!r} has no keywords')

    def matches(self, record: Record) -> bool:
        return any(k in record.keywords for k in self.keywords)


GroupSpec = Union[str, Sequence[str], KeywordGroup]


def as_keyword_groups(groups: GroupSpec | Sequence[GroupSpec] | None) -> List[KeywordGroup]:
    """Normalise the accepted group forms.

    A bare string is a single group. Inside a list, each string is its own group,
    each sequence of strings is one group matching any of its keywords.
    """
    if not groups:
        return []
    if isinstance(groups, (str, KeywordGroup)):
        groups = [groups]

    out: List[KeywordGroup] = []
    for g in groups:
        if isinstance(g, KeywordGroup):
            out.append(g)
        elif isinstance(g, str):
            out.append(KeywordGroup(name=g, keywords=(g,)))
        else:
            kws = tuple(g)
            out.append(KeywordGroup(name=','.join(kws), keywords=kws))
    return out


def parse_group_tokens(tokens: Sequence[str]) -> List[List[str]]:
    """'disease+sick healthy' tokens -> [['disease', 'sick'], ['healthy']]."""
    groups = []
    for t in tokens:
        kws = [k for k in t.split('+') if k]
        if not kws:
            raise ValueError(f'Keyword group {t!r} has no keywords')
        groups.append(kws)
    return groups


def unique_keywords(records: Sequence[Record]) -> List[str]:
    return sorted({k for r in records for k in r.keywords})


def membership_matrix(records: Sequence[Record], groups: Sequence[KeywordGroup]) -> np.ndarray:
    """Boolean (n_records, n_groups) matrix: does record i match group j."""
    m = np.zeros((len(records), len(groups)), dtype=bool)
    for j, g in enumerate(groups):
        m[:, j] = [g.matches(r) for r in records]
    return m


def partition(records: Sequence[Record], groups: GroupSpec | Sequence[GroupSpec]) -> List[int]:
    """Assign each record to exactly one keyword group.

    Returns 1-based group indices in record order. Raises EmptyGroupError,
    UnassignedRecordError or AmbiguousRecordError (checked in that order).
    """
    groups = as_keyword_groups(groups)
    m = membership_matrix(records, groups)

    empty = ~m.any(axis=0)
    if empty.any():
        raise EmptyGroupError([g.name for g, e in zip(groups, empty) if e])

    n_matches = m.sum(axis=1)
    unlabeled = n_matches == 0
    if unlabeled.any():
        raise UnassignedRecordError([r.name for r, u in zip(records, unlabeled) if u])

    overlapping = n_matches > 1
    if overlapping.any():
        raise AmbiguousRecordError([r.name for r, o in zip(records, overlapping) if o])

    if not len(records):
        return []
    return [int(j) + 1 for j in np.argmax(m, axis=1)]


def label_groups(
    store,
    groups: GroupSpec | Sequence[GroupSpec] | None = None,
    save_back: bool = True,
    confirm: Optional[Callable[[str], bool]] = None,
    console: Console | None = None,
) -> Optional[List[int]]:
    """Label the time series in `store` by keyword groups, optionally saving back.

    With no groups, every distinct keyword in the data is proposed as a group and
    `confirm` is asked; declining (or passing no callback) returns None and leaves
    the store untouched.
    """
    console = console or Console()

    records = store.load()
    groups = as_keyword_groups(groups)

    if not groups:
        console.print('No keywords assigned for labeling. Attempting to use unique keywords from data...')
        kws = unique_keywords(records)
        if not kws:
            console.print('[dim]No keywords found in the data, nothing to label.[/dim]')
            return None
        question = f"Shall I use the following {len(kws)} keywords: {','.join(repr(k) for k in kws)}?"
        if confirm is None or not confirm(question):
            console.print('[dim]No groups assigned, nothing saved.[/dim]')
            return None
        groups = as_keyword_groups(kws)

    t0 = time.perf_counter()
    m = membership_matrix(records, groups)
    for g, hits in zip(groups, m.T):
        if not hits.any():
            console.print(f"[yellow]No matches found for '{g.name}'.[/yellow]")
    labels = partition(records, groups)
    console.print(f'Group labeling complete in {time.perf_counter() - t0:.2f}s.')

    console.print('We found:')
    for g, hits in zip(groups, m.T):
        console.print(f'{g.name} -- {int(hits.sum())} matches (/{len(records)})')

    if save_back:
        with console.status(f'Saving group labels and information back to {store.path}…', spinner='dots'):
            store.write_groups([g.name for g in groups], labels)
        console.print(f'[green]✓[/green] Saved to {store.path}')

    return labels
