from __future__ import annotations

from typing import Sequence


def _quoted(names: Sequence[str]) -> str:
    return ','.join(f"'{n}'" for n in names)


class GroupingError(ValueError):
    """Raised when keyword groups do not define a valid partition of the records."""


class EmptyGroupError(GroupingError):
    def __init__(self, groups: Sequence[str]):
        self.groups = list(groups)
        super().__init__(f'{len(self.groups)} keyword groups have no matches: {_quoted(self.groups)}')


class UnassignedRecordError(GroupingError):
    def __init__(self, records: Sequence[str]):
        self.records = list(records)
        super().__init__(f'{len(self.records)} time series are unlabeled: {",".join(self.records)}')


class AmbiguousRecordError(GroupingError):
    def __init__(self, records: Sequence[str]):
        self.records = list(records)
        super().__init__(
            f'{len(self.records)} time series have multiple group assignments: {",".join(self.records)}'
        )


class ModelFitError(RuntimeError):
    def __init__(self, order: int, reason: str = ''):
        self.order = order
        msg = f'Model fitting failed for order {order}'
        super().__init__(f'{msg}: {reason}' if reason else msg)


class OrderOutOfRangeError(ValueError):
    def __init__(self, order: int, max_order: int):
        self.order = order
        self.max_order = max_order
        super().__init__(f'Order {order} outside fitted range 1..{max_order}')
