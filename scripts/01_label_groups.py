#!/usr/bin/env python3
from __future__ import annotations

import argparse

from rich.prompt import Confirm

from ts_feature_tools.config import ProjectConfig
from ts_feature_tools.grouping import label_groups, parse_group_tokens
from ts_feature_tools.store import TimeSeriesStore


def main() -> None:
    cfg = ProjectConfig()
    ap = argparse.ArgumentParser(description='Label time series into groups by keyword and save the grouping back.')
    ap.add_argument('--data', type=str, default=cfg.default_data, help="'orig', 'norm' or a path to a metadata CSV.")
    ap.add_argument('--keywords', nargs='*', default=[], help="One token per group; join keywords of one group with '+'.")
    ap.add_argument('--no-save', action='store_true', help='Do not write the grouping back to the data file.')
    args = ap.parse_args()

    try:
        groups = parse_group_tokens(args.keywords)
    except ValueError as e:
        ap.error(str(e))

    if args.data in ('orig', 'norm'):
        print(f'Retrieving data from {cfg.data_path(args.data)}')
    store = TimeSeriesStore(cfg.data_path(args.data), keyword_delimiter=cfg.keyword_delimiter)

    labels = label_groups(
        store,
        groups=groups,
        save_back=cfg.save_back and not args.no_save,
        confirm=lambda question: Confirm.ask(question, default=False),
    )

    if labels is not None:
        print(f'Labeled {len(labels)} time series into {len(set(labels))} groups')


if __name__ == '__main__':
    main()
