#!/usr/bin/env python3
from __future__ import annotations

import argparse
from functools import partial
from pathlib import Path

import numpy as np
import pandas as pd

from ts_feature_tools.config import ProjectConfig
from ts_feature_tools.statespace import estimate_state_space, fit_order_sweep


def load_series(path: Path, column: str | None) -> np.ndarray:
    if path.suffix.lower() in ('.csv', '.gz'):
        df = pd.read_csv(path)
        col = column or df.columns[0]
        if col not in df.columns:
            raise SystemExit(f"Unknown column '{col}'. Available: {list(df.columns)}")
        return df[col].dropna().to_numpy(dtype=float)
    return np.loadtxt(path, dtype=float).ravel()


def main() -> None:
    cfg = ProjectConfig()
    ap = argparse.ArgumentParser(description='Fit state-space models of order 1..max and summarise goodness of fit.')
    ap.add_argument('--series', type=str, required=True, help='CSV (one column) or whitespace-separated text file.')
    ap.add_argument('--column', type=str, default=None, help='CSV column holding the series (default: first).')
    ap.add_argument('--max-order', type=int, default=cfg.max_order)
    ap.add_argument('--maxiter', type=int, default=cfg.maxiter, help='Optimizer iterations per fit.')
    ap.add_argument('--out', type=str, default='reports/statespace/order_sweep.csv')
    ap.add_argument('--summary-out', type=str, default='reports/statespace/order_sweep_summary.csv')
    ap.add_argument('--fig', type=str, default=None, help='Optional HTML path for the fit-vs-order figure.')
    args = ap.parse_args()

    y = load_series(Path(args.series), args.column)
    result = fit_order_sweep(y, max_order=args.max_order, estimator=partial(estimate_state_space, maxiter=args.maxiter))

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(result.to_records()).to_csv(out, index=False)
    print(f'Wrote: {out} ({result.max_order} orders)')

    if result.max_order >= 2:
        summary_out = Path(args.summary_out)
        summary_out.parent.mkdir(parents=True, exist_ok=True)
        pd.DataFrame([result.summary()]).to_csv(summary_out, index=False)
        print(f'Wrote: {summary_out}')
    else:
        print('[warn] Summary needs max order >= 2 for order-2 statistics; skipped.')

    if args.fig:
        from ts_feature_tools.viz_utils import plot_order_sweep, save_plotly

        save_plotly(plot_order_sweep(result), Path(args.fig))
        print(f'Wrote: {args.fig}')


if __name__ == '__main__':
    main()
