from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Callable, List

import numpy as np

from statsmodels.tsa.statespace.sarimax import SARIMAX

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TimeElapsedColumn

from .errors import ModelFitError, OrderOutOfRangeError
from .metrics import diff_summary, final_prediction_error, first_argmin


@dataclass(frozen=True)
class FittedModel:
    order: int
    loss_function: float
    fpe: float
    aic: float
    n_params: int

    def information_criterion(self) -> float:
        return self.aic


@dataclass(frozen=True)
class OrderStat:
    order: int
    loss_function: float
    fpe: float
    aic: float
    n_params: int


Estimator = Callable[[np.ndarray, int], FittedModel]


def as_series(y) -> np.ndarray:
    y = np.asarray(y, dtype=float)
    if y.ndim != 1:
        y = np.squeeze(y)
        if y.ndim != 1:
            raise ValueError(f'Expected a 1-D time series, got shape {np.shape(y)}')
    if y.size == 0:
        raise ValueError('Empty time series')
    if not np.all(np.isfinite(y)):
        raise ValueError('Time series contains NaN or infinite values')
    return y


def estimate_state_space(y, order: int, maxiter: int = 200) -> FittedModel:
    """Fit an innovations-form state-space model with `order` states.

    The model is ARMA(order, order) with a constant, put in state-space form by
    statsmodels' SARIMAX and fitted by maximum likelihood. The loss function is
    the mean squared one-step prediction error; the noise variance is not counted
    as a free parameter.
    """
    y = as_series(y)
    n = len(y)

    with warnings.catch_warnings():
        warnings.simplefilter('ignore')
        res = SARIMAX(y, order=(order, 0, order), trend='c').fit(disp=False, maxiter=maxiter)

    n_params = len(res.params) - 1
    loss = float(np.mean(np.asarray(res.resid, dtype=float) ** 2))
    aic = float(res.aic)
    fpe = final_prediction_error(loss, n_params, n)

    if not np.all(np.isfinite([loss, aic, fpe])):
        raise ValueError(f'Non-finite fit statistics (loss={loss}, aic={aic}, fpe={fpe})')

    return FittedModel(order=order, loss_function=loss, fpe=fpe, aic=aic, n_params=n_params)


class SweepResult:
    """Fit statistics for orders 1..max_order of one sweep."""

    def __init__(self, stats: List[OrderStat]):
        self.stats = list(stats)

    @property
    def max_order(self) -> int:
        return len(self.stats)

    @property
    def orders(self) -> np.ndarray:
        return np.array([s.order for s in self.stats], dtype=int)

    @property
    def aics(self) -> np.ndarray:
        return np.array([s.aic for s in self.stats], dtype=float)

    @property
    def fpes(self) -> np.ndarray:
        return np.array([s.fpe for s in self.stats], dtype=float)

    @property
    def loss_functions(self) -> np.ndarray:
        return np.array([s.loss_function for s in self.stats], dtype=float)

    def at_order(self, order: int) -> OrderStat:
        if not 1 <= order <= self.max_order:
            raise OrderOutOfRangeError(order, self.max_order)
        return self.stats[order - 1]

    def summary(self) -> dict:
        """Optimal orders, order-2 statistics and AIC curve changes."""
        aics = self.aics
        losses = self.loss_functions
        s2 = self.at_order(2)
        d = diff_summary(aics)
        return {
            'minaic': float(aics.min()),
            'aicopt': first_argmin(aics),
            'minlossfn': float(losses.min()),
            'lossfnopt': first_argmin(losses),
            'aic2': s2.aic,
            'fpe2': s2.fpe,
            'lossfn2': s2.loss_function,
            'meandiffaic': d['mean'],
            'maxdiffaic': d['max'],
            'mindiffaic': d['min'],
            'ndownaic': d['n_down'],
        }

    def to_records(self) -> List[dict]:
        return [
            {'order': s.order, 'lossfn': s.loss_function, 'fpe': s.fpe, 'aic': s.aic, 'n_params': s.n_params}
            for s in self.stats
        ]


def fit_order_sweep(
    y,
    max_order: int = 10,
    estimator: Estimator = estimate_state_space,
    console: Console | None = None,
) -> SweepResult:
    """Fit models of order 1..max_order; any failed order aborts the whole sweep."""
    y = as_series(y)
    if max_order < 1:
        raise ValueError(f'max_order must be at least 1, got {max_order}')

    console = console or Console()
    stats: List[OrderStat] = []

    progress = Progress(
        SpinnerColumn(),
        TextColumn('[bold]{task.description}[/bold]'),
        BarColumn(),
        TextColumn('{task.completed}/{task.total}'),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )

    with progress:
        task = progress.add_task('State-space orders', total=max_order)
        for k in range(1, max_order + 1):
            try:
                m = estimator(y, k)
                stat = OrderStat(
                    order=k,
                    loss_function=float(m.loss_function),
                    fpe=float(m.fpe),
                    aic=float(m.information_criterion()),
                    n_params=int(m.n_params),
                )
            except Exception as e:
                console.print(f'[red]✗[/red] order {k}  {type(e).__name__}: {e}')
                raise ModelFitError(k, f'{type(e).__name__}: {e}') from e

            stats.append(stat)
            progress.update(task, advance=1)

    return SweepResult(stats)
