from __future__ import annotations

import numpy as np


def first_argmin(values) -> int:
    """1-based position of the first minimum."""
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        raise ValueError('Cannot take the minimum of an empty sequence')
    return int(np.argmin(values)) + 1


def final_prediction_error(loss: float, n_params: int, n_obs: int) -> float:
    """Akaike's final prediction error for a model with n_params free parameters."""
    if n_params >= n_obs:
        raise ValueError(f'FPE undefined with {n_params} parameters for {n_obs} observations')
    ratio = n_params / n_obs
    return float(loss * (1.0 + ratio) / (1.0 - ratio))


def diff_summary(values) -> dict:
    """Mean/max/min of successive differences, plus how many of them are negative."""
    d = np.diff(np.asarray(values, dtype=float))
    if d.size == 0:
        return {'mean': np.nan, 'max': np.nan, 'min': np.nan, 'n_down': 0}
    return {
        'mean': float(np.mean(d)),
        'max': float(np.max(d)),
        'min': float(np.min(d)),
        'n_down': int(np.sum(d < 0)),
    }
