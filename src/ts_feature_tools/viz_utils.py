from __future__ import annotations

from pathlib import Path

import plotly.graph_objects as go
from plotly.subplots import make_subplots

from .statespace import SweepResult


def plot_order_sweep(
    result: SweepResult,
    title: str = 'State-space fit vs model order',
    width: int = 1100,
    height: int = 480,
) -> go.Figure:
    """AIC on the left axis, loss function and FPE on the right."""
    fig = make_subplots(specs=[[{'secondary_y': True}]])
    orders = result.orders

    fig.add_trace(go.Scatter(x=orders, y=result.aics, mode='lines+markers', name='AIC'), secondary_y=False)
    fig.add_trace(go.Scatter(x=orders, y=result.loss_functions, mode='lines+markers', name='Loss function'), secondary_y=True)
    fig.add_trace(go.Scatter(x=orders, y=result.fpes, mode='lines+markers', name='FPE', line={'dash': 'dot'}), secondary_y=True)

    best = int(orders[result.aics.argmin()])
    fig.add_vline(x=best, line_dash='dash', line_color='grey', annotation_text=f'min AIC (order {best})')

    fig.update_layout(title=title, template='plotly_white', hovermode='x unified', width=width, height=height)
    fig.update_xaxes(title_text='Model order', dtick=1)
    fig.update_yaxes(title_text='AIC', secondary_y=False)
    fig.update_yaxes(title_text='Loss / FPE', secondary_y=True)
    return fig


def save_plotly(fig: go.Figure, html_out: Path, png_out: Path | None = None) -> None:
    """Write HTML (responsive) and optionally a PNG at the figure's own layout size."""
    html_out.parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(
        html_out,
        include_plotlyjs='cdn',
        config={'responsive': True, 'displayModeBar': False},
    )

    if png_out is not None:
        png_out.parent.mkdir(parents=True, exist_ok=True)
        # Requires `kaleido`
        fig.write_image(png_out, width=fig.layout.width, height=fig.layout.height, scale=2)
