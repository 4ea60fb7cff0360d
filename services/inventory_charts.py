from datetime import date, timedelta
from typing import Any, Iterable, Optional

import plotly.graph_objects as go
import polars as pl

from config import MOVEMENT_TREND_DAYS, MOVEMENT_TYPES
from services.stock_models import as_movements, local_date

MOVEMENT_COLORS = {
    "IN": "#2f9e44",
    "OUT": "#1c7ed6",
}


def build_empty_figure(message: str, title: str, height: int = 360) -> go.Figure:
    fig = go.Figure()
    fig.add_annotation(
        text=message,
        x=0.5,
        y=0.5,
        xref="paper",
        yref="paper",
        showarrow=False,
        font=dict(size=14, color="gray"),
    )
    fig.update_layout(title=title, template="plotly_white", height=height)
    return fig


def movement_trend_frame(
    movements: Optional[Iterable[Any]],
    today: Optional[date] = None,
    days: int = MOVEMENT_TREND_DAYS,
) -> pl.DataFrame:
    """
    Daily IN/OUT quantities for the last `days` days, ending today.

    Returns:
        DataFrame with columns: date, incoming, outgoing (every day present, zero-filled)
    """
    if today is None:
        today = date.today()
    days = max(1, int(days or MOVEMENT_TREND_DAYS))
    start = today - timedelta(days=days - 1)

    calendar = pl.DataFrame({
        "date": pl.date_range(start, today, interval="1d", eager=True),
    })

    rows = []
    for movement in as_movements(movements):
        day = local_date(movement.created_at)
        if day is None or day < start or day > today:
            continue
        if movement.type not in MOVEMENT_TYPES:
            continue
        rows.append({"date": day, "type": movement.type, "quantity": float(movement.quantity)})

    if not rows:
        return calendar.with_columns(
            pl.lit(0.0).alias("incoming"),
            pl.lit(0.0).alias("outgoing"),
        )

    daily = (
        pl.DataFrame(rows, schema={"date": pl.Date, "type": pl.Utf8, "quantity": pl.Float64})
        .group_by("date")
        .agg([
            pl.when(pl.col("type") == "IN").then(pl.col("quantity")).otherwise(0.0).sum().alias("incoming"),
            pl.when(pl.col("type") == "OUT").then(pl.col("quantity")).otherwise(0.0).sum().alias("outgoing"),
        ])
    )

    return (
        calendar
        .join(daily, on="date", how="left")
        .with_columns(
            pl.col("incoming").fill_null(0.0),
            pl.col("outgoing").fill_null(0.0),
        )
        .sort("date")
    )


def build_movement_trend_chart(
    movements: Optional[Iterable[Any]],
    today: Optional[date] = None,
    days: int = MOVEMENT_TREND_DAYS,
) -> go.Figure:
    trend = movement_trend_frame(movements, today, days)
    title = f"Stock Movements - Last {trend.height} Days"

    if trend["incoming"].sum() == 0 and trend["outgoing"].sum() == 0:
        return build_empty_figure("No stock movements in this period.", title)

    dates = trend["date"].to_list()
    fig = go.Figure()
    fig.add_trace(
        go.Bar(
            x=dates,
            y=trend["incoming"].to_list(),
            name="In",
            marker_color=MOVEMENT_COLORS["IN"],
            hovertemplate="Date: %{x|%d/%m/%Y}<br>In: %{y:,.0f}<extra></extra>",
        )
    )
    fig.add_trace(
        go.Bar(
            x=dates,
            y=trend["outgoing"].to_list(),
            name="Out",
            marker_color=MOVEMENT_COLORS["OUT"],
            hovertemplate="Date: %{x|%d/%m/%Y}<br>Out: %{y:,.0f}<extra></extra>",
        )
    )
    fig.update_layout(
        title=title,
        template="plotly_white",
        barmode="group",
        height=360,
        margin=dict(t=60, b=40, l=40, r=20),
        xaxis=dict(title="Date", tickformat="%d/%m"),
        yaxis=dict(title="Quantity"),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )
    return fig
