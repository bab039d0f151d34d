"""
Metrics Display Functions

UI components for the operator timeline, the machine board and the project
progress accordion.
"""

import streamlit as st
import pandas as pd
import plotly.express as px
import logging
from datetime import date, datetime
from typing import Dict, List, Optional

from config import Config
from core.calculations.durations import format_elapsed, minutes_since, now_utc
from core.calculations.machines import TIER_PALETTE, bar_percent, color_tier
from core.calculations.progress import (
    BAND_COLORS,
    completion_band,
    step_breakdown_to_dataframe,
)
from core.calculations.timeline import intervals_to_dataframe, utilization_percent
from core.models import NOT_AVAILABLE, Interval, MachineSnapshot, ProjectProgress, TimelineResult
from utils.formatting import format_clock, format_day, format_hours, format_minutes, to_local

logger = logging.getLogger(__name__)

VERDICT_COLORS = {
    'faster': '#059669',  # Green
    'slower': '#dc2626',  # Red
    'neutral': '',
}


def display_operator_summary(
    operator_code: str,
    operator_name: str,
    day: Optional[date],
    timeline: TimelineResult
):
    """
    Show the day summary: worked time and utilization against the shift.

    Args:
        operator_code: Operator number
        operator_name: Operator display name
        day: Reporting date
        timeline: TimelineResult from build_timeline
    """
    st.subheader("📈 Day summary")
    st.caption(f"{operator_code} · {operator_name} ({format_day(day)})")

    shift_minutes = Config.SHIFT_DURATION_HOURS * 60
    utilization = utilization_percent(timeline.total_work_minutes, shift_minutes)

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric(
            "Total processes",
            format_hours(timeline.total_work_minutes),
            help=f"{timeline.total_work_minutes} min",
        )
    with col2:
        st.metric("Intervals", len(timeline.intervals))
    with col3:
        st.metric(f"Utilization ({Config.SHIFT_DURATION_HOURS:g}h shift)", f"{utilization}%")

    st.progress(min(100, utilization))


def display_timeline_chart(intervals: List[Interval]):
    """Gantt chart of the operator's work intervals, colored by project."""
    if not intervals:
        return

    df = intervals_to_dataframe(intervals)
    df['start'] = df['start'].apply(to_local)
    df['end'] = df['end'].apply(to_local)

    fig = px.timeline(
        df,
        x_start='start',
        x_end='end',
        y='machine',
        color='project',
        hover_data={'operation': True, 'minutes': True, 'estimated_minutes': True},
    )
    fig.update_yaxes(autorange="reversed", title='Station')
    fig.update_layout(
        height=max(250, 60 * df['machine'].nunique()),
        xaxis=dict(tickformat='%H:%M', title='Hour'),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )
    st.plotly_chart(fig, use_container_width=True)


def display_interval_table(intervals: List[Interval]):
    """
    Table of intervals with actual minutes colored against the estimate.

    Green: faster than estimate. Red: more than 10% over.
    """
    if not intervals:
        st.info("No data for this date or project.")
        return

    df = intervals_to_dataframe(intervals)
    table = pd.DataFrame({
        'Start': df['start'].apply(format_clock),
        'End': [
            "In progress" if row.in_progress else format_clock(row.end)
            for row in df.itertuples()
        ],
        'Estimated': df['estimated_minutes'].apply(format_minutes),
        'Actual': df['minutes'].apply(lambda m: f"{m:.0f}m"),
        'Process': df['operation'],
        'Station': df['machine'],
        'Project': df['project'],
    })
    verdicts = df['verdict'].tolist()

    def _color_actual(column: pd.Series) -> List[str]:
        if column.name != 'Actual':
            return [''] * len(column)
        return [
            f"color: {VERDICT_COLORS[v]}; font-weight: 600" if VERDICT_COLORS.get(v) else ''
            for v in verdicts
        ]

    st.dataframe(table.style.apply(_color_actual), use_container_width=True, hide_index=True)


def display_board_stats(stats: Dict[str, int]):
    col1, col2, _ = st.columns([1, 1, 3])
    with col1:
        st.metric("Working", stats.get('working', 0))
    with col2:
        st.metric("Paused", stats.get('paused', 0))


def display_tier_legend():
    """Legend for the machine card colors."""
    items = [
        f"<span style='color:{p['color']}'>●</span> {p['label']}"
        for tier, p in TIER_PALETTE.items()
        if tier != 'neutral'
    ]
    st.markdown(" &nbsp; ".join(items), unsafe_allow_html=True)


def display_machine_card(machine: MachineSnapshot, now: Optional[datetime] = None):
    """One machine card: status tier, piece, operator and cycle progress."""
    tier = color_tier(machine, now)
    palette = TIER_PALETTE[tier]
    elapsed = minutes_since(machine.started_at, now)
    target = machine.cycle_target_minutes

    with st.container(border=True):
        st.markdown(
            f"<span style='color:{palette['color']}; font-size:1.2em'>●</span> "
            f"**{machine.name}** &nbsp; <small>{machine.status.upper()}</small>",
            unsafe_allow_html=True,
        )
        st.caption(f"Operation {machine.operation}")
        st.markdown(f"**Piece:** {machine.piece or NOT_AVAILABLE}  \n**Operator:** {machine.operator or NOT_AVAILABLE}")
        st.progress(
            bar_percent(elapsed, target),
            text=f"{format_elapsed(elapsed)} / target {target:.0f} min",
        )


def display_machine_board(machines: List[MachineSnapshot], columns: int = 4):
    """Grid of machine cards, or a placeholder when nothing matches."""
    if not machines:
        st.info("No active machines match the selected criteria.")
        return

    now = now_utc()
    for start in range(0, len(machines), columns):
        cols = st.columns(columns)
        for col, machine in zip(cols, machines[start:start + columns]):
            with col:
                display_machine_card(machine, now)


def display_project_progress(projects: List[ProjectProgress]):
    """
    Accordion of projects with completion bar, bottleneck badge and
    per-step breakdown.
    """
    if not projects:
        st.info("No operations registered yet.")
        return

    for project in projects:
        pct = project.completion_percent
        band = completion_band(pct)
        badges = []
        if pct >= 100:
            badges.append("✅")
        if project.has_bottleneck:
            badges.append("⚠️ bottleneck")

        title = f"{project.project_name} · {pct}% {' '.join(badges)}".strip()
        with st.expander(title, expanded=False):
            st.markdown(
                f"<div style='background:#e5e7eb;border-radius:6px;height:10px'>"
                f"<div style='background:{BAND_COLORS[band]};width:{pct}%;height:10px;border-radius:6px'></div>"
                f"</div>",
                unsafe_allow_html=True,
            )
            st.caption(f"{project.actual_units} / {project.target_units} units")

            breakdown = step_breakdown_to_dataframe(project)
            if breakdown.empty:
                st.caption("No process steps recorded.")
            else:
                st.dataframe(
                    breakdown.rename(columns={
                        'step': 'Step', 'actual': 'Actual', 'target': 'Target', 'percent': '%'
                    }),
                    use_container_width=True,
                    hide_index=True,
                )
