"""Static Plotly HTML report for one rendered snapshot."""

from __future__ import annotations

import html
from collections.abc import Mapping
from pathlib import Path

import plotly.graph_objects as go
from plotly.subplots import make_subplots

from benchview.domain.models import Unavailable, ViewName
from benchview.views import LabeledSeries, SummaryReport, TableRows, ViewModel

VIEW_HEADINGS = {
    ViewName.PRICE: "Price",
    ViewName.PERFORMANCE: "Performance vs benchmark",
    ViewName.DUAL_AXIS: "Dual-axis comparison",
    ViewName.SUMMARY: "Summary",
    ViewName.TABLE: "Data",
}


def build_chart(view: LabeledSeries) -> go.Figure:
    """Line chart; lines on the secondary axis get their own y axis."""
    has_secondary = any(line.axis == "secondary" for line in view.lines)
    figure = make_subplots(specs=[[{"secondary_y": has_secondary}]])
    for line in view.lines:
        trace = go.Scatter(x=list(line.dates), y=list(line.values), mode="lines", name=line.label)
        if has_secondary:
            figure.add_trace(trace, secondary_y=line.axis == "secondary")
        else:
            figure.add_trace(trace)
    figure.update_layout(title=view.title, xaxis_title="Date", hovermode="x unified")
    if has_secondary:
        figure.update_yaxes(title_text=view.y_label, secondary_y=False)
        figure.update_yaxes(title_text=view.secondary_y_label or "", secondary_y=True)
    else:
        figure.update_yaxes(title_text=view.y_label)
    return figure


def build_table(view: TableRows) -> go.Figure:
    cells = [list(column) for column in zip(*view.rows)] if view.rows else []
    figure = go.Figure(
        data=[go.Table(header={"values": list(view.columns)}, cells={"values": cells})]
    )
    figure.update_layout(title="Daily bars")
    return figure


def write_html_report(
    views: Mapping[ViewName, ViewModel | Unavailable],
    output_html_path: str,
    title: str = "benchview report",
) -> Path:
    """Render every view into one HTML page; unavailable views show their reason."""
    output = Path(output_html_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    html_parts = [
        "<html><head><meta charset='utf-8'>",
        f"<title>{html.escape(title)}</title></head><body>",
        f"<h1>{html.escape(title)}</h1>",
    ]
    plotlyjs_included = False
    for view_name, view in views.items():
        html_parts.append(f"<h2>{html.escape(VIEW_HEADINGS.get(view_name, str(view_name)))}</h2>")
        if isinstance(view, Unavailable):
            html_parts.append(
                f"<p class='unavailable'>Unavailable: {html.escape(view.message)}</p>"
            )
            continue
        if isinstance(view, SummaryReport):
            html_parts.append(f"<pre>{html.escape(view.text)}</pre>")
            continue
        if isinstance(view, LabeledSeries):
            figure = build_chart(view)
        else:
            figure = build_table(view)
        html_parts.append(
            figure.to_html(
                full_html=False,
                include_plotlyjs="cdn" if not plotlyjs_included else False,
            )
        )
        plotlyjs_included = True
        if isinstance(view, LabeledSeries) and view.notes:
            items = "".join(f"<li>{html.escape(note)}</li>" for note in view.notes)
            html_parts.append(f"<ul>{items}</ul>")
    html_parts.append("</body></html>")
    output.write_text("".join(html_parts), encoding="utf-8")
    return output
