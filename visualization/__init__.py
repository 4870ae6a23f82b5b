# farmetrics_dashboard/visualization/__init__.py
# EXPLICIT PACKAGE API

"""
Initializes the visualization package, defining its public API.
"""

# --- Core Plotting Functions from plots.py ---
from .plots import (
    set_plotly_theme,
    create_empty_figure,
    plot_weekly_trends_chart,
    plot_slot_progress_chart,
    plot_submission_map,
)

# --- Custom UI Element Renderers from ui_elements.py ---
from .ui_elements import (
    load_and_inject_css,
    get_theme_color,
    format_kpi_value,
    render_kpi_card,
    render_feed_row,
    render_feed_failure,
)

__all__ = [
    # from plots.py
    "set_plotly_theme",
    "create_empty_figure",
    "plot_weekly_trends_chart",
    "plot_slot_progress_chart",
    "plot_submission_map",

    # from ui_elements.py
    "load_and_inject_css",
    "get_theme_color",
    "format_kpi_value",
    "render_kpi_card",
    "render_feed_row",
    "render_feed_failure",
]
