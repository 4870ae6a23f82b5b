# farmetrics_dashboard/visualization/ui_elements.py
# THEME-AWARE UI COMPONENTS

import html
import logging
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd
import streamlit as st

from config import settings

logger = logging.getLogger(__name__)


@st.cache_resource
def load_and_inject_css(css_path: Union[str, Path]):
    """Loads a CSS file and injects it into the Streamlit application."""
    path = Path(css_path)
    if not path.is_file():
        logger.warning(f"CSS file not found at: {path}. UI may not be styled correctly.")
        return
    try:
        with path.open("r", encoding="utf-8") as f:
            st.markdown(f'<style>{f.read()}</style>', unsafe_allow_html=True)
        logger.debug(f"Successfully loaded and injected CSS from {path}.")
    except OSError as e:
        logger.error(f"Error loading CSS from {path}: {e}", exc_info=True)


def get_theme_color(semantic_name: str, fallback: str = "#6c757d") -> str:
    """
    Retrieves a theme color from settings using a semantic name.
    e.g., 'primary', 'status_success', 'status_error'.
    """
    attr_name = f"COLOR_{semantic_name.upper()}"
    return getattr(settings, attr_name, fallback)


def format_kpi_value(value: Any) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return settings.FALLBACKS.not_available
    if isinstance(value, float) and not value.is_integer():
        return f"{value:,.1f}"
    if isinstance(value, (int, float)):
        return f"{int(value):,}"
    return str(value)


def render_kpi_card(
    title: str,
    value: Any,
    unit: str = "",
    status_level: Optional[str] = None,
    help_text: Optional[str] = None,
    icon: str = "📊"
) -> None:
    """
    Renders a custom HTML KPI card in Streamlit.
    """
    value_str = format_kpi_value(value)
    status_class = f"status-{status_level.lower().replace('_', '-')}" if status_level else ""
    tooltip_attr = f'title="{html.escape(help_text)}"' if help_text else ""
    unit_html = f'<span class="kpi-units">{html.escape(unit)}</span>' if unit else ""

    card_html = f"""
    <div class="kpi-card {status_class}" {tooltip_attr}>
        <div class="kpi-header">
            <span class="kpi-icon">{html.escape(icon)}</span>
            <div class="kpi-title">{html.escape(title)}</div>
        </div>
        <div class="kpi-body">
            <p class="kpi-value">{html.escape(value_str)}{unit_html}</p>
        </div>
    </div>
    """
    st.markdown(card_html, unsafe_allow_html=True)


def status_badge_html(label: str, color_key: str) -> str:
    color = get_theme_color(color_key)
    return (f'<span class="status-badge" style="border-color:{color};color:{color};">'
            f'{html.escape(label)}</span>')


def render_feed_row(title: str, subtitle: str, badge_label: str, badge_color_key: str, meta: str = "") -> None:
    """One row of a feed list: title and subtitle on the left, badge and meta on the right."""
    meta_html = f'<div class="feed-row-meta">{html.escape(meta)}</div>' if meta else ""
    row_html = f"""
    <div class="feed-row">
        <div class="feed-row-main">
            <div class="feed-row-title">{html.escape(title)}</div>
            <div class="feed-row-subtitle">{html.escape(subtitle)}</div>
        </div>
        <div class="feed-row-side">
            {status_badge_html(badge_label, badge_color_key)}
            {meta_html}
        </div>
    </div>
    """
    st.markdown(row_html, unsafe_allow_html=True)


def render_feed_failure(feed_title: str, error: Optional[str] = None) -> None:
    """Explicit 'could not load' state for a feed, distinct from an empty feed."""
    st.error(f"Could not load {feed_title}. Showing no data for this section.", icon="⚠️")
    if error:
        with st.expander("Error details"):
            st.code(error)
