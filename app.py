# farmetrics_dashboard/app.py
# APPLICATION ENTRY POINT

import html
import logging
import sys
from pathlib import Path
from typing import List, NamedTuple

_project_root = Path(__file__).resolve().parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

try:
    import streamlit as st
    from config import settings
    from visualization import load_and_inject_css, set_plotly_theme
except ImportError as e:
    sys.exit(f"Farmetrics could not start: {e}. Install it with `pip install -e .` and run `streamlit run app.py` from {_project_root}.")


class PageLink(NamedTuple):
    path: str
    title: str
    icon: str
    summary: str


PAGES: List[PageLink] = [
    PageLink("pages/01_Dashboard.py", "Dashboard", "🌾",
             "Today's submissions, data quality, weekly trends and the live activity, sync and map feeds."),
    PageLink("pages/02_Field_Officers.py", "Field Officers", "👥",
             "Each officer's visits against the seven visit-slot targets."),
    PageLink("pages/03_Officer_Reports.py", "Officer Reports", "📋",
             "Visits and registered farmers per officer, with a CSV export of the filtered list."),
]

# --- Logging ---
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format=settings.LOG_FORMAT,
    datefmt=settings.LOG_DATE_FORMAT,
    handlers=[logging.StreamHandler(sys.stdout)],
    force=True
)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title=settings.APP_NAME,
    page_icon="🌾",
    layout="wide",
    menu_items={
        "Get Help": f"mailto:{settings.SUPPORT_CONTACT_INFO}",
        "About": f"### {settings.APP_NAME} v{settings.APP_VERSION}\nAdmin oversight of farm visits, media uploads and field officer targets.",
    }
)
load_and_inject_css(settings.STYLE_CSS_PATH)
set_plotly_theme()

st.title(f"🌾 {settings.APP_NAME} Admin")
st.markdown(f"Oversight of farm visits, media uploads and officer targets for **{html.escape(settings.ORGANIZATION_NAME)}**.")

if settings.DATABASE_URL:
    st.success("Connected to the managed database.", icon="🗄️")
else:
    st.info(
        f"Reading CSV snapshots from `{settings.DATA_SOURCES_DIR.name}/`. Run `python generate_data.py` for demo data, "
        "or set `FARMETRICS_DATABASE_URL` to use the live backend.",
        icon="📁",
    )
st.divider()

for col, page in zip(st.columns(len(PAGES)), PAGES):
    with col, st.container(border=True):
        st.subheader(f"{page.icon} {page.title}")
        st.caption(page.summary)
        if (_project_root / page.path).is_file():
            st.page_link(page.path, label=f"Open {page.title}", icon="➡️")
        else:
            logger.warning(f"Navigation target missing: {page.path}")

with st.sidebar:
    st.header(settings.APP_NAME)
    st.caption(f"v{settings.APP_VERSION} · Timezone {settings.TIMEZONE}")
    st.markdown(f"Support: [{settings.SUPPORT_CONTACT_INFO}](mailto:{settings.SUPPORT_CONTACT_INFO})")
    st.caption(settings.APP_FOOTER_TEXT)
