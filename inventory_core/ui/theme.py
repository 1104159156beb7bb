import streamlit as st

# === COLOR PALETTE ===
PRIMARY_COLOR    = "#1F4E78"
SECONDARY_COLOR  = "#2E8B57"
SUCCESS_COLOR    = "#10b981"
WARNING_COLOR    = "#f59e0b"
DANGER_COLOR     = "#ef4444"
TEXT_COLOR       = "#2c3e50"
SUBTLE_TEXT      = "#495057"
GRID_COLOR       = "#e5e7eb"
BACKGROUND_COLOR = "#f8f9fa"
CARD_BG_LIGHT    = "#ffffff"

def apply_css():
    """Shared page styling: header band, tabs, metric cards and buttons."""
    st.markdown(f"""
        <style>
        .main {{
            background-color: {BACKGROUND_COLOR};
            color: {TEXT_COLOR};
            font-family: 'Segoe UI','Inter','SF Pro Display',sans-serif;
        }}
        .main-header {{
            background: linear-gradient(135deg, {PRIMARY_COLOR} 0%, {SECONDARY_COLOR} 100%);
            padding: 1.5rem 2rem; border-radius: 16px; margin-bottom: 1.5rem; color: white;
            box-shadow: 0 8px 32px rgba(31,78,120,.25);
        }}
        .main-header h1 {{ color: white; margin: 0; font-size: 1.9rem; }}
        .main-header p {{ color: rgba(255,255,255,.85); margin: .3rem 0 0 0; }}
        .stTabs [data-baseweb="tab-list"] {{
            gap: 8px; background-color: {CARD_BG_LIGHT}; padding: 8px; border-radius: 10px;
            box-shadow: 0 2px 4px rgba(0,0,0,0.05); border: 1px solid {GRID_COLOR};
        }}
        .stTabs [data-baseweb="tab"] {{
            height: 44px; padding: 0 20px; background-color: {BACKGROUND_COLOR}; border-radius: 8px;
            color: {SUBTLE_TEXT}; font-weight: 500; border: none;
        }}
        .stTabs [aria-selected="true"] {{
            background: linear-gradient(135deg, {PRIMARY_COLOR} 0%, {SECONDARY_COLOR} 100%);
            color: white; font-weight: 600;
        }}
        .metric-card {{
            background: {CARD_BG_LIGHT}; padding: 18px; border-radius: 10px;
            box-shadow: 0 2px 8px rgba(0,0,0,0.08); margin: 8px 0; border: 1px solid {GRID_COLOR};
        }}
        .metric-card .label {{ color: {SUBTLE_TEXT}; font-size: .85rem; }}
        .metric-card .value {{ color: {TEXT_COLOR}; font-size: 1.6rem; font-weight: 700; }}
        .sync-pill {{
            display: inline-block; padding: 2px 10px; border-radius: 999px; font-size: .8rem; font-weight: 600;
        }}
        .sync-online {{ background: rgba(16,185,129,.15); color: {SUCCESS_COLOR}; }}
        .sync-offline {{ background: rgba(239,68,68,.15); color: {DANGER_COLOR}; }}
        .sync-unknown {{ background: rgba(245,158,11,.15); color: {WARNING_COLOR}; }}
        </style>
    """, unsafe_allow_html=True)


def render_header(title: str, subtitle: str = "", icon: str = ""):
    st.markdown(
        f"""
        <div class="main-header">
            <h1>{icon} {title}</h1>
            <p>{subtitle}</p>
        </div>
        """,
        unsafe_allow_html=True,
    )


def render_metric_card(label: str, value: str):
    st.markdown(
        f'<div class="metric-card"><div class="label">{label}</div><div class="value">{value}</div></div>',
        unsafe_allow_html=True,
    )
