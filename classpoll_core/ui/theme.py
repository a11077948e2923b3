import streamlit as st

from classpoll_core.config import DEFAULT_THEME_COLOR, THEME_COLORS

# === COLOR PALETTE ===
SUCCESS_COLOR    = "#10b981"
WARNING_COLOR    = "#f97316"
DANGER_COLOR     = "#ef4444"
INFO_COLOR       = "#3b82f6"
TEXT_COLOR       = "#1e293b"
SUBTLE_TEXT      = "#64748b"
GRID_COLOR       = "#e2e8f0"
BACKGROUND_COLOR = "#f8fafc"
CARD_BG_LIGHT    = "#ffffff"


def theme_palette(theme_color: str):
    """(primary, secondary) for a settings theme name; unknown names fall back."""
    return THEME_COLORS.get(theme_color, THEME_COLORS[DEFAULT_THEME_COLOR])


def apply_css(theme_color: str = DEFAULT_THEME_COLOR):
    primary, secondary = theme_palette(theme_color)
    st.markdown(f"""
        <style>
        .main {{
            background-color: {BACKGROUND_COLOR};
            color: {TEXT_COLOR};
            font-family: 'Inter','Segoe UI',sans-serif;
        }}
        .main-header {{
            background: linear-gradient(135deg, {primary} 0%, {secondary} 100%);
            padding: 1.5rem 2rem; border-radius: 16px; margin-bottom: 1.5rem;
            box-shadow: 0 8px 24px rgba(15,23,42,.12);
        }}
        .cp-card {{
            background: {CARD_BG_LIGHT}; padding: 1.1rem 1.2rem; border-radius: 14px; margin: .6rem 0;
            border: 1px solid {GRID_COLOR}; box-shadow: 0 2px 6px rgba(0,0,0,0.04);
        }}
        .cp-card.urgent {{ border-left: 4px solid {DANGER_COLOR}; }}
        .cp-badge {{
            display:inline-block; padding: 2px 10px; border-radius: 999px; font-size: .72rem;
            font-weight: 700; background: rgba(79,70,229,.1); color: {primary};
            text-transform: uppercase; letter-spacing: .04em;
        }}
        .cp-muted {{ color: {SUBTLE_TEXT}; font-size: .85rem; }}
        .stButton button {{
            border-radius: 10px; font-weight: 600; transition: all .2s ease;
        }}
        .stButton button[kind="primary"] {{
            background: linear-gradient(135deg, {primary} 0%, {secondary} 100%); border: none;
        }}
        </style>
    """, unsafe_allow_html=True)
