"""Shared sidebar components for the multi-page app.

Every page calls :func:`render_shared_sidebar` first. It makes sure the
local user has a profile (seeding the default categories on first use) and
shows who is signed in and which currency amounts are displayed in.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

import streamlit as st

try:
    from . import db
    from .config import DEFAULT_USER_ID, DEFAULT_USER_NAME
    from .formatting import currency_symbol
except ImportError:
    # Fallback for when running as script
    import sys
    from pathlib import Path
    parent_dir = Path(__file__).parent
    if str(parent_dir) not in sys.path:
        sys.path.insert(0, str(parent_dir))
    import db
    from config import DEFAULT_USER_ID, DEFAULT_USER_NAME
    from formatting import currency_symbol

logger = logging.getLogger(__name__)


def render_shared_sidebar() -> Dict[str, Any]:
    """Render shared sidebar elements available on all pages.

    Returns:
        Dict with keys: 'user_id', 'profile', 'currency'
    """
    user_id = st.session_state.get('user_id', DEFAULT_USER_ID)
    try:
        profile = db.ensure_user(user_id, DEFAULT_USER_NAME)
    except db.DataStoreError:
        logger.exception("Failed to load profile for %s", user_id)
        st.error("Failed to load your profile. Please try again.")
        st.stop()

    st.session_state['user_id'] = user_id
    currency = profile.currency if profile else 'USD'

    st.sidebar.title("💰 Expense Tracker")
    display_name = (profile.full_name if profile else '') or user_id
    st.sidebar.caption(f"Signed in as **{display_name}**")
    st.sidebar.caption(f"Currency: {currency} ({currency_symbol(currency)})")

    return {
        'user_id': user_id,
        'profile': profile,
        'currency': currency,
    }


def show_store_error(action: str, exc: Exception) -> None:
    """Log a failed store call and show a generic notice."""
    logger.error("Failed to %s: %s", action, exc)
    st.error(f"Failed to {action}. Please try again.")
