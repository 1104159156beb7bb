"""
Redirect entry point for hosts that launch ``streamlit run app.py``.

The landing page of the inventory dashboard is Welcome.py; the ``pages/``
folder next to this file is picked up the same way for either entry point.
"""

import sys
from pathlib import Path

# inventory_core sits beside this file
sys.path.insert(0, str(Path(__file__).resolve().parent))

import Welcome  # noqa: E402,F401
