from __future__ import annotations

from typing import Any, Dict

import altair as alt

alt.data_transformers.disable_max_rows()

CHANNEL_COLORS = {
    "linkedin": "#0077b5",
    "email": "#ea4335",
    "whatsapp": "#25d366",
    "other": "#94a3b8",
}


def channel_color_scale() -> alt.Scale:
    return alt.Scale(domain=list(CHANNEL_COLORS), range=list(CHANNEL_COLORS.values()))


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()
