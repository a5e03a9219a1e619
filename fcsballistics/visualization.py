"""
Visualization
=============
Plots for inspecting generated range tables:
  1. Range table (time of flight and penetration vs distance)
  2. Density model (table lookup vs closed form)
"""

from pathlib import Path
from typing import List

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from .atmosphere import DensityTable, density_profile
from .range_table import RangeRow


# ── Plot colours ──────────────────────────────────────────────────────────
BACKGROUND = '#0a0a0a'
FOREGROUND = '#e0e0e0'
GRID = '#333333'
TIME_COLOR = '#00d4ff'
PEN_COLOR = '#ff6b35'
FORMULA_COLOR = '#00e676'
TABLE_COLOR = '#e040fb'


def _dark_axes(fig, *axes):
    fig.patch.set_facecolor(BACKGROUND)
    for ax in axes:
        ax.set_facecolor(BACKGROUND)
        ax.tick_params(colors=FOREGROUND)
        for label in (ax.xaxis.label, ax.yaxis.label, ax.title):
            label.set_color(FOREGROUND)
        ax.grid(True, color=GRID, alpha=0.4, linewidth=0.5)
        for spine in ax.spines.values():
            spine.set_color(GRID)


def output_dir(path='outputs') -> Path:
    """Create (if needed) and return the plot output directory."""
    out = Path(path)
    out.mkdir(parents=True, exist_ok=True)
    return out


def _save(fig, save_path):
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight',
                    facecolor=BACKGROUND)


# ══════════════════════════════════════════════════════════════════════════
#  1. Range Table
# ══════════════════════════════════════════════════════════════════════════

def plot_range_table(rows: List[RangeRow], title: str = 'Range Table',
                     save_path: str = None) -> plt.Figure:
    """Time of flight and penetration against ground distance."""
    fig, (ax_time, ax_pen) = plt.subplots(1, 2, figsize=(14, 5))
    _dark_axes(fig, ax_time, ax_pen)

    distance = np.array([r.distance for r in rows])
    time = np.array([r.time for r in rows])
    pen = np.array([r.penetration for r in rows])

    finite = np.isfinite(pen)
    ax_time.plot(distance, time, color=TIME_COLOR, linewidth=2)
    ax_pen.plot(distance[finite], pen[finite], color=PEN_COLOR, linewidth=2)
    for ax, ylabel, name in ((ax_time, 'Time of flight (s)', 'Time of Flight'),
                             (ax_pen, 'Penetration (mm)', 'Penetration')):
        ax.set_xlabel('Distance (m)')
        ax.set_ylabel(ylabel)
        ax.set_title(name, fontweight='bold')
        ax.set_xlim(left=0)
        ax.set_ylim(bottom=0)

    fig.suptitle(title, fontsize=14, fontweight='bold',
                 color=FOREGROUND, y=1.02)
    fig.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  2. Density Model
# ══════════════════════════════════════════════════════════════════════════

def plot_density_profile(table: DensityTable, max_altitude: float = None,
                         save_path: str = None) -> plt.Figure:
    """Tabulated density against the closed-form barometric formula."""
    top = max_altitude if max_altitude is not None else table.ceiling * 2.0
    alts = np.linspace(0.0, top, 400)
    profile = density_profile(alts, table)

    fig, ax = plt.subplots(figsize=(8, 6))
    _dark_axes(fig, ax)

    ax.plot(profile['density'], alts, color=FORMULA_COLOR,
            linewidth=2, label='Barometric formula')
    ax.plot(profile['table'], alts, '--', color=TABLE_COLOR,
            linewidth=1.5, label='Table lookup')
    ax.axhline(y=table.ceiling, color='#555', linestyle=':', alpha=0.7)
    ax.set_xlabel('Density (kg/m³)')
    ax.set_ylabel('Altitude (m)')
    ax.set_title('Air Density', fontweight='bold')
    ax.legend(facecolor='#1a1a1a', edgecolor='#444', labelcolor=FOREGROUND)

    fig.tight_layout()
    _save(fig, save_path)
    return fig
