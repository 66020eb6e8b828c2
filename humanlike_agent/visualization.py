"""
Behavior Visualization Tools

Simple matplotlib-based plots of a controller's tick trace:
- Emotion trait trajectories
- Behavior state timeline, with panic / hesitation interrupts shaded
- Button press rates per state

Usage:
    from humanlike_agent.visualization import BehaviorVisualizer

    viz = BehaviorVisualizer(controller)

    # ... run the controller ...

    viz.plot_emotions()
    viz.plot_states()
    viz.save_all("session_plots/")
"""

import os
import time
from typing import Dict, Iterable, Optional

import matplotlib.pyplot as plt
import numpy as np

from .actions import Action
from .behavior_state import BehaviorStateId
from .controller import SOURCE_HESITATION, SOURCE_PANIC, BehaviorController, TickRecord
from .logging_config import get_logger

logger = get_logger(__name__)

STATE_ORDER = [state_id.label for state_id in BehaviorStateId]

STATE_COLORS = {
    'explore': '#4CAF50',
    'jump': '#2196F3',
    'collect': '#FFC107',
    'flee': '#F44336',
    'stuck': '#795548',
    'hesitate': '#9C27B0',
}


class BehaviorVisualizer:
    """
    Post-hoc visualization of a BehaviorController run.

    Reads the controller's bounded trace; nothing is recorded here.
    """

    def __init__(self, controller: Optional[BehaviorController] = None,
                 records: Optional[Iterable[TickRecord]] = None):
        """
        Args:
            controller: Controller whose trace should be plotted
            records: Explicit tick records (used instead of a controller)
        """
        self.controller = controller
        self._records = list(records) if records is not None else None

    @property
    def records(self):
        if self._records is not None:
            return self._records
        if self.controller is not None:
            return list(self.controller.trace)
        return []

    def get_arrays(self) -> Dict[str, np.ndarray]:
        """Convert the trace to numpy arrays for plotting."""
        records = self.records
        if not records:
            return {}

        return {
            'tick': np.array([r.tick for r in records]),
            'confidence': np.array([r.confidence for r in records]),
            'caution': np.array([r.caution for r in records]),
            'curiosity': np.array([r.curiosity for r in records]),
            'experience': np.array([r.experience for r in records]),
            'state_index': np.array([STATE_ORDER.index(r.state) for r in records]),
            'panic': np.array([r.source == SOURCE_PANIC for r in records]),
            'hesitation': np.array([r.source == SOURCE_HESITATION for r in records]),
            'actions': np.array([r.actions for r in records], dtype=bool),
        }

    def plot_emotions(self, figsize: tuple = (12, 5), save_path: Optional[str] = None):
        """
        Plot emotion traits over time.

        Args:
            figsize: Figure size (width, height)
            save_path: Optional path to save figure
        """
        data = self.get_arrays()
        if not data:
            logger.info("No ticks recorded yet")
            return None

        fig, ax = plt.subplots(figsize=figsize)
        tick = data['tick']
        ax.plot(tick, data['confidence'], label='Confidence', color='#009688', linewidth=2)
        ax.plot(tick, data['caution'], label='Caution', color='#FF9800', linewidth=2)
        ax.plot(tick, data['curiosity'], label='Curiosity', color='#3F51B5', linewidth=1.5)
        ax.plot(tick, data['experience'], label='Experience', color='#607D8B',
                linewidth=1.5, linestyle='--')
        ax.set_ylabel('Level')
        ax.set_xlabel('Tick')
        ax.set_title('Emotion Dynamics')
        ax.legend(loc='upper right', fontsize=8)
        ax.set_ylim(0, 1)
        ax.grid(True, alpha=0.3)

        plt.tight_layout()

        if save_path:
            fig.savefig(save_path, dpi=150, bbox_inches='tight')
            logger.info(f"Saved plot to {save_path}")

        return fig

    def plot_states(self, figsize: tuple = (12, 4), save_path: Optional[str] = None):
        """
        Plot the active behavior state per tick, shading interrupt ticks.

        Args:
            figsize: Figure size
            save_path: Optional path to save figure
        """
        data = self.get_arrays()
        if not data:
            logger.info("No ticks recorded yet")
            return None

        fig, ax = plt.subplots(figsize=figsize)
        tick = data['tick']
        states = data['state_index']

        colors = [STATE_COLORS[STATE_ORDER[i]] for i in states]
        ax.scatter(tick, states, c=colors, s=6, marker='s')

        # Interrupt bands
        ax.fill_between(tick, -0.5, len(STATE_ORDER) - 0.5, where=data['panic'],
                        color='#F44336', alpha=0.15, step='mid', label='Panic')
        ax.fill_between(tick, -0.5, len(STATE_ORDER) - 0.5, where=data['hesitation'],
                        color='#9C27B0', alpha=0.15, step='mid', label='Hesitation')

        ax.set_yticks(range(len(STATE_ORDER)))
        ax.set_yticklabels([name.capitalize() for name in STATE_ORDER])
        ax.set_ylim(-0.5, len(STATE_ORDER) - 0.5)
        ax.set_xlabel('Tick')
        ax.set_title('Behavior State Timeline')
        ax.legend(loc='upper right', fontsize=8)
        ax.grid(True, axis='x', alpha=0.3)

        plt.tight_layout()

        if save_path:
            fig.savefig(save_path, dpi=150, bbox_inches='tight')

        return fig

    def plot_action_rates(self, figsize: tuple = (10, 5), save_path: Optional[str] = None):
        """
        Heatmap of how often each button is pressed while in each state.

        Args:
            figsize: Figure size
            save_path: Optional path to save figure
        """
        data = self.get_arrays()
        if not data:
            logger.info("No ticks recorded yet")
            return None

        matrix = np.zeros((len(STATE_ORDER), len(Action)))
        for i in range(len(STATE_ORDER)):
            mask = data['state_index'] == i
            if mask.any():
                matrix[i] = data['actions'][mask].mean(axis=0)

        fig, ax = plt.subplots(figsize=figsize)

        im = ax.imshow(matrix, aspect='auto', cmap='YlOrRd', vmin=0, vmax=1)
        ax.set_yticks(range(len(STATE_ORDER)))
        ax.set_yticklabels([name.capitalize() for name in STATE_ORDER])
        ax.set_xticks(range(len(Action)))
        ax.set_xticklabels([action.name.capitalize() for action in Action])
        ax.set_title('Button Press Rate by State')

        cbar = fig.colorbar(im, ax=ax)
        cbar.set_label('Press rate')

        plt.tight_layout()

        if save_path:
            fig.savefig(save_path, dpi=150, bbox_inches='tight')

        return fig

    def save_all(self, output_dir: str = "behavior_plots"):
        """
        Save all available plots to a directory.

        Args:
            output_dir: Directory to save plots
        """
        os.makedirs(output_dir, exist_ok=True)

        timestamp = time.strftime("%Y%m%d_%H%M%S")

        figures = [
            self.plot_emotions(save_path=f"{output_dir}/emotions_{timestamp}.png"),
            self.plot_states(save_path=f"{output_dir}/states_{timestamp}.png"),
            self.plot_action_rates(save_path=f"{output_dir}/actions_{timestamp}.png"),
        ]
        for fig in figures:
            if fig is not None:
                plt.close(fig)

        logger.info(f"Saved all plots to {output_dir}/")

    def show(self):
        """Show all current plots (interactive mode)."""
        plt.show()
