"""Pygame 2D visualization for the dispersal simulation.

Renders the realm map, cohort density and the last step's outbound moves
in a window.  The simulation steps at a configurable rate while the display
refreshes at the Pygame frame rate.  North is drawn at the top, so grid
row 0 (the southern edge) is the bottom row of the window.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

import numpy as np
import pygame

from cohortdispersal.world.cell import Realm
from cohortdispersal.world.topology import Direction

if TYPE_CHECKING:
    from cohortdispersal.simulation.engine import SimulationEngine

# Colour palette
_BG = (15, 15, 20)
_TEXT = (200, 200, 200)
_MOVE_COLOUR = (255, 200, 50)

_REALM_COLOURS: dict[Realm, tuple[int, int, int]] = {
    Realm.TERRESTRIAL: (70, 55, 35),
    Realm.MARINE: (20, 40, 80),
}

# Density overlay colour range (dim -> bright)
_DENSITY_LO = np.array([40, 90, 40], dtype=np.float64)
_DENSITY_HI = np.array([160, 255, 120], dtype=np.float64)


class PygameRenderer:
    """Renders a SimulationEngine state into a Pygame window.

    Attributes:
        engine: The simulation engine to visualise.
        cell_size: Pixel size of each grid cell.
        screen: The Pygame display surface.
    """

    # Speed presets: steps per second at 30 fps
    _SPEED_STEPS: ClassVar[list[float]] = [
        0.25,
        0.5,
        1.0,
        2.0,
        5.0,
        10.0,
        30.0,
    ]

    def __init__(
        self,
        engine: SimulationEngine,
        cell_size: int = 12,
        steps_per_second: float = 2.0,
    ) -> None:
        """Initialise the renderer.

        Args:
            engine: The simulation engine to render.
            cell_size: Pixel width/height per grid cell.
            steps_per_second: Simulation steps per real-time second.
        """
        self.engine = engine
        self.grid = engine.grid
        self.cell_size = cell_size
        self.steps_per_second = steps_per_second
        self._speed_index = self._nearest_speed(steps_per_second)
        self._step_accumulator = 0.0
        self._show_moves = engine.tally is not None

        w = self.grid.n_lon * cell_size
        h = self.grid.n_lat * cell_size
        self._panel_width = 240
        self._win_w = w + self._panel_width
        self._win_h = max(h, 320)

        pygame.init()
        self.screen = pygame.display.set_mode((self._win_w, self._win_h))
        pygame.display.set_caption("Cohort dispersal")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)
        self.running = True
        self.paused = False

    def _nearest_speed(self, sps: float) -> int:
        """Return the index of the closest speed preset."""
        diffs = [abs(s - sps) for s in self._SPEED_STEPS]
        return diffs.index(min(diffs))

    def run(self, fps: int = 30) -> None:
        """Main loop: handle events, step sim, render.

        Args:
            fps: Target frames per second.
        """
        while self.running:
            dt = self.clock.tick(fps) / 1000.0
            self._handle_events()
            if not self.paused:
                self._step_accumulator += self.steps_per_second * dt
                steps = int(self._step_accumulator)
                self._step_accumulator -= steps
                for _ in range(steps):
                    self.engine.step()
            self._draw()

        pygame.quit()

    def _handle_events(self) -> None:
        """Process Pygame input events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_SPACE:
                    self.paused = not self.paused
                elif event.key == pygame.K_m and self.engine.tally is not None:
                    self._show_moves = not self._show_moves
                elif event.key in (pygame.K_PLUS, pygame.K_EQUALS):
                    self._speed_index = min(
                        len(self._SPEED_STEPS) - 1,
                        self._speed_index + 1,
                    )
                    self.steps_per_second = self._SPEED_STEPS[self._speed_index]
                elif event.key == pygame.K_MINUS:
                    self._speed_index = max(0, self._speed_index - 1)
                    self.steps_per_second = self._SPEED_STEPS[self._speed_index]

    def _rect(self, lat: int, lon: int) -> tuple[int, int, int, int]:
        cs = self.cell_size
        return (lon * cs, (self.grid.n_lat - 1 - lat) * cs, cs, cs)

    def _draw(self) -> None:
        """Render one frame."""
        self.screen.fill(_BG)
        self._draw_realm()
        self._draw_density()
        if self._show_moves:
            self._draw_moves()
        self._draw_info_panel()
        pygame.display.flip()

    def _draw_realm(self) -> None:
        """Draw every active cell in its realm colour."""
        for cell in self.grid.cells.values():
            pygame.draw.rect(
                self.screen,
                _REALM_COLOURS[cell.realm],
                self._rect(cell.lat_index, cell.lon_index),
            )

    def _draw_density(self) -> None:
        """Draw a centred square per cell scaled by its cohort count."""
        counts = {idx: cell.cohort_count for idx, cell in self.grid.cells.items()}
        max_count = max(counts.values(), default=0)
        if max_count <= 0:
            return

        cs = self.cell_size
        for (lat, lon), count in counts.items():
            if count == 0:
                continue
            t = count / max_count
            colour = _DENSITY_LO + t * (_DENSITY_HI - _DENSITY_LO)
            side = max(2, int(cs * (0.3 + 0.5 * t)))
            x, y, _, _ = self._rect(lat, lon)
            offset = (cs - side) // 2
            pygame.draw.rect(
                self.screen,
                colour.astype(int).tolist(),
                (x + offset, y + offset, side, side),
            )

    def _draw_moves(self) -> None:
        """Draw a short tick from each cell towards its busiest exit direction."""
        tally = self.engine.tally
        if tally is None:
            return
        cs = self.cell_size
        busiest = tally.outbound.argmax(axis=2)
        totals = tally.outbound.sum(axis=2)
        for lat, lon in zip(*np.nonzero(totals), strict=True):
            direction = Direction(int(busiest[lat, lon]) + 1)
            dlat, dlon = direction.offset
            x, y, _, _ = self._rect(int(lat), int(lon))
            cx, cy = x + cs // 2, y + cs // 2
            end = (cx + dlon * cs // 2, cy - dlat * cs // 2)
            pygame.draw.line(self.screen, _MOVE_COLOUR, (cx, cy), end, 1)

    def _draw_info_panel(self) -> None:
        """Draw a stats panel on the right side of the window."""
        panel_x = self.grid.n_lon * self.cell_size + 10
        y = 10

        lines = [
            f"Step: {self.engine.time_step}",
            f"Month: {self.engine.current_month + 1}",
            f"Speed: {self.steps_per_second:.2f} s/s",
            f"{'PAUSED' if self.paused else 'RUNNING'}",
            "",
            "--- Dispersal ---",
            f"Cohorts: {self.grid.total_cohorts()}",
            f"Last step: {self.engine.last_moves}",
            f"Total moved: {self.engine.dispersal_count}",
        ]
        if self.engine.tally is not None:
            lines.append(f"Long range: {self.engine.tally.long_range}")

        lines += ["", "--- Groups ---"]
        for group, count in sorted(self.grid.cohort_counts_by_group().items()):
            lines.append(f"  {group}: {count}")

        lines += [
            "",
            "--- Controls ---",
            "SPACE: pause",
            "+/-: speed",
            "M: moves overlay",
            "ESC: quit",
        ]

        for line in lines:
            surf = self.font.render(line, True, _TEXT)
            self.screen.blit(surf, (panel_x, y))
            y += 18
