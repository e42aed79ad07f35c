"""
Human Play Mode
================

Drive the penguin with the keyboard through the agent's heuristic path.

Controls:
    - W: Swim forward
    - A / D: Turn left / right
    - R: Restart episode
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--size SIZE] [--feed-radius R]
"""

from __future__ import annotations

import argparse
import math
import sys
from typing import Set, Tuple

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from penguin_arena.penguin_core.config_loader import load_config, PenguinConfig
from penguin_arena.penguin_core.game import PenguinGame


WATER = (120, 190, 230)
ICE = (235, 245, 250)
PENGUIN = (40, 40, 50)
PENGUIN_FULL = (90, 60, 140)
BABY = (160, 160, 170)
FISH = (250, 150, 60)
HEART = (230, 60, 90)
TEXT = (20, 30, 40)


class HumanPlayer:
    """Real-time keyboard play loop at the physics tick rate."""

    def __init__(self, config: PenguinConfig, seed: int, window_size: int):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame is required for human play: pip install pygame")

        self._config = config
        self._seed = seed
        self._size = window_size
        self._scale = window_size / (2.0 * config.area.half_extent)
        self._keys: Set[str] = set()

        self._game = PenguinGame(config=config, seed=seed, key_source=self._pressed_keys)
        self._game.reset(seed=seed)

        pygame.init()
        self._screen = pygame.display.set_mode((window_size, window_size))
        pygame.display.set_caption("Penguin Arena")
        self._font = pygame.font.Font(None, 24)
        self._clock = pygame.time.Clock()
        self._running = True

    @property
    def game(self) -> PenguinGame:
        return self._game

    def _pressed_keys(self) -> Set[str]:
        return set(self._keys)

    def _to_screen(self, x: float, z: float) -> Tuple[int, int]:
        h = self._config.area.half_extent
        return int((x + h) * self._scale), int((h - z) * self._scale)

    def run(self) -> float:
        """Run the game loop. Returns the last episode's cumulative reward."""
        print("=== Penguin Arena ===")
        print("W to swim, A/D to turn, R to restart, ESC to quit")
        print()

        fps = int(round(1.0 / self._config.physics.dt))
        while self._running:
            self._handle_events()
            result = self._game.tick()
            if result.reward >= 0.5:
                print(f"  +1 (Total: {self._game.agent.get_cumulative_reward():.2f})")
            if result.terminated or result.truncated:
                print(f"\nEPISODE OVER ({result.reason}) - "
                      f"Reward: {self._game.agent.get_cumulative_reward():.2f}\n")
            self._render()
            self._clock.tick(fps)

        pygame.quit()
        return self._game.agent.get_cumulative_reward()

    def _handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key == pygame.K_r:
                    self._game.reset()
                    print("\n=== Episode Restarted ===\n")

        pressed = pygame.key.get_pressed()
        self._keys = {name for name, key in (("w", pygame.K_w), ("a", pygame.K_a), ("d", pygame.K_d))
                      if pressed[key]}

    def _render(self) -> None:
        data = self._game.get_render_data()
        self._screen.fill(WATER)

        baby = data["baby"]
        pygame.draw.circle(self._screen, ICE, self._to_screen(baby["x"], baby["z"]),
                           int(3.0 * self._scale))
        pygame.draw.circle(self._screen, BABY, self._to_screen(baby["x"], baby["z"]),
                           max(2, int(baby["radius"] * self._scale)))

        for fish in data["fish"]:
            pygame.draw.circle(self._screen, FISH, self._to_screen(fish["x"], fish["z"]),
                               max(2, int(fish["radius"] * self._scale)))

        for marker in data["markers"]:
            color = HEART if marker["kind"] == "heart" else FISH
            pygame.draw.circle(self._screen, color, self._to_screen(marker["x"], marker["z"]), 4, 1)

        penguin = data["penguin"]
        center = self._to_screen(penguin["x"], penguin["z"])
        radius = max(3, int(penguin["radius"] * self._scale))
        pygame.draw.circle(self._screen, PENGUIN_FULL if penguin["is_full"] else PENGUIN, center, radius)
        yaw = math.radians(penguin["yaw"])
        tip = (center[0] + int(math.sin(yaw) * radius * 2), center[1] - int(math.cos(yaw) * radius * 2))
        pygame.draw.line(self._screen, PENGUIN, center, tip, 2)

        label = self._font.render(
            f"Step {data['step_count']}  Reward {data['cumulative_reward']:.2f}", True, TEXT
        )
        self._screen.blit(label, (8, 8))
        pygame.display.flip()


def main():
    parser = argparse.ArgumentParser(description="Play the penguin arena with the keyboard")
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    parser.add_argument("--size", type=int, default=600, help="Window size in pixels (default: 600)")
    parser.add_argument("--feed-radius", type=float, default=None, help="Override feed_radius")

    args = parser.parse_args()

    try:
        config = load_config()
        player = HumanPlayer(config=config, seed=args.seed, window_size=args.size)
        if args.feed_radius is not None:
            player.game.set_environment_parameter("feed_radius", args.feed_radius)
            player.game.reset()
        reward = player.run()
        print(f"\nFinal Reward: {reward:.2f}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
