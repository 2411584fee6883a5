"""
Replay Viewer
=============

View recorded replays by re-simulating them tick for tick.

Usage:
    python tools/replay_viewer.py replay.json
    python -m tools.replay_viewer replay.json

Controls:
    SPACE       Play/Pause
    LEFT/RIGHT  Step backward/forward
    HOME/END    Jump to start/end
    Click       Seek on timeline
    Drag        Scrub timeline
    R           Restart
    +/-         Speed up/slow down
    ESC         Quit
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np

# Add project root to path for direct script execution
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from skate_party.catch_core.config_loader import GameConfig, load_config
from skate_party.catch_core.env_gym import SkatePartyEnv
from skate_party.catch_core.replay_recorder import compute_config_hash, load_replay

from tools.play_human import SkateRenderer


# -----------------------------------------------------------------------------
# Timeline UI Component
# -----------------------------------------------------------------------------
class Timeline:
    """
    A visual timeline bar for replay navigation.
    Shows the score curve and current position, and allows click/drag seeking.
    """

    def __init__(
        self,
        x: int,
        y: int,
        width: int,
        height: int,
        total_steps: int,
        scores: List[int]
    ):
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.total_steps = max(1, total_steps)
        self.scores = scores if scores else [0] * self.total_steps

        max_score = max(self.scores) if self.scores else 0
        self.normalized_scores = [s / max_score for s in self.scores] if max_score > 0 else [0] * len(self.scores)

        self.dragging = False

        # Colors
        self.bg_color = (30, 30, 35)
        self.border_color = (60, 60, 70)
        self.score_color = (80, 120, 180)
        self.cursor_color = (255, 200, 50)

    def point_to_index(self, px: int, py: int) -> int:
        """Convert screen point to step index."""
        if px < self.x or px > self.x + self.width:
            return -1
        if py < self.y or py > self.y + self.height:
            return -1

        idx = int(((px - self.x) / self.width) * self.total_steps)
        return max(0, min(self.total_steps - 1, idx))

    def handle_event(self, event) -> Optional[int]:
        """Handle mouse events. Returns new index if seeking, None otherwise."""
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            idx = self.point_to_index(*event.pos)
            if idx >= 0:
                self.dragging = True
                return idx

        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            self.dragging = False

        elif event.type == pygame.MOUSEMOTION and self.dragging:
            idx = self.point_to_index(*event.pos)
            if idx >= 0:
                return idx

        return None

    def render(self, screen: pygame.Surface, current_idx: int) -> None:
        """Render the score curve and cursor."""
        bg_rect = pygame.Rect(self.x - 5, self.y - 5, self.width + 10, self.height + 10)
        pygame.draw.rect(screen, self.bg_color, bg_rect)
        pygame.draw.rect(screen, self.border_color, bg_rect, 1)

        if len(self.normalized_scores) > 1:
            points = [
                (
                    self.x + int(i / (len(self.normalized_scores) - 1) * self.width),
                    self.y + self.height - int(s * self.height)
                )
                for i, s in enumerate(self.normalized_scores)
            ]
            pygame.draw.lines(screen, self.score_color, False, points, 2)

        cursor_x = self.x + int(min(current_idx, self.total_steps) / self.total_steps * self.width)
        pygame.draw.line(screen, self.cursor_color, (cursor_x, self.y), (cursor_x, self.y + self.height), 2)


# -----------------------------------------------------------------------------
# Replay Viewer
# -----------------------------------------------------------------------------
def rebuild_env_to_step(
    config: GameConfig,
    seed: Optional[int],
    actions: Sequence[Sequence[float]],
    target_step: int
) -> SkatePartyEnv:
    """Rebuild the environment by replaying actions up to target_step."""
    env = SkatePartyEnv(config=config)
    env.reset(seed=seed)

    for i in range(min(target_step, len(actions))):
        if env.game.is_over:
            break
        env.step(np.asarray(actions[i], dtype=np.float32))

    return env


def view_replay(
    replay_path: str,
    config_path: Optional[str] = None,
    speed: float = 1.0
) -> None:
    """
    View a recorded replay with a timeline.

    Args:
        replay_path: Path to replay JSON file.
        config_path: Config the replay was recorded with. Uses default if None.
        speed: Playback speed multiplier (1.0 = real time).
    """
    if not PYGAME_AVAILABLE:
        print("Error: pygame is required for replay viewer.")
        print("Install with: pip install pygame")
        return

    replay = load_replay(replay_path)
    seed = replay.get("seed")
    actions = replay.get("actions", [])
    scores = replay.get("scores", [])

    if not actions:
        print("Error: Replay contains no actions")
        return

    config = load_config(config_path)
    replay_hash = replay.get("config_hash")
    current_hash = compute_config_hash(config)

    print(f"Replay: {replay_path}")
    print(f"Seed: {seed}")
    print(f"Agent: {replay.get('agent', 'unknown')}")
    print(f"Steps: {len(actions)}")
    print(f"Final score: {replay.get('final_score', 0)}")
    print(f"Ended by: {replay.get('end_reason', 'unknown')}")

    if replay_hash is not None and replay_hash != current_hash:
        print()
        print("WARNING: Replay was recorded with a different game config!")
        print(f"  Replay config hash: {replay_hash}")
        print(f"  Current config hash: {current_hash}")
        print("  Playback will not match the recorded scores.")
    print()

    env = rebuild_env_to_step(config, seed, actions, 0)
    renderer = SkateRenderer(config)

    pygame.init()
    game_width = int(config.playfield.width)
    game_height = int(config.playfield.height)
    timeline_height = 50
    margin = 15
    window_height = game_height + timeline_height + margin * 2
    screen = pygame.display.set_mode((game_width, window_height))
    pygame.display.set_caption(f"Replay: {Path(replay_path).name}")
    clock = pygame.time.Clock()
    font = pygame.font.Font(None, 24)

    timeline = Timeline(
        x=margin,
        y=game_height + margin,
        width=game_width - margin * 2,
        height=timeline_height,
        total_steps=len(actions),
        scores=scores
    )

    action_idx = 0
    paused = True
    playback_speed = speed
    fps = 60
    pending_steps = 0.0

    def seek_to(target_idx: int) -> None:
        nonlocal env, action_idx
        target_idx = max(0, min(len(actions), target_idx))
        env = rebuild_env_to_step(config, seed, actions, target_idx)
        action_idx = target_idx

    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_SPACE:
                    paused = not paused
                elif event.key == pygame.K_RIGHT:
                    seek_to(action_idx + 1)
                elif event.key == pygame.K_LEFT:
                    seek_to(action_idx - 1)
                elif event.key == pygame.K_HOME:
                    seek_to(0)
                elif event.key == pygame.K_END:
                    seek_to(len(actions))
                elif event.key == pygame.K_r:
                    seek_to(0)
                    paused = False
                elif event.key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
                    playback_speed = min(16.0, playback_speed * 2)
                elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
                    playback_speed = max(0.25, playback_speed / 2)

            seek = timeline.handle_event(event)
            if seek is not None:
                seek_to(seek)

        if not paused:
            pending_steps += playback_speed
            while pending_steps >= 1.0 and action_idx < len(actions) and not env.game.is_over:
                env.step(np.asarray(actions[action_idx], dtype=np.float32))
                action_idx += 1
                pending_steps -= 1.0
            if action_idx >= len(actions) or env.game.is_over:
                paused = True
                pending_steps = 0.0

        renderer.render(screen, env.game.snapshot)
        pygame.draw.rect(screen, (20, 20, 25), (0, game_height, game_width, window_height - game_height))
        timeline.render(screen, action_idx)

        status = "PAUSED" if paused else f"PLAYING {playback_speed:g}x"
        label = font.render(f"{status}  step {action_idx}/{len(actions)}", True, (220, 220, 220))
        screen.blit(label, (margin, game_height + 2))

        pygame.display.flip()
        clock.tick(fps)

    env.close()
    pygame.quit()


def main():
    parser = argparse.ArgumentParser(
        description="View a recorded Skate Party replay",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Controls:
  SPACE       Play/Pause
  LEFT/RIGHT  Step backward/forward
  HOME/END    Jump to start/end
  Click       Seek on timeline
  +/-         Speed up/slow down
  R           Restart
  ESC         Quit
        """
    )
    parser.add_argument("replay", type=str, help="Path to replay JSON file")
    parser.add_argument("--config", type=str, default=None, help="Config YAML the replay was recorded with")
    parser.add_argument("--speed", type=float, default=1.0, help="Initial playback speed")

    args = parser.parse_args()

    view_replay(
        replay_path=args.replay,
        config_path=args.config,
        speed=args.speed
    )

    return 0


if __name__ == "__main__":
    sys.exit(main())
