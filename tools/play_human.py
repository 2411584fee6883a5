"""
Human Play Mode
================

Play Ice Cream Skate Party interactively with mouse or keyboard control.

Controls:
    - Mouse: Steer the skater toward the pointer
    - Arrows / WASD: Steer the skater
    - Click/Space/Enter: Start or restart
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--width WIDTH] [--height HEIGHT] [--classic]
"""

from __future__ import annotations

import argparse
import math
import sys
from typing import Dict, Optional, Tuple

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from skate_party.catch_core.config_loader import GameConfig, load_classic_config, load_config
from skate_party.catch_core.cosmetics import BIG_POPUP_POINTS, ParticleKind
from skate_party.catch_core.entities import Flavor, PowerUpKind
from skate_party.catch_core.game import CoreGame
from skate_party.catch_core.input_adapter import InputBuffer
from skate_party.catch_core.persistence import JsonFileHighScoreStore
from skate_party.catch_core.session import SessionMode
from skate_party.catch_core.state_snapshot import GameSnapshot


Color = Tuple[int, int, int]

FLAVOR_COLORS: Dict[Flavor, Color] = {
    Flavor.BLUEBERRY: (120, 150, 255),
    Flavor.MANGO: (255, 190, 70),
}

POWER_UP_COLORS: Dict[PowerUpKind, Color] = {
    PowerUpKind.MAGNETISM: (230, 80, 200),
    PowerUpKind.SLOWDOWN: (90, 210, 230),
    PowerUpKind.SCORE_BOOST: (255, 230, 60),
    PowerUpKind.LIFE_GAIN: (255, 90, 110),
}

POWER_UP_LABELS: Dict[PowerUpKind, str] = {
    PowerUpKind.MAGNETISM: "M",
    PowerUpKind.SLOWDOWN: "S",
    PowerUpKind.SCORE_BOOST: "x2",
    PowerUpKind.LIFE_GAIN: "+1",
}


class SkateRenderer:
    """
    Flat-color renderer for human play mode.
    Draws straight from the settled GameSnapshot; it never touches the game.
    """

    def __init__(self, config: GameConfig):
        """Initialize renderer for the configured playfield."""
        self._config = config
        self._width = int(config.playfield.width)
        self._height = int(config.playfield.height)
        self._scoop_radius = int(config.entities.size / 2)

        # Colors - icy rink palette
        self._bg_gradient_top = (215, 235, 255)
        self._bg_gradient_bottom = (245, 250, 255)
        self._skater = (250, 120, 160)
        self._skater_outline = (160, 60, 100)
        self._cone = (210, 160, 100)
        self._text_dark = (40, 50, 80)
        self._text_light = (100, 110, 140)
        self._sparkle = (255, 255, 255)
        self._popup_gold = (252, 211, 77)

        # Fonts
        pygame.font.init()
        self._font_huge = pygame.font.Font(None, 56)
        self._font_large = pygame.font.Font(None, 42)
        self._font_medium = pygame.font.Font(None, 28)
        self._font_small = pygame.font.Font(None, 20)

        # Pre-render background
        self._bg_surface = self._create_gradient_background()

    def _create_gradient_background(self) -> pygame.Surface:
        """Create icy gradient background."""
        surface = pygame.Surface((self._width, self._height))
        for y in range(self._height):
            t = y / self._height
            r = int(self._bg_gradient_top[0] * (1-t) + self._bg_gradient_bottom[0] * t)
            g = int(self._bg_gradient_top[1] * (1-t) + self._bg_gradient_bottom[1] * t)
            b = int(self._bg_gradient_top[2] * (1-t) + self._bg_gradient_bottom[2] * t)
            pygame.draw.line(surface, (r, g, b), (0, y), (self._width, y))
        return surface

    def render(self, screen: pygame.Surface, snapshot: GameSnapshot) -> None:
        """Render the complete game scene."""
        screen.blit(self._bg_surface, (0, 0))

        self._draw_trail(screen, snapshot)
        self._draw_entities(screen, snapshot)
        self._draw_avatar(screen, snapshot)
        self._draw_particles(screen, snapshot)
        self._draw_hud(screen, snapshot)

        if snapshot.mode is SessionMode.START:
            self._draw_start(screen, snapshot)
        elif snapshot.mode is SessionMode.GAME_OVER:
            self._draw_game_over(screen, snapshot)

    def _draw_trail(self, screen: pygame.Surface, snapshot: GameSnapshot) -> None:
        for dot in snapshot.trail:
            radius = max(1, int(10 * dot.life))
            surface = pygame.Surface((radius * 2, radius * 2), pygame.SRCALPHA)
            pygame.draw.circle(surface, (*self._skater, int(120 * dot.life)), (radius, radius), radius)
            screen.blit(surface, (int(dot.x) - radius, int(dot.y) - radius))

    def _draw_entities(self, screen: pygame.Surface, snapshot: GameSnapshot) -> None:
        """Scoops as a circle on a cone, power-ups as labelled discs."""
        radius = self._scoop_radius
        for entity in snapshot.entities:
            x, y = int(entity.x), int(entity.y)
            if entity.is_power_up:
                color = POWER_UP_COLORS[entity.power_up]
                pygame.draw.circle(screen, color, (x, y), radius)
                pygame.draw.circle(screen, self._text_dark, (x, y), radius, 2)
                label = self._font_small.render(POWER_UP_LABELS[entity.power_up], True, self._text_dark)
                screen.blit(label, label.get_rect(center=(x, y)))
                continue

            # Cone tip follows the scoop's rotation
            tip = (
                x + int(math.sin(entity.rotation) * radius * 1.4),
                y + int(math.cos(entity.rotation) * radius * 1.4),
            )
            left = (x - radius // 2, y)
            right = (x + radius // 2, y)
            pygame.draw.polygon(screen, self._cone, [left, right, tip])

            color = FLAVOR_COLORS[entity.flavor]
            pygame.draw.circle(screen, color, (x, y), radius // 2 + 6)
            if entity.rare:
                pygame.draw.circle(screen, (255, 215, 0), (x, y), radius // 2 + 9, 3)

    def _draw_avatar(self, screen: pygame.Surface, snapshot: GameSnapshot) -> None:
        avatar = snapshot.avatar
        rect = pygame.Rect(0, 0, int(avatar.width), int(avatar.height))
        rect.center = (int(avatar.x), int(avatar.y))
        pygame.draw.ellipse(screen, self._skater, rect)
        pygame.draw.ellipse(screen, self._skater_outline, rect, 3)

        # Glow ring while magnetism is active
        if snapshot.effect_remaining(PowerUpKind.MAGNETISM) > 0:
            radius = int(self._config.power_ups.magnet_radius)
            pygame.draw.circle(screen, POWER_UP_COLORS[PowerUpKind.MAGNETISM], rect.center, radius, 1)

    def _draw_particles(self, screen: pygame.Surface, snapshot: GameSnapshot) -> None:
        for particle in snapshot.particles:
            x, y = int(particle.x), int(particle.y)
            if particle.kind is ParticleKind.SCORE:
                color = self._popup_gold if particle.points >= BIG_POPUP_POINTS else self._text_dark
                text = self._font_medium.render(f"+{particle.points}", True, color)
                text.set_alpha(int(255 * particle.life))
                screen.blit(text, text.get_rect(center=(x, y)))
                continue
            if particle.flavor is not None and particle.kind is ParticleKind.SPLAT:
                color = FLAVOR_COLORS[particle.flavor]
            else:
                color = self._sparkle
            radius = max(1, int(particle.size * particle.life))
            pygame.draw.circle(screen, color, (x, y), radius)

    def _draw_hud(self, screen: pygame.Surface, snapshot: GameSnapshot) -> None:
        """Score, combo, lives and active effects."""
        score_label = self._font_medium.render("SCORE", True, self._text_light)
        screen.blit(score_label, (20, 15))
        score_value = self._font_huge.render(f"{snapshot.score:,}", True, self._text_dark)
        screen.blit(score_value, (20, 38))

        if snapshot.combo > 0:
            combo_text = f"Combo {snapshot.combo}  x{snapshot.multiplier}"
            color = (220, 80, 40) if snapshot.milestone else self._text_dark
            combo = self._font_medium.render(combo_text, True, color)
            screen.blit(combo, (20, 85))

        lives = self._font_medium.render(
            f"Lives {snapshot.lives}/{snapshot.max_lives}", True, self._text_dark
        )
        screen.blit(lives, (self._width - lives.get_width() - 20, 15))

        best = self._font_small.render(f"Best {snapshot.high_score:,}", True, self._text_light)
        screen.blit(best, (self._width - best.get_width() - 20, 42))

        y = 62
        for effect in snapshot.effects:
            text = f"{effect.kind.value} {effect.remaining:.1f}s"
            surface = self._font_small.render(text, True, POWER_UP_COLORS[effect.kind])
            screen.blit(surface, (self._width - surface.get_width() - 20, y))
            y += 18

    def _draw_panel(self, screen: pygame.Surface, lines) -> None:
        overlay = pygame.Surface((self._width, self._height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 120))
        screen.blit(overlay, (0, 0))

        y = self._height // 2 - 60
        for font, text in lines:
            surface = font.render(text, True, (255, 255, 255))
            screen.blit(surface, surface.get_rect(center=(self._width // 2, y)))
            y += 50

    def _draw_start(self, screen: pygame.Surface, snapshot: GameSnapshot) -> None:
        self._draw_panel(screen, [
            (self._font_huge, "ICE CREAM SKATE PARTY"),
            (self._font_medium, f"High score: {snapshot.high_score:,}"),
            (self._font_medium, "Click or press Space to start"),
        ])

    def _draw_game_over(self, screen: pygame.Surface, snapshot: GameSnapshot) -> None:
        title = "NEW HIGH SCORE!" if snapshot.is_new_high_score else "GAME OVER"
        self._draw_panel(screen, [
            (self._font_huge, title),
            (self._font_large, f"Score: {snapshot.score:,}"),
            (self._font_medium, f"Best combo: {snapshot.best_combo}"),
            (self._font_medium, "Click or press Space to play again"),
        ])


class HumanPlayer:
    """
    Human-playable catch game.

    Device events go into an InputBuffer; each frame drains it into the
    game and runs one variable-dt tick.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        target_fps: int = 60,
        high_score_path: str = "skate_party_highscore.json"
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        if config is None:
            config = load_config()

        self._config = config
        self._target_fps = target_fps

        # Initialize game
        self._game = CoreGame(
            config=config,
            seed=seed,
            high_score_store=JsonFileHighScoreStore(high_score_path)
        )
        self._input = InputBuffer()

        # Initialize pygame
        pygame.init()
        self._screen = pygame.display.set_mode(
            (int(config.playfield.width), int(config.playfield.height))
        )
        pygame.display.set_caption("Ice Cream Skate Party")
        self._clock = pygame.time.Clock()

        self._renderer = SkateRenderer(config)
        self._running = True

    def run(self) -> int:
        """Run the game loop. Returns the last session's score."""
        print("=== Ice Cream Skate Party ===")
        print("Mouse or arrows/WASD to skate, Click/Space to start, ESC to quit")
        print()

        while self._running:
            dt = self._clock.tick(self._target_fps) / 1000.0
            self._handle_events()
            self._read_keys()

            was_playing = self._game.is_playing
            self._game.apply_intent(self._input.drain(), dt)
            result = self._game.tick(dt)

            if result.delta_score > 0:
                print(f"  +{result.delta_score} (Total: {self._game.score})")
            if was_playing and result.game_over:
                print(f"\nGAME OVER - Score: {self._game.score}")

            self._renderer.render(self._screen, self._game.snapshot)
            pygame.display.flip()

        pygame.quit()
        return self._game.score

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key in (pygame.K_SPACE, pygame.K_RETURN):
                    self._input.request_start()

            elif event.type == pygame.MOUSEMOTION:
                self._input.set_pointer(*event.pos)

            elif event.type == pygame.MOUSEBUTTONDOWN:
                if event.button == 1:
                    self._input.request_start()

    def _read_keys(self) -> None:
        """Held arrows/WASD become the keyboard direction."""
        pressed = pygame.key.get_pressed()
        dx = (pressed[pygame.K_RIGHT] or pressed[pygame.K_d]) - (pressed[pygame.K_LEFT] or pressed[pygame.K_a])
        dy = (pressed[pygame.K_DOWN] or pressed[pygame.K_s]) - (pressed[pygame.K_UP] or pressed[pygame.K_w])
        self._input.set_keys(float(dx), float(dy))


def main():
    parser = argparse.ArgumentParser(description="Play Ice Cream Skate Party interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--width", type=int, default=None, help="Playfield width (default: from config)")
    parser.add_argument("--height", type=int, default=None, help="Playfield height (default: from config)")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")
    parser.add_argument("--classic", action="store_true", help="Play the classic rule set")
    parser.add_argument(
        "--highscore-file",
        type=str,
        default="skate_party_highscore.json",
        help="Where the high score is kept"
    )

    args = parser.parse_args()

    config = load_classic_config() if args.classic else load_config()
    if args.width is not None or args.height is not None:
        config = config.with_playfield(
            args.width if args.width is not None else config.playfield.width,
            args.height if args.height is not None else config.playfield.height
        )

    try:
        player = HumanPlayer(
            config=config,
            seed=args.seed,
            target_fps=args.fps,
            high_score_path=args.highscore_file
        )
        score = player.run()
        print(f"\nFinal Score: {score}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
