import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Dict, List

import imageio
import numpy as np
import pygame

from snek_game import Phase, SnekConfig, SnekGame
from snek_input import key_identifier, route_key, route_touch
from snek_records import Records
from snek_render import BG_COLOR, GRID_COLOR, TEXT_COLOR, phase_caption, render_frame

SPEED_MIN = 1
SPEED_MAX = 30

PANEL_W = 240
PAD_SIZE = 44
PAD_COLOR = (40, 52, 60)
DIM_COLOR = (150, 160, 168)

logger = logging.getLogger("snek_play")


def clamp_speed(value: float) -> float:
    return max(SPEED_MIN, min(SPEED_MAX, value))


def default_save_dir() -> Path:
    return Path.home() / ".snek"


def pad_rects(board_px: int) -> Dict[str, pygame.Rect]:
    cx = board_px + PANEL_W // 2
    bottom = board_px - 16
    gap = 4
    rects = {
        "up": pygame.Rect(0, 0, PAD_SIZE, PAD_SIZE),
        "left": pygame.Rect(0, 0, PAD_SIZE, PAD_SIZE),
        "down": pygame.Rect(0, 0, PAD_SIZE, PAD_SIZE),
        "right": pygame.Rect(0, 0, PAD_SIZE, PAD_SIZE),
    }
    rects["down"].midbottom = (cx, bottom)
    rects["up"].midbottom = (cx, rects["down"].top - gap)
    rects["left"].midright = (rects["down"].left - gap, rects["down"].top - gap // 2)
    rects["right"].midleft = (rects["down"].right + gap, rects["down"].top - gap // 2)
    return rects


def pad_at(rects: Dict[str, pygame.Rect], pos) -> str:
    for name, rect in rects.items():
        if rect.collidepoint(pos):
            return name
    return ""


def draw_board(screen, game: SnekGame, cell: int, fonts) -> np.ndarray:
    snapshot = game.snapshot()
    frame = render_frame(snapshot, cell)
    surf = pygame.surfarray.make_surface(np.transpose(frame, (1, 0, 2)))
    screen.blit(surf, (0, 0))

    caption = phase_caption(snapshot)
    if caption is not None:
        board_px = snapshot.grid_size * cell
        shade = pygame.Surface((board_px, board_px), pygame.SRCALPHA)
        shade.fill((0, 0, 0, 140))
        screen.blit(shade, (0, 0))
        title = fonts["big"].render(caption[0], True, TEXT_COLOR)
        sub = fonts["small"].render(caption[1], True, DIM_COLOR)
        screen.blit(title, title.get_rect(center=(board_px // 2, board_px // 2 - 16)))
        screen.blit(sub, sub.get_rect(center=(board_px // 2, board_px // 2 + 18)))
    return frame


def draw_panel(screen, game: SnekGame, records: List, board_px: int, pads, fonts):
    panel = pygame.Rect(board_px, 0, PANEL_W, board_px)
    pygame.draw.rect(screen, BG_COLOR, panel)
    pygame.draw.line(screen, GRID_COLOR, (board_px, 0), (board_px, board_px), 2)

    lines = [
        f"Score: {game.score}",
        f"Best: {game.high_score}",
        f"Length: {game.length}",
        f"Speed: {game.speed:g} cells/s",
        "",
        "Top records",
    ]
    y = 12
    for text in lines:
        if text:
            screen.blit(fonts["small"].render(text, True, TEXT_COLOR), (board_px + 12, y))
        y += 22

    if not records:
        screen.blit(fonts["small"].render("no records yet", True, DIM_COLOR), (board_px + 12, y))
    for i, record in enumerate(records):
        stamp = time.strftime("%m-%d %H:%M", time.localtime(record.time))
        text = f"{i + 1:2d}. {record.score:5d}  {stamp}"
        screen.blit(fonts["small"].render(text, True, DIM_COLOR), (board_px + 12, y))
        y += 20

    for name, rect in pads.items():
        pygame.draw.rect(screen, PAD_COLOR, rect, border_radius=8)
        label = fonts["small"].render(name[0].upper(), True, TEXT_COLOR)
        screen.blit(label, label.get_rect(center=rect.center))


def main():
    parser = argparse.ArgumentParser(description="Play Snek.")
    parser.add_argument("--speed", type=float, default=8.0, help="cells per second")
    parser.add_argument("--fps", type=int, default=60)
    parser.add_argument("--cell", type=int, default=24)
    parser.add_argument("--save-dir", type=str, default=str(default_save_dir()))
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--record", type=str, default="", help="write the session to this GIF")
    parser.add_argument("--log-level", type=str, default="INFO")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    records_store = Records.at(args.save_dir)
    config = SnekConfig(initial_speed=clamp_speed(args.speed))
    game = SnekGame(config, records=records_store, seed=args.seed)
    records = records_store.load()
    logger.info("records stored in %s", args.save_dir)

    pygame.init()
    pygame.display.set_caption("Snek")
    board_px = config.grid_size * args.cell
    screen = pygame.display.set_mode((board_px + PANEL_W, board_px))
    clock = pygame.time.Clock()
    fonts = {
        "small": pygame.font.SysFont("Consolas", 16),
        "big": pygame.font.SysFont("Consolas", 30),
    }
    pads = pad_rects(board_px)

    frames = []
    games_played = 0
    last_phase = game.phase
    running = True
    while running:
        dt = clock.tick(args.fps)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_ESCAPE, pygame.K_q):
                    running = False
                elif event.key in (pygame.K_EQUALS, pygame.K_PLUS, pygame.K_KP_PLUS):
                    game.set_speed(clamp_speed(game.speed + 1))
                elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
                    game.set_speed(clamp_speed(game.speed - 1))
                else:
                    route_key(game, key_identifier(event))
            elif event.type in (pygame.MOUSEBUTTONDOWN, pygame.FINGERDOWN):
                if event.type == pygame.FINGERDOWN:
                    pos = (int(event.x * screen.get_width()), int(event.y * screen.get_height()))
                else:
                    pos = event.pos
                pad = pad_at(pads, pos)
                if pad:
                    route_touch(game, pad)
                elif pos[0] < board_px and game.phase is not Phase.RUNNING:
                    game.start()

        steps = game.advance(dt)

        if game.phase is Phase.OVER and last_phase is not Phase.OVER:
            games_played += 1
            records = records_store.load()
        last_phase = game.phase

        screen.fill(BG_COLOR)
        frame = draw_board(screen, game, args.cell, fonts)
        draw_panel(screen, game, records, board_px, pads, fonts)
        pygame.display.flip()

        if args.record and (steps or not frames):
            frames.append(frame)

    pygame.quit()

    if args.record and frames:
        out = Path(args.record)
        out.parent.mkdir(parents=True, exist_ok=True)
        imageio.mimsave(out, frames, fps=max(1, int(game.speed)))
        print(f"Saved {len(frames)} frames to {out}")

    print(f"Games: {games_played} | Best: {game.high_score}")


if __name__ == "__main__":
    sys.exit(main())
