from typing import Optional, Tuple

import numpy as np

from snek_game import DOWN, LEFT, RIGHT, Phase, Snapshot

BG_COLOR = (14, 20, 24)
GRID_COLOR = (22, 32, 38)
SNAKE_COLOR = (78, 211, 134)
HEAD_COLOR = (255, 138, 0)
EYE_COLOR = (15, 18, 34)
FOOD_COLOR = (245, 158, 11)
TEXT_COLOR = (230, 234, 238)


def _fill(img: np.ndarray, cell: int, pos, color, pad: int = 0) -> None:
    x, y = pos
    img[y * cell + pad : (y + 1) * cell - pad, x * cell + pad : (x + 1) * cell - pad] = color


def _eyes(direction, cell: int):
    """Top-left pixel offsets of both eyes inside the head cell."""
    edge = max(1, cell // 5)
    far = cell - edge - max(1, cell // 8)
    if direction == RIGHT:
        return (far, edge), (far, far)
    if direction == LEFT:
        return (edge, edge), (edge, far)
    if direction == DOWN:
        return (edge, far), (far, far)
    return (edge, edge), (far, edge)


def render_frame(snapshot: Snapshot, cell: int = 16) -> np.ndarray:
    size = snapshot.grid_size
    img = np.zeros((size * cell, size * cell, 3), dtype=np.uint8)
    img[:] = BG_COLOR

    if cell >= 4:
        img[::cell, :] = GRID_COLOR
        img[:, ::cell] = GRID_COLOR

    pad = max(1, cell // 8) if cell >= 4 else 0
    _fill(img, cell, snapshot.food, FOOD_COLOR, pad)

    for pos in snapshot.snake[:-1]:
        _fill(img, cell, pos, SNAKE_COLOR, pad)

    hx, hy = snapshot.head
    _fill(img, cell, snapshot.head, HEAD_COLOR, pad)

    eye = max(1, cell // 8)
    for ex, ey in _eyes(snapshot.direction, cell):
        x0, y0 = hx * cell + ex, hy * cell + ey
        img[y0 : y0 + eye, x0 : x0 + eye] = EYE_COLOR

    return img


def phase_caption(snapshot: Snapshot) -> Optional[Tuple[str, str]]:
    if snapshot.phase is Phase.READY:
        return "Ready", "Press SPACE or click to start"
    if snapshot.phase is Phase.PAUSED:
        return "Paused", "Press SPACE to continue"
    if snapshot.phase is Phase.OVER:
        return "Game Over", f"Score {snapshot.score} - Best {snapshot.high_score} - Press R to restart"
    return None
