from typing import Dict, Optional

import pygame

from snek_game import DOWN, LEFT, RIGHT, UP, Direction, Phase, SnekGame


KEY_DIRECTIONS: Dict[str, Direction] = {
    "up": UP,
    "down": DOWN,
    "left": LEFT,
    "right": RIGHT,
    "w": UP,
    "s": DOWN,
    "a": LEFT,
    "d": RIGHT,
    "W": UP,
    "S": DOWN,
    "A": LEFT,
    "D": RIGHT,
}

TOUCH_DIRECTIONS: Dict[str, Direction] = {
    "up": UP,
    "down": DOWN,
    "left": LEFT,
    "right": RIGHT,
}

KEY_ACTIONS: Dict[str, str] = {
    "space": "toggle",
    " ": "toggle",
    "r": "restart",
    "R": "restart",
    "return": "start",
    "enter": "start",
    "\r": "start",
}


def key_identifier(event) -> Optional[str]:
    if event.type != pygame.KEYDOWN:
        return None
    # Letters keep their case so W and w both resolve.
    text = getattr(event, "unicode", "")
    if text and text.isprintable() and not text.isspace():
        return text
    return pygame.key.name(event.key)


def route_key(game: SnekGame, key: Optional[str]) -> bool:
    if key is None:
        return False
    direction = KEY_DIRECTIONS.get(key)
    if direction is not None:
        game.set_direction(direction)
        return True
    action = KEY_ACTIONS.get(key)
    if action is None:
        return False
    getattr(game, action)()
    return True


def route_touch(game: SnekGame, pad: str) -> bool:
    direction = TOUCH_DIRECTIONS.get(pad)
    if direction is None:
        return False
    game.set_direction(direction)
    if game.phase is not Phase.RUNNING:
        game.start()
    return True
