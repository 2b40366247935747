import argparse
import logging
import os
import random
import sys
from dataclasses import dataclass

import pygame

log = logging.getLogger("snake")

# Board configuration
GRID_SIZE = 20
CELL_SIZE = 20
START_LENGTH = 3
TICK_MS = 300
CONTROLS_HEIGHT = 130
MIN_GRID_SIZE = 14
MAX_GRID_SIZE = 40
TITLE = "Snake"

# Colors (R, G, B)
BG_COLOR = (61, 167, 159)
GRID_LINE = (77, 182, 175)
FOOD_COLOR = (249, 118, 118)
HEAD_COLOR = (205, 207, 222)
BODY_COLOR = (253, 255, 253)
OVERLAY_COLOR = (61, 167, 159, 178)
PANEL_COLOR = (38, 112, 106)
BUTTON_COLOR = (77, 182, 175)
WHITE = (255, 255, 255)

UP = (0, -1)
DOWN = (0, 1)
LEFT = (-1, 0)
RIGHT = (1, 0)

KEY_TO_DIRECTION = {
    pygame.K_UP: UP,
    pygame.K_DOWN: DOWN,
    pygame.K_LEFT: LEFT,
    pygame.K_RIGHT: RIGHT,
}
RESTART_KEYS = (pygame.K_RETURN, pygame.K_KP_ENTER)

RESTART_BUTTON = "restart"
BUTTON_TO_DIRECTION = {
    "up": UP,
    "down": DOWN,
    "left": LEFT,
    "right": RIGHT,
}
BUTTON_LABELS = {
    "up": "^",
    "down": "v",
    "left": "<",
    "right": ">",
    RESTART_BUTTON: "Restart",
}

TICK_EVENT = pygame.USEREVENT + 1


def create_initial_snake(grid_size=GRID_SIZE, length=START_LENGTH):
    """Create a horizontal snake centred on the board, head facing right."""
    center = grid_size // 2
    if length < 1 or length > center + 1:
        raise ValueError(
            f"a snake of length {length} does not fit a {grid_size}x{grid_size} grid"
        )
    return [(center - i, center) for i in range(length)]


def direction_to_text(direction):
    """Convert a direction vector into a compact label for logs."""
    mapping = {
        None: "none",
        UP: "up",
        DOWN: "down",
        LEFT: "left",
        RIGHT: "right",
    }
    return mapping.get(direction, "unknown")


def is_opposite(a, b):
    return a[0] == -b[0] and a[1] == -b[1]


def random_food_position(snake, grid_size=GRID_SIZE, rng=random):
    """Return a random grid position that is not occupied by the snake.

    Returns None when the snake covers every cell of the board.
    """
    if len(set(snake)) >= grid_size * grid_size:
        return None
    while True:
        pos = (rng.randrange(grid_size), rng.randrange(grid_size))
        if pos not in snake:
            return pos


@dataclass
class GameState:
    """Everything one round of Snake needs; mutated only by step() and reset."""

    snake: list
    food: tuple = None
    direction: tuple = RIGHT
    next_direction: tuple = RIGHT
    score: int = 0
    game_over: bool = False
    game_over_reason: str = "none"
    grid_size: int = GRID_SIZE

    @classmethod
    def initial(cls, grid_size=GRID_SIZE, rng=random):
        snake = create_initial_snake(grid_size)
        food = random_food_position(snake, grid_size, rng)
        return cls(snake=snake, food=food, grid_size=grid_size)

    @property
    def head(self):
        return self.snake[0]

    def in_bounds(self, cell):
        x, y = cell
        return 0 <= x < self.grid_size and 0 <= y < self.grid_size


def request_direction(state, direction):
    """Buffer a turn for the next tick; reversals of the current heading are dropped."""
    if direction is None:
        return False
    if is_opposite(direction, state.direction):
        return False
    state.next_direction = direction
    return True


def step(state, rng=random):
    """Advance the game by one tick and return what happened.

    Outcomes are "idle" (the game is already over), "wall", "self", "ate"
    and "moved".
    """
    if state.game_over:
        return "idle"

    if state.next_direction != state.direction:
        log.debug(
            "turning %s -> %s",
            direction_to_text(state.direction),
            direction_to_text(state.next_direction),
        )
    state.direction = state.next_direction

    head_x, head_y = state.head
    dx, dy = state.direction
    new_head = (head_x + dx, head_y + dy)

    if not state.in_bounds(new_head):
        state.game_over = True
        state.game_over_reason = "wall"
        return "wall"

    # The tail still counts here even though it would move away this tick.
    if new_head in state.snake:
        state.game_over = True
        state.game_over_reason = "self"
        return "self"

    state.snake.insert(0, new_head)

    if new_head == state.food:
        state.score += 1
        state.food = random_food_position(state.snake, state.grid_size, rng)
        if state.food is None:
            state.game_over = True
            state.game_over_reason = "full"
        return "ate"

    state.snake.pop()
    return "moved"


class TickTimer:
    """Repeating pygame timer posting one event per tick; at most one is ever live."""

    def __init__(self, interval_ms=TICK_MS, event_type=TICK_EVENT):
        self.interval_ms = interval_ms
        self.event_type = event_type
        self.active = False

    def start(self):
        self.stop()
        pygame.time.set_timer(self.event_type, self.interval_ms)
        self.active = True

    def stop(self):
        if not self.active:
            return
        pygame.time.set_timer(self.event_type, 0)
        self.active = False


def get_ui_font(size):
    """Load a preferred UI font, then fall back safely to pygame default."""
    preferred = ["Arial", "Helvetica", "DejaVu Sans"]
    for name in preferred:
        path = pygame.font.match_font(name)
        if path:
            return pygame.font.Font(path, size)
    return pygame.font.Font(None, size)


def load_fonts():
    return {
        "title": get_ui_font(32),
        "hint": get_ui_font(18),
        "hud": get_ui_font(20),
        "button": get_ui_font(16),
    }


def layout_buttons(board_size):
    """Place the d-pad and restart button in the strip below the board."""
    pad_x = board_size - 100
    top = board_size + 8
    # Restart sits left of the d-pad with an 8px gap.
    restart_width = min(120, pad_x - 44 - 8 - 16)
    return {
        "up": pygame.Rect(pad_x, top, 40, 34),
        "left": pygame.Rect(pad_x - 44, top + 38, 40, 34),
        "right": pygame.Rect(pad_x + 44, top + 38, 40, 34),
        "down": pygame.Rect(pad_x, top + 76, 40, 34),
        RESTART_BUTTON: pygame.Rect(16, top + 44, restart_width, 40),
    }


def grid_rect(grid_pos, padding=0):
    """Return a pixel rectangle for a grid position."""
    x, y = grid_pos
    return pygame.Rect(
        x * CELL_SIZE + padding,
        y * CELL_SIZE + padding,
        CELL_SIZE - padding * 2,
        CELL_SIZE - padding * 2,
    )


def draw_background(surface, grid_size):
    """Fill the board and draw grid lines on every cell boundary."""
    board_size = grid_size * CELL_SIZE
    board = pygame.Rect(0, 0, board_size, board_size)
    surface.fill((0, 0, 0), board)
    surface.fill(BG_COLOR, board)

    for i in range(grid_size + 1):
        pos = i * CELL_SIZE
        pygame.draw.line(surface, GRID_LINE, (pos, 0), (pos, board_size), 1)
        pygame.draw.line(surface, GRID_LINE, (0, pos), (board_size, pos), 1)


def draw_cell(surface, grid_pos, color):
    pygame.draw.rect(surface, color, grid_rect(grid_pos, padding=1))


def draw_snake(surface, snake):
    for i, segment in enumerate(snake):
        draw_cell(surface, segment, HEAD_COLOR if i == 0 else BODY_COLOR)


def draw_game_over_overlay(surface, grid_size, fonts):
    """Dim the board and print the title with a restart hint."""
    board_size = grid_size * CELL_SIZE
    panel = pygame.Surface((board_size, board_size), pygame.SRCALPHA)
    panel.fill(OVERLAY_COLOR)
    surface.blit(panel, (0, 0))

    center = board_size // 2
    title = fonts["title"].render("GAME OVER", True, WHITE)
    hint = fonts["hint"].render("Press Enter to restart", True, WHITE)
    surface.blit(title, title.get_rect(center=(center, center - 10)))
    surface.blit(hint, hint.get_rect(center=(center, center + 25)))


def draw_board(surface, state, fonts):
    """Redraw the whole board from the current state."""
    draw_background(surface, state.grid_size)
    if state.food is not None:
        draw_cell(surface, state.food, FOOD_COLOR)
    draw_snake(surface, state.snake)
    if state.game_over:
        draw_game_over_overlay(surface, state.grid_size, fonts)


def draw_controls(surface, board_size, fonts, score_text, buttons, restart_visible):
    """Draw the score label and the on-screen buttons under the board."""
    strip = pygame.Rect(0, board_size, surface.get_width(), surface.get_height() - board_size)
    surface.fill(PANEL_COLOR, strip)

    label = fonts["hud"].render(f"Score: {score_text}", True, WHITE)
    surface.blit(label, (16, board_size + 12))

    for name, rect in buttons.items():
        if name == RESTART_BUTTON and not restart_visible:
            continue
        pygame.draw.rect(surface, BUTTON_COLOR, rect, border_radius=6)
        text = fonts["button"].render(BUTTON_LABELS[name], True, WHITE)
        surface.blit(text, text.get_rect(center=rect.center))


class SnakeGame:
    """Owns the game state, the tick timer and the drawing surface."""

    def __init__(self, surface, grid_size=GRID_SIZE, tick_ms=TICK_MS, rng=None, timer=None):
        self.surface = surface
        self.grid_size = grid_size
        self.board_size = grid_size * CELL_SIZE
        self.rng = rng if rng is not None else random.Random()
        self.timer = timer if timer is not None else TickTimer(tick_ms)
        self.buttons = layout_buttons(self.board_size)
        self.fonts = load_fonts()
        self.state = None
        self.score_text = ""
        self.restart_visible = False
        self.running = False
        self.reset()

    def reset(self):
        self.state = GameState.initial(self.grid_size, self.rng)
        self.restart_visible = False
        self.update_score()

    def update_score(self):
        self.score_text = str(self.state.score)
        if pygame.display.get_init() and pygame.display.get_surface() is not None:
            pygame.display.set_caption(f"{TITLE} - Score: {self.score_text}")

    def start(self):
        log.info("starting %dx%d game, tick %d ms", self.grid_size, self.grid_size, self.timer.interval_ms)
        self.render()
        self.timer.start()

    def restart(self):
        """Start a fresh round; only honoured once the current one is over."""
        if not self.state.game_over:
            return False
        log.info("restarting after %s, score %d", self.state.game_over_reason, self.state.score)
        self.reset()
        self.render()
        self.timer.start()
        return True

    def end_game(self):
        self.restart_visible = True
        log.info("game over (%s), score %d", self.state.game_over_reason, self.state.score)

    def tick(self):
        previous_score = self.state.score
        outcome = step(self.state, self.rng)
        if outcome == "idle":
            return outcome

        if self.state.score != previous_score:
            self.update_score()
        if self.state.game_over:
            self.end_game()
        self.render()
        return outcome

    def render(self):
        draw_board(self.surface, self.state, self.fonts)
        draw_controls(
            self.surface,
            self.board_size,
            self.fonts,
            self.score_text,
            self.buttons,
            self.restart_visible,
        )
        if pygame.display.get_init() and pygame.display.get_surface() is self.surface:
            pygame.display.flip()

    def handle_key(self, key):
        if key in RESTART_KEYS:
            self.restart()
            return
        request_direction(self.state, KEY_TO_DIRECTION.get(key))

    def press_button(self, name):
        if name == RESTART_BUTTON:
            self.restart()
        elif name in BUTTON_TO_DIRECTION:
            request_direction(self.state, BUTTON_TO_DIRECTION[name])

    def button_at(self, pos):
        for name, rect in self.buttons.items():
            if name == RESTART_BUTTON and not self.restart_visible:
                continue
            if rect.collidepoint(pos):
                return name
        return None

    def handle_click(self, pos):
        name = self.button_at(pos)
        if name is not None:
            self.press_button(name)

    def handle_event(self, event):
        if event.type == pygame.QUIT:
            self.running = False
        elif event.type == self.timer.event_type:
            self.tick()
        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self.running = False
            else:
                self.handle_key(event.key)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            # Taps already arrive as FINGERDOWN.
            if getattr(event, "touch", False):
                return
            self.handle_click(event.pos)
        elif event.type == pygame.FINGERDOWN:
            # Touch coordinates arrive normalised to 0..1.
            width, height = self.surface.get_size()
            self.handle_click((int(event.x * width), int(event.y * height)))

    def run(self):
        clock = pygame.time.Clock()
        self.running = True
        self.start()
        while self.running:
            for event in pygame.event.get():
                self.handle_event(event)
            clock.tick(60)
        self.timer.stop()


def grid_size_arg(value):
    size = int(value)
    if not MIN_GRID_SIZE <= size <= MAX_GRID_SIZE:
        raise argparse.ArgumentTypeError(
            f"grid size must be between {MIN_GRID_SIZE} and {MAX_GRID_SIZE}"
        )
    return size


def positive_int(value):
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Play Snake on a square grid.")
    parser.add_argument("--tick-ms", type=positive_int, default=TICK_MS, help="milliseconds per move")
    parser.add_argument("--grid-size", type=grid_size_arg, default=GRID_SIZE, help="cells per side")
    parser.add_argument("--seed", type=int, default=None, help="seed for food placement")
    parser.add_argument("--headless", action="store_true", help="use SDL dummy drivers")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging verbosity",
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.headless:
        os.environ["SDL_VIDEODRIVER"] = "dummy"
        os.environ["SDL_AUDIODRIVER"] = "dummy"

    pygame.init()
    pygame.display.set_caption(TITLE)
    board_size = args.grid_size * CELL_SIZE
    screen = pygame.display.set_mode((board_size, board_size + CONTROLS_HEIGHT))

    game = SnakeGame(screen, grid_size=args.grid_size, tick_ms=args.tick_ms, rng=random.Random(args.seed))
    try:
        game.run()
    finally:
        pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
