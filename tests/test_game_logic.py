import random

import pytest

from snake import (
    DOWN,
    LEFT,
    RIGHT,
    UP,
    GameState,
    create_initial_snake,
    direction_to_text,
    random_food_position,
    request_direction,
    step,
)


def make_state(snake, food=(0, 0), direction=RIGHT, grid_size=20):
    return GameState(
        snake=list(snake),
        food=food,
        direction=direction,
        next_direction=direction,
        grid_size=grid_size,
    )


def test_initial_snake_is_centred_and_faces_right():
    assert create_initial_snake(20) == [(10, 10), (9, 10), (8, 10)]


def test_initial_snake_rejects_grid_too_small():
    with pytest.raises(ValueError):
        create_initial_snake(2)


def test_initial_state():
    state = GameState.initial(20, random.Random(1))
    assert state.snake == [(10, 10), (9, 10), (8, 10)]
    assert state.direction == RIGHT
    assert state.next_direction == RIGHT
    assert state.score == 0
    assert not state.game_over
    assert state.food not in state.snake


def test_tick_moves_snake_one_cell():
    state = make_state([(10, 10), (9, 10), (8, 10)])
    assert step(state) == "moved"
    assert state.snake == [(11, 10), (10, 10), (9, 10)]
    assert not state.game_over


def test_wall_collision_ends_game_without_moving():
    state = make_state([(19, 10), (18, 10), (17, 10)])
    assert step(state) == "wall"
    assert state.game_over
    assert state.game_over_reason == "wall"
    assert state.snake == [(19, 10), (18, 10), (17, 10)]


@pytest.mark.parametrize(
    "snake, direction",
    [
        ([(0, 5), (1, 5), (2, 5)], LEFT),
        ([(5, 0), (5, 1), (5, 2)], UP),
        ([(5, 19), (5, 18), (5, 17)], DOWN),
    ],
)
def test_every_wall_ends_game(snake, direction):
    state = make_state(snake, direction=direction)
    assert step(state) == "wall"
    assert state.snake == snake


def test_moving_into_current_tail_is_a_collision():
    # Head at (5, 5) heading left; the tail sits right below it.
    state = make_state([(5, 5), (6, 5), (6, 6), (5, 6)], direction=LEFT)
    assert request_direction(state, DOWN)
    assert step(state) == "self"
    assert state.game_over
    assert state.game_over_reason == "self"
    assert state.snake == [(5, 5), (6, 5), (6, 6), (5, 6)]


def test_eating_food_grows_snake_and_scores():
    state = make_state([(10, 10), (9, 10), (8, 10)], food=(11, 10))
    assert step(state, random.Random(7)) == "ate"
    assert state.snake == [(11, 10), (10, 10), (9, 10), (8, 10)]
    assert state.score == 1
    assert state.food is not None
    assert state.food not in state.snake


def test_game_over_tick_is_a_noop():
    state = make_state([(19, 10), (18, 10), (17, 10)], food=(3, 3))
    step(state)
    snapshot = (list(state.snake), state.food, state.score)
    for _ in range(5):
        assert step(state) == "idle"
    assert (state.snake, state.food, state.score) == snapshot


def test_reversal_is_rejected():
    state = make_state([(10, 10), (9, 10), (8, 10)])
    assert not request_direction(state, LEFT)
    assert state.next_direction == RIGHT


def test_reversal_is_checked_against_current_direction():
    state = make_state([(10, 10), (9, 10), (8, 10)])
    assert request_direction(state, UP)
    # DOWN reverses the pending turn, not the current heading.
    assert request_direction(state, DOWN)
    assert state.next_direction == DOWN
    step(state)
    assert state.direction == DOWN
    assert state.head == (10, 11)


def test_unknown_direction_is_ignored():
    state = make_state([(10, 10), (9, 10), (8, 10)])
    assert not request_direction(state, None)
    assert state.next_direction == RIGHT


def test_food_never_lands_on_snake():
    snake = [(x, y) for y in range(5) for x in range(5)][:-1]
    for seed in range(50):
        food = random_food_position(snake, 5, random.Random(seed))
        assert food == (4, 4)


def test_food_on_full_board_is_none():
    snake = [(0, 0), (1, 0), (1, 1), (0, 1)]
    assert random_food_position(snake, 2, random.Random(0)) is None


def test_filling_the_board_ends_the_game():
    state = make_state([(0, 0), (1, 0), (1, 1)], food=(0, 1), direction=DOWN, grid_size=2)
    assert step(state) == "ate"
    assert state.score == 1
    assert state.food is None
    assert state.game_over
    assert state.game_over_reason == "full"


@pytest.mark.parametrize("seed", range(10))
def test_random_play_keeps_invariants(seed):
    rng = random.Random(seed)
    state = GameState.initial(20, rng)
    for _ in range(500):
        if state.game_over:
            break
        request_direction(state, rng.choice([UP, DOWN, LEFT, RIGHT]))
        before_len, before_score = len(state.snake), state.score
        outcome = step(state, rng)
        if outcome == "ate":
            assert len(state.snake) == before_len + 1
            assert state.score == before_score + 1
        else:
            assert len(state.snake) == before_len
            assert state.score == before_score
        assert state.food not in state.snake
        assert len(set(state.snake)) == len(state.snake)


def test_direction_to_text():
    assert direction_to_text(UP) == "up"
    assert direction_to_text(None) == "none"
    assert direction_to_text((2, 2)) == "unknown"
