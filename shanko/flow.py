"""Async orchestration of AI turns, buy windows and round transitions."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import replace
from typing import Awaitable, Callable

from . import rules, scoring
from .ai.base import DecisionMaker
from .melds import TOTAL_ROUNDS, melded_card_ids
from .rules import IllegalAction
from .scoring import RoundSummary
from .state import DrawSource, GamePhase, GameState, Player

__all__ = [
    "BuyCallback",
    "should_execute_ai_turn",
    "should_process_buy_window",
    "execute_turn",
    "execute_ai_turn",
    "handle_buy_window",
    "initialize_round",
    "advance_to_next_round",
    "handle_round_transition",
    "finalize_game",
    "get_winner",
    "get_final_standings",
    "play_game",
]

logger = logging.getLogger(__name__)

BuyCallback = Callable[[str, str], Awaitable[bool]]

_IDLE_PHASES = frozenset({GamePhase.SETUP, GamePhase.ROUND_END, GamePhase.GAME_END, GamePhase.BUY_WINDOW})
_ROUND_OVER = frozenset({GamePhase.ROUND_END, GamePhase.GAME_END})


def should_execute_ai_turn(state: GameState) -> bool:
    return state.phase not in _IDLE_PHASES and state.current_player.is_ai


def should_process_buy_window(state: GameState) -> bool:
    return state.phase is GamePhase.BUY_WINDOW and state.player_count > 2


def _play_table(state: GameState, decider: DecisionMaker, player_id: str) -> GameState:
    decision = decider.decide_joker_swap(state, player_id)
    if decision.should_swap and decision.swap is not None:
        swap = decision.swap
        state = rules.swap_joker(
            state, player_id, swap.combination_id, swap.joker_card_id, swap.replacement_card_id
        )
    for _ in range(len(state.current_player.hand)):
        extension = decider.decide_extension(state, player_id)
        if extension is None:
            break
        state = rules.extend_sequence(
            state, player_id, extension.combination_id, extension.card_ids, extension.position
        )
    return state


def _play_turn(state: GameState, decider: DecisionMaker, rng: random.Random | None) -> GameState:
    player_id = state.current_player.id
    if state.phase is GamePhase.DRAW:
        if rules.detect_stalemate(state):
            return rules.handle_stalemate(state)
        source = decider.decide_draw(state, player_id)
        state = rules.draw_card(state, source, rng).state

    if state.current_player.has_melded:
        state = _play_table(state, decider, player_id)
    elif state.phase is GamePhase.MELD:
        meld = decider.decide_meld(state, player_id)
        if meld.should_meld:
            used = set(melded_card_ids(meld.combinations))
            leftover = [card for card in state.current_player.hand if card.id not in used]
            if len(leftover) == 1:
                return rules.go_out(state, meld.combinations, leftover[0].id)
            state = rules.meld_combinations(state, meld.combinations)

    card = decider.decide_discard(state, player_id)
    return rules.discard_card(state, card.id)


def _fallback_turn(state: GameState, rng: random.Random | None) -> GameState:
    if state.phase is GamePhase.DRAW:
        if rules.detect_stalemate(state):
            return rules.handle_stalemate(state)
        state = rules.draw_card(state, DrawSource.DRAW, rng).state
    hand = state.current_player.hand
    if state.phase in (GamePhase.MELD, GamePhase.DISCARD) and hand:
        return rules.discard_card(state, hand[0].id)
    return state


async def execute_turn(
    state: GameState,
    decider: DecisionMaker,
    rng: random.Random | None = None,
) -> GameState:
    """Play the current player's whole turn with ``decider`` making the choices."""

    await asyncio.sleep(0)
    return _play_turn(state, decider, rng)


async def execute_ai_turn(
    state: GameState,
    decider: DecisionMaker,
    rng: random.Random | None = None,
) -> GameState:
    """Play an AI turn, falling back to discarding the first card on any failure.

    Raises :class:`~shanko.rules.OutOfTurnError` when the current seat is human.
    """

    player = state.current_player
    if not player.is_ai:
        raise rules.OutOfTurnError(f"player {player.id} is not an AI seat")
    try:
        return await execute_turn(state, decider, rng)
    except Exception:
        logger.exception("AI turn failed for %s; discarding first card instead", player.id)
        return _fallback_turn(state, rng)


async def handle_buy_window(
    state: GameState,
    decider: DecisionMaker,
    on_buy_attempt: BuyCallback | None = None,
    rng: random.Random | None = None,
) -> GameState:
    """Offer the discard to each eligible player in priority order.

    The first player who accepts and is allowed to buy takes it. The window is
    always closed afterwards.
    """

    if not should_process_buy_window(state):
        return state
    card = state.discard_pile[-1] if state.discard_pile else None
    if card is not None:
        for player_id in rules.get_buy_priority(state):
            player = state.get_player(player_id)
            assert player is not None
            if player.is_ai:
                wants = decider.decide_buy(state, player_id, card)
            elif on_buy_attempt is not None:
                wants = await on_buy_attempt(player_id, player.name)
            else:
                wants = False
            if not wants:
                continue
            try:
                state = rules.buy_card(state, player_id, rng).state
            except IllegalAction as exc:
                logger.warning("buy by %s rejected: %s", player_id, exc)
                continue
            logger.debug("player %s bought %s", player_id, card.id)
            break
    return rules.complete_buy_window(state)


def initialize_round(state: GameState, rng: random.Random | None = None) -> GameState:
    return rules.start_round(state, rng)


def advance_to_next_round(state: GameState, rng: random.Random | None = None) -> GameState:
    """Deal the next round; the round number was already advanced when scoring."""

    if state.phase is GamePhase.GAME_END:
        return state
    if state.phase is not GamePhase.ROUND_END:
        raise rules.WrongPhaseError(f"cannot advance round during {state.phase.value}")
    return rules.start_round(state, rng)


def handle_round_transition(state: GameState, rng: random.Random | None = None) -> GameState:
    if state.phase is GamePhase.ROUND_END:
        return advance_to_next_round(state, rng)
    return state


def finalize_game(state: GameState) -> GameState:
    """Declare the lowest cumulative score the winner; first seat breaks ties."""

    if state.round < TOTAL_ROUNDS:
        raise rules.WrongPhaseError(f"game can only be finalized after round {TOTAL_ROUNDS}")
    winner = scoring.determine_winner(state.players)
    return replace(state, winner=winner.id, phase=GamePhase.GAME_END)


def get_winner(state: GameState) -> Player | None:
    if state.winner is None:
        return None
    return state.get_player(state.winner)


def get_final_standings(state: GameState) -> list[Player]:
    return scoring.final_standings(state.players)


def _policy_buyer(policy: DecisionMaker, state: GameState) -> BuyCallback:
    card = state.discard_pile[-1]

    async def ask(player_id: str, player_name: str) -> bool:
        return policy.decide_buy(state, player_id, card)

    return ask


async def play_game(
    state: GameState,
    decider: DecisionMaker,
    human_policy: DecisionMaker,
    on_buy_attempt: BuyCallback | None = None,
    rng: random.Random | None = None,
    max_turns_per_round: int = 500,
    on_round_end: Callable[[RoundSummary], None] | None = None,
) -> GameState:
    """Drive ``state`` from SETUP (or any later phase) to GAME_END.

    AI seats use ``decider``; human seats use ``human_policy``. A round still
    running after ``max_turns_per_round`` turns is closed as a stalemate.
    """

    if max_turns_per_round <= 0:
        raise ValueError("max_turns_per_round must be positive")
    if state.phase is GamePhase.SETUP:
        state = initialize_round(state, rng)

    turns = 0
    while state.phase is not GamePhase.GAME_END:
        previous = state.phase
        if state.phase is GamePhase.ROUND_END:
            state = advance_to_next_round(state, rng)
            turns = 0
            continue
        if state.phase is GamePhase.BUY_WINDOW:
            buyer = on_buy_attempt if on_buy_attempt is not None else _policy_buyer(human_policy, state)
            state = await handle_buy_window(state, decider, buyer, rng)
        elif turns >= max_turns_per_round:
            logger.info("round %d hit the %d turn cap", state.round, max_turns_per_round)
            state = rules.handle_stalemate(state)
        elif state.current_player.is_ai:
            state = await execute_ai_turn(state, decider, rng)
            turns += 1
        else:
            state = await execute_turn(state, human_policy, rng)
            turns += 1

        if on_round_end is not None and state.phase in _ROUND_OVER and previous not in _ROUND_OVER:
            on_round_end(scoring.round_summary(state))
    return state
