"""Turn and round state machine for Shanko.

Every operation takes a :class:`~shanko.state.GameState` and returns a new
one; nothing is mutated in place.
"""

from __future__ import annotations

import logging
import random
import uuid
from collections import Counter
from dataclasses import dataclass, replace
from typing import Final, Sequence

from . import deck, scoring, validation
from .cards import Card
from .melds import TOTAL_ROUNDS, Combination, CombinationType, SequenceEnd, melded_card_ids, objective_for
from .state import DEFAULT_CONFIG, DrawSource, GamePhase, GameState, Player, PlayerType, ShankoConfig

__all__ = [
    "IllegalAction",
    "WrongPhaseError",
    "OutOfTurnError",
    "PlayerNotFoundError",
    "CardNotFoundError",
    "EmptyPileError",
    "AlreadyMeldedError",
    "NotMeldedError",
    "InvalidMeldError",
    "BuyingDisabledError",
    "BuyNotAllowedError",
    "NoBuysRemainingError",
    "CombinationNotFoundError",
    "InvalidSwapError",
    "InvalidExtensionError",
    "DrawResult",
    "BuyResult",
    "initialize_game",
    "start_round",
    "draw_card",
    "discard_card",
    "reshuffle_discard_pile",
    "meld_combinations",
    "go_out",
    "buy_card",
    "can_player_buy",
    "get_buy_priority",
    "advance_turn",
    "complete_buy_window",
    "find_combination",
    "swap_joker",
    "extend_sequence",
    "end_round",
    "detect_stalemate",
    "handle_stalemate",
    "validate_player_action",
    "hand_over_to_ai",
]

logger = logging.getLogger(__name__)

BUY_ACTION: Final[str] = "buy"
IN_ROUND_PHASES: Final[frozenset[GamePhase]] = frozenset(
    {GamePhase.DRAW, GamePhase.MELD, GamePhase.DISCARD, GamePhase.BUY_WINDOW}
)
_PLAY_PHASES: Final[frozenset[GamePhase]] = frozenset({GamePhase.MELD, GamePhase.DISCARD})


class IllegalAction(RuntimeError):
    """Raised when an action breaks a game rule in the current state."""


class WrongPhaseError(IllegalAction):
    """Raised when an action is attempted outside the phase that allows it."""


class OutOfTurnError(IllegalAction):
    """Raised when a player acts while it is someone else's turn."""


class PlayerNotFoundError(IllegalAction):
    """Raised when a player id is not seated at the table."""


class CardNotFoundError(IllegalAction):
    """Raised when a card is not where the action expects it."""


class EmptyPileError(IllegalAction):
    """Raised when a pile has no card left to give."""


class AlreadyMeldedError(IllegalAction):
    """Raised when a player who has melded tries a pre-meld action."""


class NotMeldedError(IllegalAction):
    """Raised when a post-meld action is tried before melding."""


class InvalidMeldError(IllegalAction):
    """Raised when melded combinations are invalid or miss the objective."""


class BuyingDisabledError(IllegalAction):
    """Raised for any buy attempt in a two-player game."""


class BuyNotAllowedError(IllegalAction):
    """Raised when a player may not buy the current discard."""


class NoBuysRemainingError(BuyNotAllowedError):
    """Raised when a player has spent every buy for the round."""


class CombinationNotFoundError(IllegalAction):
    """Raised when no melded combination carries the requested id."""


class InvalidSwapError(IllegalAction):
    """Raised when a Joker swap would break the rules."""


class InvalidExtensionError(IllegalAction):
    """Raised when cards cannot extend the requested sequence."""


@dataclass(frozen=True, slots=True)
class DrawResult:
    """Outcome of a draw: the new state and the card that was drawn."""

    state: GameState
    drawn_card: Card


@dataclass(frozen=True, slots=True)
class BuyResult:
    """Outcome of a buy: the bought discard plus the face-down bonus card."""

    state: GameState
    bought_card: Card
    extra_card: Card


def _require_phase(state: GameState, *phases: GamePhase, action: str) -> None:
    if state.phase not in phases:
        allowed = " or ".join(phase.value for phase in phases)
        raise WrongPhaseError(f"cannot {action} during {state.phase.value}; requires {allowed}")


def _require_player(state: GameState, player_id: str) -> int:
    index = state.player_index(player_id)
    if index is None:
        raise PlayerNotFoundError(f"player {player_id!r} not found")
    return index


def initialize_game(
    player_count: int,
    human_players: int = 1,
    *,
    config: ShankoConfig = DEFAULT_CONFIG,
    names: Sequence[str] | None = None,
) -> GameState:
    """Return a fresh game in SETUP with ``player_count`` seats.

    The first ``human_players`` seats are human, the rest are AI.
    """

    deck.validate_player_count(player_count)
    if not 0 <= human_players <= player_count:
        raise ValueError(f"human player count must be between 0 and {player_count}, got {human_players}")
    if names is not None and len(names) != player_count:
        raise ValueError("names must provide exactly one entry per player")

    players = []
    for idx in range(player_count):
        is_human = idx < human_players
        if names is not None:
            name = names[idx]
        elif is_human:
            name = f"Player {idx + 1}"
        else:
            name = f"AI {idx + 1 - human_players}"
        players.append(
            Player(
                id=f"p{idx + 1}",
                name=name,
                type=PlayerType.HUMAN if is_human else PlayerType.AI,
                buys_remaining=config.buys_per_round,
            )
        )

    return GameState(
        game_id=uuid.uuid4().hex,
        players=tuple(players),
        round=1,
        round_objective=objective_for(1),
        phase=GamePhase.SETUP,
        config=config,
    )


def start_round(state: GameState, rng: random.Random | None = None) -> GameState:
    """Shuffle fresh decks, deal every hand and open the round on DRAW."""

    _require_phase(state, GamePhase.SETUP, GamePhase.ROUND_END, action="start a round")
    cards = deck.create_decks(state.player_count, rng)
    hand_size = state.config.hand_size
    dealt = state.player_count * hand_size
    if dealt + 1 > len(cards):
        raise ValueError("insufficient cards in deck for requested hand size")

    players = tuple(
        replace(
            player,
            hand=cards[idx * hand_size : (idx + 1) * hand_size],
            melded_combinations=(),
            has_melded=False,
            buys_remaining=state.config.buys_per_round,
        )
        for idx, player in enumerate(state.players)
    )
    remaining = cards[dealt:]

    if state.round == 1:
        starting_index = 0
    else:
        starting_index = (state.starting_player_index + 1) % state.player_count

    logger.info("round %d starting with player %s", state.round, players[starting_index].id)
    return replace(
        state,
        players=players,
        draw_pile=remaining[1:],
        discard_pile=remaining[:1],
        starting_player_index=starting_index,
        current_player_index=starting_index,
        round_objective=objective_for(state.round),
        phase=GamePhase.DRAW,
        winner=None,
        last_round_winner=None,
    )


def reshuffle_discard_pile(state: GameState, rng: random.Random | None = None) -> GameState:
    """Turn all but the top discard into a fresh draw pile.

    With one card or fewer in the discard pile there is nothing to reshuffle
    and ``state`` is returned unchanged.
    """

    if len(state.discard_pile) <= 1:
        return state
    top_card = state.discard_pile[-1]
    pool = deck.shuffle(state.discard_pile[:-1], rng)
    logger.debug("reshuffling %d discards into the draw pile", len(pool))
    return replace(state, draw_pile=state.draw_pile + tuple(pool), discard_pile=(top_card,))


def draw_card(state: GameState, source: DrawSource | str, rng: random.Random | None = None) -> DrawResult:
    """Draw for the current player from ``source`` and move to MELD."""

    _require_phase(state, GamePhase.DRAW, action="draw")
    source = DrawSource(source)

    if source is DrawSource.DRAW:
        if not state.draw_pile:
            state = reshuffle_discard_pile(state, rng)
        if not state.draw_pile:
            raise EmptyPileError("no cards available to draw")
        drawn = state.draw_pile[0]
        state = replace(state, draw_pile=state.draw_pile[1:])
    else:
        if not state.discard_pile:
            raise EmptyPileError("discard pile is empty")
        drawn = state.discard_pile[-1]
        state = replace(state, discard_pile=state.discard_pile[:-1])

    player = state.current_player.with_cards(drawn)
    state = state.replace_player(state.current_player_index, player)
    return DrawResult(state=replace(state, phase=GamePhase.MELD), drawn_card=drawn)


def discard_card(state: GameState, card_id: str) -> GameState:
    """Discard ``card_id`` from the current hand and close the turn.

    A player who has already melded and discards their last card goes out.
    """

    _require_phase(state, GamePhase.MELD, GamePhase.DISCARD, action="discard")
    player = state.current_player
    card = player.find_card(card_id)
    if card is None:
        raise CardNotFoundError(f"card {card_id!r} not found in player hand")

    player = player.without_cards([card_id])
    state = state.replace_player(state.current_player_index, player)
    state = replace(state, discard_pile=state.discard_pile + (card,))

    if player.has_melded and not player.hand:
        logger.info("player %s went out by discarding %s", player.id, card.id)
        return end_round(state, player.id)

    if state.player_count == 2:
        return advance_turn(state)
    return replace(state, phase=GamePhase.BUY_WINDOW)


def _validate_meld(state: GameState, player: Player, combinations: Sequence[Combination]) -> set[str]:
    if not validation.meets_round_objective(combinations, state.round_objective):
        raise InvalidMeldError("combinations do not meet round objective")
    for combination in combinations:
        if not validation.is_valid_combination(combination):
            kind = "triplet" if combination.type is CombinationType.TRIPLET else "sequence"
            raise InvalidMeldError(f"invalid {kind} in meld")

    used = Counter(melded_card_ids(combinations))
    repeated = [card_id for card_id, count in used.items() if count > 1]
    if repeated:
        raise InvalidMeldError(f"card {repeated[0]!r} used in more than one combination")
    for card_id in used:
        if not player.has_card(card_id):
            raise CardNotFoundError(f"cannot meld card {card_id!r} that is not in hand")

    new_ids = Counter(combination.id for combination in combinations)
    existing_ids = {combo.id for seat in state.players for combo in seat.melded_combinations}
    if any(count > 1 for count in new_ids.values()) or existing_ids & set(new_ids):
        raise InvalidMeldError("combination ids must be unique")
    return set(used)


def _melded(player: Player, combinations: Sequence[Combination], used: set[str]) -> Player:
    return replace(
        player.without_cards(used),
        melded_combinations=tuple(combo.owned_by(player.id) for combo in combinations),
        has_melded=True,
        buys_remaining=0,
    )


def meld_combinations(state: GameState, combinations: Sequence[Combination]) -> GameState:
    """Lay down the round objective for the current player.

    Melding forfeits any buys left this round.
    """

    _require_phase(state, GamePhase.MELD, action="meld")
    player = state.current_player
    if player.has_melded:
        raise AlreadyMeldedError("player has already melded this round")
    used = _validate_meld(state, player, combinations)
    if len(used) >= len(player.hand):
        raise InvalidMeldError("melding must leave a card to discard; go out instead")

    player = _melded(player, combinations, used)
    logger.debug("player %s melded %d combination(s)", player.id, len(combinations))
    state = state.replace_player(state.current_player_index, player)
    return replace(state, phase=GamePhase.DISCARD)


def go_out(state: GameState, combinations: Sequence[Combination], final_card_id: str) -> GameState:
    """Meld every card but one, discard that card and end the round as winner."""

    _require_phase(state, GamePhase.MELD, action="go out")
    player = state.current_player
    if player.has_melded:
        raise AlreadyMeldedError("player has already melded this round")
    used = _validate_meld(state, player, combinations)
    if len(player.hand) != len(used) + 1:
        raise InvalidMeldError("must have exactly one card remaining after melding to go out")
    final_card = player.find_card(final_card_id)
    if final_card is None:
        raise CardNotFoundError(f"final card {final_card_id!r} not found in hand")
    if final_card_id in used:
        raise InvalidMeldError("final card cannot be part of melded combinations")

    player = replace(_melded(player, combinations, used), hand=())
    state = state.replace_player(state.current_player_index, player)
    state = replace(state, discard_pile=state.discard_pile + (final_card,))
    logger.info("player %s went out", player.id)
    return end_round(state, player.id)


def buy_card(state: GameState, player_id: str, rng: random.Random | None = None) -> BuyResult:
    """Buy the top discard for ``player_id`` together with a bonus draw card."""

    if state.player_count == 2:
        raise BuyingDisabledError("buying is disabled in 2-player games")
    _require_phase(state, GamePhase.BUY_WINDOW, action="buy")
    index = _require_player(state, player_id)
    player = state.players[index]
    if index == state.current_player_index:
        raise BuyNotAllowedError("a player cannot buy their own discard")
    if player.has_melded:
        raise AlreadyMeldedError("cannot buy after melding")
    if player.buys_remaining <= 0:
        raise NoBuysRemainingError("no buys remaining")
    if not state.discard_pile:
        raise EmptyPileError("discard pile is empty")

    bought = state.discard_pile[-1]
    state = replace(state, discard_pile=state.discard_pile[:-1])
    if not state.draw_pile:
        state = reshuffle_discard_pile(state, rng)
    if not state.draw_pile:
        raise EmptyPileError("no cards available in draw pile for buy")
    extra = state.draw_pile[0]
    state = replace(state, draw_pile=state.draw_pile[1:])

    player = replace(player.with_cards(bought, extra), buys_remaining=player.buys_remaining - 1)
    logger.debug("player %s bought %s (%d buys left)", player.id, bought.id, player.buys_remaining)
    return BuyResult(state=state.replace_player(index, player), bought_card=bought, extra_card=extra)


def get_buy_priority(state: GameState) -> tuple[str, ...]:
    """Return the ids of players allowed to buy, highest priority first.

    Priority runs clockwise from the discarder. The next player draws
    normally and is skipped, as are melded players and players without buys.
    """

    if state.phase is not GamePhase.BUY_WINDOW:
        return ()
    discarder = state.current_player_index
    next_index = state.next_player_index
    priority = []
    for offset in range(1, state.player_count):
        idx = (discarder + offset) % state.player_count
        if idx == next_index:
            continue
        player = state.players[idx]
        if player.has_melded or player.buys_remaining <= 0:
            continue
        priority.append(player.id)
    return tuple(priority)


def can_player_buy(state: GameState, player_id: str) -> bool:
    if state.player_count == 2:
        return False
    return player_id in get_buy_priority(state)


def advance_turn(state: GameState) -> GameState:
    """Pass the turn clockwise and open the next player's DRAW phase."""

    return replace(state, current_player_index=state.next_player_index, phase=GamePhase.DRAW)


def complete_buy_window(state: GameState) -> GameState:
    _require_phase(state, GamePhase.BUY_WINDOW, action="complete the buy window")
    return advance_turn(state)


def find_combination(state: GameState, combination_id: str) -> tuple[int, Combination]:
    """Return the owner index and combination carrying ``combination_id``."""

    for idx, player in enumerate(state.players):
        for combination in player.melded_combinations:
            if combination.id == combination_id:
                return idx, combination
    raise CombinationNotFoundError(f"combination {combination_id!r} not found")


def _replace_combination(state: GameState, owner_index: int, updated: Combination) -> GameState:
    owner = state.players[owner_index]
    combos = tuple(updated if combo.id == updated.id else combo for combo in owner.melded_combinations)
    return state.replace_player(owner_index, replace(owner, melded_combinations=combos))


def _require_table_play(state: GameState, player_id: str, action: str) -> int:
    index = _require_player(state, player_id)
    if not state.players[index].has_melded:
        raise NotMeldedError(f"player must have melded to {action}")
    _require_phase(state, *sorted(_PLAY_PHASES), action=action)
    if index != state.current_player_index:
        raise OutOfTurnError(f"cannot {action} out of turn")
    return index


def swap_joker(
    state: GameState,
    player_id: str,
    combination_id: str,
    joker_card_id: str,
    replacement_card_id: str,
) -> GameState:
    """Take a Joker out of any melded sequence by putting its natural card in."""

    index = _require_table_play(state, player_id, "swap Jokers")
    player = state.players[index]
    replacement = player.find_card(replacement_card_id)
    if replacement is None:
        raise CardNotFoundError(f"replacement card {replacement_card_id!r} not found in player hand")

    owner_index, combination = find_combination(state, combination_id)
    joker = next((card for card in combination.cards if card.id == joker_card_id), None)
    if joker is None:
        raise CardNotFoundError(f"joker card {joker_card_id!r} not found in combination")
    if not validation.can_swap_joker(combination, joker, replacement):
        raise InvalidSwapError("invalid Joker swap")

    swapped = combination.with_cards(replacement if card.id == joker_card_id else card for card in combination.cards)
    state = _replace_combination(state, owner_index, swapped)
    player = state.players[index].without_cards([replacement_card_id]).with_cards(joker)
    logger.debug("player %s swapped %s out of %s", player_id, joker.id, combination_id)
    return state.replace_player(index, player)


def extend_sequence(
    state: GameState,
    player_id: str,
    combination_id: str,
    extension_card_ids: Sequence[str],
    position: SequenceEnd | str,
) -> GameState:
    """Attach cards from the player's hand to either end of any melded sequence."""

    index = _require_table_play(state, player_id, "extend sequences")
    position = SequenceEnd(position)
    if not extension_card_ids:
        raise InvalidExtensionError("extension needs at least one card")
    if len(set(extension_card_ids)) != len(extension_card_ids):
        raise InvalidExtensionError("extension cards must be distinct")

    player = state.players[index]
    extension = []
    for card_id in extension_card_ids:
        card = player.find_card(card_id)
        if card is None:
            raise CardNotFoundError(f"extension card {card_id!r} not found in player hand")
        extension.append(card)
    if len(extension) >= len(player.hand):
        raise InvalidExtensionError("extending must leave a card to discard")

    owner_index, combination = find_combination(state, combination_id)
    if combination.type is not CombinationType.SEQUENCE:
        raise InvalidExtensionError("can only extend sequences")
    if not validation.can_extend_sequence(combination, extension, position):
        raise InvalidExtensionError("invalid sequence extension")

    if position is SequenceEnd.START:
        extended = combination.with_cards([*extension, *combination.cards])
    else:
        extended = combination.with_cards([*combination.cards, *extension])
    state = _replace_combination(state, owner_index, extended)
    player = state.players[index].without_cards(extension_card_ids)
    return state.replace_player(index, player)


def _close_round(state: GameState, winner_player_id: str | None) -> GameState:
    round_scores = scoring.calculate_round_scores(state.players, winner_player_id)
    players = scoring.apply_round_scores(state.players, round_scores)
    logger.info("round %d finished; scores %s", state.round, round_scores)

    if state.round >= TOTAL_ROUNDS:
        winner = scoring.determine_winner(players)
        logger.info("game over; %s wins with %d", winner.id, winner.cumulative_score)
        return replace(
            state,
            players=players,
            phase=GamePhase.GAME_END,
            winner=winner.id,
            last_round_winner=winner_player_id,
        )

    next_round = state.round + 1
    return replace(
        state,
        players=players,
        round=next_round,
        round_objective=objective_for(next_round),
        phase=GamePhase.ROUND_END,
        last_round_winner=winner_player_id,
    )


def end_round(state: GameState, winner_player_id: str) -> GameState:
    """Score the round with ``winner_player_id`` on zero and advance the game."""

    _require_phase(state, *sorted(IN_ROUND_PHASES), action="end the round")
    _require_player(state, winner_player_id)
    return _close_round(state, winner_player_id)


def detect_stalemate(state: GameState) -> bool:
    """Return ``True`` when no card can be drawn even after a reshuffle."""

    return not state.draw_pile and len(state.discard_pile) <= 1


def handle_stalemate(state: GameState) -> GameState:
    """Close a stuck round; every player scores their whole hand."""

    _require_phase(state, *sorted(IN_ROUND_PHASES), action="resolve a stalemate")
    logger.warning("round %d ended without a winner", state.round)
    return _close_round(state, None)


def validate_player_action(state: GameState, player_id: str, action: str) -> None:
    """Raise unless ``player_id`` may perform ``action`` right now.

    Buying is exempt from the turn check because the buy window is open to
    every eligible player.
    """

    index = _require_player(state, player_id)
    if action != BUY_ACTION and index != state.current_player_index:
        raise OutOfTurnError("cannot perform action out of turn")


def hand_over_to_ai(state: GameState, player_id: str) -> GameState:
    """Let the AI take over a seat whose human player has left."""

    index = _require_player(state, player_id)
    player = state.players[index]
    if player.is_ai:
        return state
    return state.replace_player(index, replace(player, type=PlayerType.AI, name=f"{player.name} (AI)"))
