from __future__ import annotations

from dataclasses import replace

from shanko import actions
from shanko.cards import Card, Rank, Suit
from shanko.melds import Combination, CombinationType, SequenceEnd, objective_for
from shanko.state import GamePhase, GameState, Player, PlayerType

_SUITS = {suit.letter: suit for suit in Suit}


def _c(code: str, deck: int = 0) -> Card:
    return Card.standard(Rank(code[:-1]), _SUITS[code[-1]], deck)


def _hand(*codes: str) -> tuple[Card, ...]:
    return tuple(_c(code) for code in codes)


def _table(hand: tuple[Card, ...], *, phase: GamePhase = GamePhase.MELD, current: int = 0) -> GameState:
    sequence = Combination(
        id="seq-1",
        type=CombinationType.SEQUENCE,
        cards=(_c("5H"), Card.joker(0), _c("7H"), _c("8H")),
        owner_id="p2",
    )
    players = (
        Player(id="p1", name="P1", type=PlayerType.HUMAN, hand=hand, has_melded=True, buys_remaining=0),
        Player(id="p2", name="P2", type=PlayerType.AI, hand=_hand("KS"), melded_combinations=(sequence,), has_melded=True),
        Player(id="p3", name="P3", type=PlayerType.AI, hand=_hand("QD")),
        Player(id="p4", name="P4", type=PlayerType.AI, hand=_hand("2D")),
    )
    return GameState(
        game_id="g",
        players=players,
        current_player_index=current,
        round_objective=objective_for(1),
        draw_pile=_hand("3D", "4D"),
        discard_pile=_hand("10C", "JC"),
        phase=phase,
    )


def test_pile_selectors() -> None:
    state = _table(_hand("2C"))

    assert actions.current_player(state).id == "p1"
    assert actions.top_discard(state) == _c("JC")
    assert actions.top_discard(replace(state, discard_pile=())) is None
    assert actions.draw_pile_count(state) == 2
    assert actions.discard_pile_count(state) == 2
    assert [combo.id for combo in actions.melded_sets(state)] == ["seq-1"]


def test_swappable_jokers_lists_matching_cards() -> None:
    state = _table(_hand("6H", "6D", "2C"))

    assert actions.swappable_jokers(state, "p1") == [actions.JokerSwap("seq-1", "JOKER0#0", "6H#0")]
    assert actions.swappable_jokers(state, "p3") == []
    assert actions.swappable_jokers(replace(state, phase=GamePhase.DRAW), "p1") == []


def test_extendable_sequences_respects_ends() -> None:
    state = _table(_hand("9H", "4H", "2C"))

    options = {(option.card_ids, option.position) for option in actions.extendable_sequences(state, "p1")}

    assert options == {(("9H#0",), SequenceEnd.END), (("4H#0",), SequenceEnd.START)}
    assert actions.extendable_sequences(_table(_hand("9H")), "p1") == []


def test_valid_actions_by_phase() -> None:
    draw = actions.valid_actions(_table(_hand("2C"), phase=GamePhase.DRAW))
    assert draw.can_draw_from_deck and draw.can_draw_from_discard
    assert not draw.can_discard

    play = actions.valid_actions(_table(_hand("9H", "6H", "2C")))
    assert play.can_discard
    assert not play.can_meld
    assert play.can_swap_joker
    assert play.can_extend_sequence

    assert actions.valid_actions(_table(_hand("2C")), "p3") == actions.ValidActions()
    assert actions.valid_actions(_table(_hand("2C")), "p9") == actions.ValidActions()


def test_valid_actions_in_buy_window() -> None:
    state = _table(_hand("2C"), phase=GamePhase.BUY_WINDOW)

    assert actions.buy_priority(state) == ("p3", "p4")
    assert actions.valid_actions(state, "p3").can_buy
    assert not actions.valid_actions(state, "p2").can_buy
    assert not actions.valid_actions(state, "p1").can_buy


def test_valid_actions_for_unmelded_player() -> None:
    state = _table(_hand("2C"))
    state = state.replace_player(0, replace(state.players[0], has_melded=False, buys_remaining=3))

    flags = actions.valid_actions(state)

    assert flags.can_meld and flags.can_go_out
    assert not flags.can_swap_joker
