from __future__ import annotations

import random
from dataclasses import dataclass, field

from .errors import CardNotInHand, IllegalPlay
from .piles import Deck, DiscardPile
from .players import Player
from .types import Card, is_legal

Event = dict[str, object]


@dataclass(frozen=True)
class GameConfig:
    starting_hand: int = 4
    min_opponents: int = 1
    max_opponents: int = 3
    human_name: str = "You"
    machine_name_template: str = "Machine {n}"


@dataclass(frozen=True)
class Continued:
    player: Player


@dataclass(frozen=True)
class Eliminated:
    player: Player
    next_player: Player


@dataclass(frozen=True)
class GameOver:
    winner: Player
    eliminated: Player | None = None


TurnOutcome = Continued | Eliminated | GameOver


@dataclass
class GameState:
    config: GameConfig
    seed: int | None
    rng: random.Random
    players: list[Player]
    deck: Deck
    discard: DiscardPile = field(default_factory=DiscardPile)
    current_index: int = 0
    winner: Player | None = None
    event_log: list[Event] = field(default_factory=list)

    @property
    def current_player(self) -> Player:
        return self.players[self.current_index]

    @property
    def human(self) -> Player:
        return self.players[0]

    @property
    def active_players(self) -> list[Player]:
        return [p for p in self.players if not p.eliminated]

    @property
    def running_sum(self) -> int:
        return self.discard.running_sum

    @property
    def top_card(self) -> Card | None:
        return self.discard.top

    @property
    def draw_pile_size(self) -> int:
        return len(self.deck)

    @property
    def game_over(self) -> bool:
        return self.winner is not None

    def card_count(self) -> int:
        return len(self.deck) + len(self.discard) + sum(p.hand_size for p in self.players)


def _log(state: GameState, event: Event) -> None:
    state.event_log.append(event)


def _check_game_over(state: GameState) -> None:
    if state.winner is not None:
        return
    active = state.active_players
    if len(active) == 1:
        state.winner = active[0]
        _log(state, {"type": "GAME_ENDED", "winner": state.winner.name})


def initialize(state: GameState) -> None:
    """Deal the starting hands round-robin and turn up the first table card."""
    for _ in range(state.config.starting_hand):
        for player in state.players:
            player.add_card(state.deck.draw())

    first = state.deck.draw()
    state.discard.place(first)
    _log(
        state,
        {
            "type": "GAME_STARTED",
            "players": [p.name for p in state.players],
            "table_card": first.label,
            "sum": state.running_sum,
        },
    )
    _log(state, {"type": "TURN_STARTED", "player": state.current_player.name})


def new_game(
    opponents: int,
    seed: int | None = None,
    config: GameConfig | None = None,
    deck: Deck | None = None,
) -> GameState:
    cfg = config or GameConfig()
    if not cfg.min_opponents <= opponents <= cfg.max_opponents:
        raise ValueError(
            f"Opponent count must be between {cfg.min_opponents} and {cfg.max_opponents}."
        )

    rng = random.Random(seed)
    players = [Player.human(cfg.human_name)]
    for n in range(1, opponents + 1):
        players.append(Player.machine(cfg.machine_name_template.format(n=n)))

    state = GameState(
        config=cfg,
        seed=seed,
        rng=rng,
        players=players,
        deck=deck if deck is not None else Deck(rng=rng),
    )
    initialize(state)
    return state


def _place(state: GameState, player: Player, card: Card) -> int:
    before = state.running_sum
    delta = state.discard.place(card)
    _log(
        state,
        {
            "type": "CARD_PLAYED",
            "player": player.name,
            "card": card.label,
            "delta": delta,
            "sum_before": before,
            "sum": state.running_sum,
        },
    )
    return delta


def _check_can_play(state: GameState) -> Player:
    if state.game_over:
        raise IllegalPlay("The game is already over.")
    player = state.current_player
    if player.eliminated:
        raise IllegalPlay("Eliminated players cannot play.")
    return player


def play_card(state: GameState, card: Card) -> int:
    """Move `card` from the current player's hand to the table and return its value.

    The turn cursor does not move.
    """
    player = _check_can_play(state)
    if not player.holds(card):
        raise IllegalPlay(f"{card} does not belong to {player.name}.")
    if not is_legal(card, state.running_sum):
        raise IllegalPlay("Playing this card would exceed 50.")

    player.remove_card(card)
    return _place(state, player, card)


def _play_selected(state: GameState) -> Card:
    """Let the current machine player pick a card via `Player.select_card` and table it."""
    player = _check_can_play(state)
    before = state.running_sum
    card = player.select_card(before)
    if card is None:
        raise IllegalPlay(f"{player.name}'s strategy declined to choose a card.")
    if not is_legal(card, before):
        player.add_card(card)
        raise IllegalPlay(f"{player.name}'s strategy chose {card}, which would exceed 50.")
    _place(state, player, card)
    return card


def play_human_card(state: GameState, card: Card) -> int:
    player = state.current_player
    if not player.is_human:
        raise IllegalPlay("It's not your turn.")
    if not player.holds(card):
        raise CardNotInHand(f"{card} is not in {player.name}'s hand.")
    if not is_legal(card, state.running_sum):
        raise IllegalPlay("Playing this card would exceed 50.")
    return play_card(state, card)


def draw_for_current_player(state: GameState) -> Card:
    if state.deck.is_empty():
        # DeckEmpty propagates when the table holds only its top card.
        moved = state.deck.replenish(state.discard)
        _log(state, {"type": "DECK_REPLENISHED", "cards": moved})
    card = state.deck.draw()
    player = state.current_player
    player.add_card(card)
    _log(state, {"type": "CARD_DRAWN", "player": player.name})
    return card


def advance_turn(state: GameState) -> TurnOutcome:
    if state.winner is None:
        count = len(state.players)
        idx = state.current_index
        # Terminates: at least one player is always active.
        while True:
            idx = (idx + 1) % count
            if not state.players[idx].eliminated:
                break
        state.current_index = idx
        _check_game_over(state)

    if state.winner is not None:
        return GameOver(winner=state.winner)
    _log(state, {"type": "TURN_STARTED", "player": state.current_player.name})
    return Continued(player=state.current_player)


def eliminate_current_player(state: GameState) -> TurnOutcome:
    """Remove the current player from the rotation.

    Only valid when the player has no legal move. Their cards go back under
    the draw pile.
    """
    if state.game_over:
        raise IllegalPlay("The game is already over.")
    player = state.current_player
    if player.eliminated:
        raise IllegalPlay(f"{player.name} is already eliminated.")
    if player.has_legal_move(state.running_sum):
        raise IllegalPlay(f"{player.name} still has a legal move.")

    returned = player.take_all_cards()
    player.eliminate()
    state.deck.add_cards(returned)
    _log(state, {"type": "PLAYER_ELIMINATED", "player": player.name, "returned": len(returned)})

    _check_game_over(state)
    if state.winner is not None:
        return GameOver(winner=state.winner, eliminated=player)

    outcome = advance_turn(state)
    if isinstance(outcome, GameOver):
        return GameOver(winner=outcome.winner, eliminated=player)
    return Eliminated(player=player, next_player=outcome.player)


def finish_turn(state: GameState) -> TurnOutcome:
    """Draw a replacement card for the current player and pass the turn."""
    draw_for_current_player(state)
    return advance_turn(state)
