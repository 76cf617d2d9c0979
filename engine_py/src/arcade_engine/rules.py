"""
Game rule configuration and validation.
"""

from typing import Dict, Union

from pydantic import BaseModel, Field, field_validator

from .constants import (
    GAME_REVERSI, GAME_CRAZY_EIGHTS, GAME_GO_FISH, GAME_BACCARAT,
    DIFFICULTY_EASY, DIFFICULTY_MEDIUM, DIFFICULTY_HARD, DIFFICULTY_MASTER,
)


class RuleConfig(BaseModel):
    """Settings shared by every game family."""

    min_players: int = Field(
        default=2,
        ge=1,
        le=8,
        description="Minimum number of seats required to start"
    )
    max_players: int = Field(
        default=4,
        ge=1,
        le=8,
        description="Maximum number of seats allowed"
    )

    @field_validator('max_players')
    @classmethod
    def validate_max_players(cls, v, info):
        """Validate maximum players doesn't fall below minimum."""
        min_players = info.data.get('min_players', 1)
        if v < min_players:
            raise ValueError(f'max_players ({v}) must be >= min_players ({min_players})')
        return v

    def validate_player_count(self, player_count: int) -> bool:
        """Check if a player count is valid for this configuration."""
        return self.min_players <= player_count <= self.max_players


class ReversiConfig(RuleConfig):
    min_players: int = Field(default=2, ge=2, le=2)
    max_players: int = Field(default=2, ge=2, le=2)
    mobility_weight: int = Field(
        default=5,
        ge=0,
        description="Score per legal move of mobility advantage in the static evaluation"
    )
    hard_depth: int = Field(default=4, ge=1, le=8, description="Search depth for hard AI")
    master_depth: int = Field(default=6, ge=1, le=10, description="Search depth for master AI")


class CrazyEightsConfig(RuleConfig):
    min_players: int = Field(default=2, ge=2, le=6)
    max_players: int = Field(default=6, ge=2, le=6)
    draw_cap: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum cards a player may draw in one turn"
    )
    hand_size: int = Field(default=7, ge=1, le=10, description="Cards dealt with fewer than four players")
    large_table_hand_size: int = Field(default=5, ge=1, le=10, description="Cards dealt with four or more players")
    wild_rank: int = Field(default=8, ge=1, le=13)

    def cards_per_player(self, player_count: int) -> int:
        return self.large_table_hand_size if player_count >= 4 else self.hand_size


class GoFishConfig(RuleConfig):
    min_players: int = Field(default=2, ge=2, le=6)
    max_players: int = Field(default=6, ge=2, le=6)
    hand_sizes: Dict[int, int] = Field(
        default_factory=lambda: {2: 7, 3: 6},
        description="Cards dealt per player count; larger tables use default_hand_size"
    )
    default_hand_size: int = Field(default=5, ge=1, le=10)

    def cards_per_player(self, player_count: int) -> int:
        return self.hand_sizes.get(player_count, self.default_hand_size)


class BaccaratConfig(RuleConfig):
    min_players: int = Field(default=1, ge=1, le=1)
    max_players: int = Field(default=1, ge=1, le=1)
    commission: float = Field(
        default=0.05,
        ge=0.0,
        lt=1.0,
        description="Commission taken from winning bank bets"
    )
    tie_payout: int = Field(default=8, ge=1, description="Tie pays N:1")
    push_on_tie: bool = Field(
        default=False,
        description="Return player/bank stakes on a tie instead of losing them"
    )
    reshuffle_threshold: int = Field(
        default=20,
        ge=6,
        description="Start a fresh shoe before a coup when fewer cards remain"
    )
    shoe_decks: int = Field(default=1, ge=1, le=8)
    history_limit: int = Field(default=20, ge=1)
    starting_chips: Dict[str, int] = Field(
        default_factory=lambda: {
            DIFFICULTY_EASY: 5000,
            DIFFICULTY_MEDIUM: 2500,
            DIFFICULTY_HARD: 1000,
            DIFFICULTY_MASTER: 500,
        }
    )
    min_bets: Dict[str, int] = Field(
        default_factory=lambda: {
            DIFFICULTY_EASY: 10,
            DIFFICULTY_MEDIUM: 25,
            DIFFICULTY_HARD: 50,
            DIFFICULTY_MASTER: 100,
        }
    )

    def bankroll_for(self, difficulty: str) -> int:
        return self.starting_chips.get(difficulty, self.starting_chips[DIFFICULTY_MEDIUM])

    def min_bet_for(self, difficulty: str) -> int:
        return self.min_bets.get(difficulty, self.min_bets[DIFFICULTY_MEDIUM])


AnyRuleConfig = Union[ReversiConfig, CrazyEightsConfig, GoFishConfig, BaccaratConfig]

CONFIG_CLASSES = {
    GAME_REVERSI: ReversiConfig,
    GAME_CRAZY_EIGHTS: CrazyEightsConfig,
    GAME_GO_FISH: GoFishConfig,
    GAME_BACCARAT: BaccaratConfig,
}


def create_rules(game_type: str, **overrides) -> AnyRuleConfig:
    """Create the rule config for a game family with optional overrides."""
    try:
        config_class = CONFIG_CLASSES[game_type]
    except KeyError:
        raise ValueError(f"Unknown game type: {game_type}")
    return config_class(**overrides)
