"""Board model: the 25-card grid and its fixed color distribution."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence

from .errors import AlreadyRevealedError, IndexOutOfRangeError

BOARD_SIZE = 25


class Team(str, Enum):
    """Codenames teams. RED always opens the game."""

    RED = "RED"
    BLUE = "BLUE"

    @property
    def other(self) -> "Team":
        return Team.BLUE if self is Team.RED else Team.RED

    @property
    def card_color(self) -> "CardColor":
        return CardColor.RED if self is Team.RED else CardColor.BLUE


class CardColor(str, Enum):
    """Hidden assignment of each board card."""

    RED = "RED"
    BLUE = "BLUE"
    NEUTRAL = "NEUTRAL"
    ASSASSIN = "ASSASSIN"


# The starting team holds one extra card.
COLOR_DISTRIBUTION: dict[CardColor, int] = {
    CardColor.RED: 9,
    CardColor.BLUE: 8,
    CardColor.NEUTRAL: 7,
    CardColor.ASSASSIN: 1,
}

DEFAULT_WORDS: tuple[str, ...] = (
    "AFRICA", "AGENT", "AIR", "ALIEN", "ALPS", "AMAZON", "AMBULANCE", "AMERICA",
    "ANGEL", "ANTARCTICA", "APPLE", "ARM", "ATLANTIS", "AUSTRALIA", "AZTEC", "BACK",
    "BALL", "BAND", "BANK", "BAR", "BARK", "BAT", "BATTERY", "BEACH",
    "BEAR", "BEAT", "BED", "BEIJING", "BELL", "BELT", "BERLIN", "BERMUDA",
    "BERRY", "BILL", "BLOCK", "BOARD", "BOLT", "BOMB", "BOND", "BOOM",
    "BOOT", "BOTTLE", "BOW", "BOX", "BRIDGE", "BRUSH", "BUCK", "BUFFALO",
    "BUG", "BUGLE", "BUTTON", "CALF", "CANADA", "CAP", "CAPITAL", "CAR",
    "CARD", "CARROT", "CASINO", "CAST", "CAT", "CELL", "CENTAUR", "CENTER",
    "CHAIR", "CHANGE", "CHARGE", "CHECK", "CHEST", "CHICK", "CHINA", "CHOCOLATE",
    "CHURCH", "CIRCLE", "CLIFF", "CLOAK", "CLUB", "CODE", "COLD", "COMIC",
    "COMPOUND", "CONCERT", "CONDUCTOR", "CONTRACT", "COOK", "COPPER", "COTTON", "COURT",
    "COVER", "CRANE", "CRASH", "CRICKET", "CROSS", "CROWN", "CYCLE", "CZECH",
    "DANCE", "DATE", "DAY", "DEATH", "DECK", "DEGREE", "DIAMOND", "DICE",
    "DINOSAUR", "DISEASE", "DOCTOR", "DOG", "DRAFT", "DRAGON", "DRESS", "DRILL",
    "DROP", "DUCK", "DWARF", "EAGLE", "EGYPT", "EMBASSY", "ENGINE", "ENGLAND",
    "EUROPE", "EYE", "FACE", "FAIR", "FALL", "FAN", "FENCE", "FIELD",
    "FIGHTER", "FIGURE", "FILE", "FILM", "FIRE", "FISH", "FLUTE", "FLY",
    "FOOT", "FORCE", "FOREST", "FORK", "FRANCE", "GAME", "GAS", "GENIUS",
    "GERMANY", "GHOST", "GIANT", "GLASS", "GLOVE", "GOLD", "GRACE", "GRASS",
    "GREECE", "GREEN", "GROUND", "HAM", "HAND", "HAWK", "HEAD", "HEART",
    "HELICOPTER", "HIMALAYAS", "HOLE", "HOLLYWOOD", "HONEY", "HOOD", "HOOK", "HORN",
    "HORSE", "HORSESHOE", "HOSPITAL", "HOTEL", "ICE", "ICE CREAM", "INDIA", "IRON",
    "IVORY", "JACK", "JAM", "JET", "JUPITER", "KANGAROO", "KETCHUP", "KEY",
    "KID", "KING", "KIWI", "KNIFE", "KNIGHT", "LAB", "LAP", "LASER",
    "LAWYER", "LEAD", "LEMON", "LEPRECHAUN", "LIFE", "LIGHT", "LIMOUSINE", "LINE",
    "LINK", "LION", "LITTER", "LOCH NESS", "LOCK", "LOG", "LONDON", "LUCK",
    "MAIL", "MAMMOTH", "MAPLE", "MARBLE", "MARCH", "MASS", "MATCH", "MERCURY",
    "MEXICO", "MICROSCOPE", "MILLIONAIRE", "MINE", "MINT", "MISSILE", "MODEL", "MOLE",
    "MOON", "MOSCOW", "MOUNT", "MOUSE", "MOUTH", "MUG", "NAIL", "NEEDLE",
    "NET", "NEW YORK", "NIGHT", "NINJA", "NOTE", "NOVEL", "NURSE", "NUT",
    "OCTOPUS", "OIL", "OLIVE", "OLYMPUS", "OPERA", "ORANGE", "ORGAN", "PALM",
    "PAN", "PANTS", "PAPER", "PARACHUTE", "PARK", "PART", "PASS", "PASTE",
    "PENGUIN", "PHOENIX", "PIANO", "PIE", "PILOT", "PIN", "PIPE", "PIRATE",
    "PISTOL", "PIT", "PITCH", "PLANE", "PLASTIC", "PLATE", "PLATYPUS", "PLAY",
    "PLOT", "POINT", "POISON", "POLE", "POLICE", "POOL", "PORT", "POST",
    "POUND", "PRESS", "PRINCESS", "PUMPKIN", "PUPIL", "PYRAMID", "QUEEN", "RABBIT",
    "RACKET", "RAY", "REVOLUTION", "RING", "ROBIN", "ROBOT", "ROCK", "ROME",
    "ROOT", "ROSE", "ROULETTE", "ROUND", "ROW", "RULER", "SATELLITE", "SATURN",
    "SCALE", "SCHOOL", "SCIENTIST", "SCORPION", "SCREEN", "SCUBA DIVER", "SEAL", "SERVER",
    "SHADOW", "SHAKESPEARE", "SHARK", "SHIP", "SHOE", "SHOP", "SHOT", "SINK",
    "SKYSCRAPER", "SLIP", "SLUG", "SMUGGLER", "SNOW", "SNOWMAN", "SOCK", "SOLDIER",
    "SOUL", "SOUND", "SPACE", "SPELL", "SPIDER", "SPIKE", "SPINE", "SPOT",
    "SPRING", "SPY", "SQUARE", "STADIUM", "STAFF", "STAR", "STATE", "STICK",
    "STOCK", "STRAW", "STREAM", "STRIKE", "STRING", "SUB", "SUIT", "SUPERHERO",
    "SWING", "SWITCH", "TABLE", "TABLET", "TAG", "TAIL", "TAP", "TEACHER",
    "TELESCOPE", "TEMPLE", "THEATER", "THIEF", "THUMB", "TICK", "TIE", "TIME",
    "TOKYO", "TOOTH", "TORCH", "TOWER", "TRACK", "TRAIN", "TRIANGLE", "TRIP",
    "TRUNK", "TUBE", "TURKEY", "UNDERTAKER", "UNICORN", "VACUUM", "VAN", "VET",
    "WAKE", "WALL", "WAR", "WASHER", "WASHINGTON", "WATCH", "WATER", "WAVE",
    "WEB", "WELL", "WHALE", "WHIP", "WIND", "WITCH", "WORM", "YARD",
)


@dataclass
class Card:
    """One board card. Only `revealed` ever changes, and only False -> True."""

    word: str
    color: CardColor
    index: int
    revealed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"word": self.word, "color": self.color.value, "index": self.index, "revealed": self.revealed}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Card":
        return cls(
            word=str(data["word"]),
            color=CardColor(str(data["color"])),
            index=int(data["index"]),
            revealed=bool(data.get("revealed", False)),
        )


@dataclass
class Board:
    """Ordered sequence of exactly 25 cards with a 9/8/7/1 color split."""

    cards: list[Card]

    def __post_init__(self) -> None:
        if len(self.cards) != BOARD_SIZE:
            raise ValueError(f"Board must contain exactly {BOARD_SIZE} cards, got {len(self.cards)}.")
        for position, card in enumerate(self.cards):
            if card.index != position:
                raise ValueError(f"Card at position {position} carries index {card.index}.")
        counts = self.color_counts()
        if counts != {color.value: count for color, count in COLOR_DISTRIBUTION.items()}:
            raise ValueError(f"Invalid color distribution: {counts}")

    @classmethod
    def create(cls, rng: random.Random | None = None, word_list: Sequence[str] | None = None) -> "Board":
        """Deal a fresh board.

        Words and colors are shuffled independently before being zipped, so the
        color layout carries no information about word order in the source list.
        """
        rng = rng or random.Random()
        source = list(dict.fromkeys(word.strip().upper() for word in (word_list or DEFAULT_WORDS) if word.strip()))
        if len(source) < BOARD_SIZE:
            raise ValueError(f"word_list must contain at least {BOARD_SIZE} distinct words.")

        words = rng.sample(source, BOARD_SIZE)
        colors = [color for color, count in COLOR_DISTRIBUTION.items() for _ in range(count)]
        rng.shuffle(colors)
        return cls(
            cards=[
                Card(word=word, color=color, index=index)
                for index, (word, color) in enumerate(zip(words, colors, strict=True))
            ]
        )

    @property
    def words(self) -> tuple[str, ...]:
        return tuple(card.word for card in self.cards)

    def card(self, index: int) -> Card:
        """Return the card at `index` or raise IndexOutOfRangeError."""
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self.cards):
            raise IndexOutOfRangeError(index, len(self.cards))
        return self.cards[index]

    def reveal(self, index: int) -> Card:
        """Flip a card face up and return it."""
        card = self.card(index)
        if card.revealed:
            raise AlreadyRevealedError(index)
        card.revealed = True
        return card

    def remaining_count(self, team: Team) -> int:
        """Count unrevealed cards of `team`'s color. Always recomputed from the cards."""
        target = team.card_color
        return sum(1 for card in self.cards if card.color is target and not card.revealed)

    def unrevealed_indices(self) -> list[int]:
        return [card.index for card in self.cards if not card.revealed]

    def color_counts(self, *, revealed_only: bool = False) -> dict[str, int]:
        counts = {color.value: 0 for color in CardColor}
        for card in self.cards:
            if revealed_only and not card.revealed:
                continue
            counts[card.color.value] += 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {"cards": [card.to_dict() for card in self.cards]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Board":
        return cls(cards=[Card.from_dict(card) for card in data["cards"]])


def board_from_layout(words: Iterable[str], colors: Iterable[CardColor]) -> Board:
    """Build a board from an explicit word/color layout (fixtures, replays)."""
    return Board(
        cards=[
            Card(word=word, color=color, index=index)
            for index, (word, color) in enumerate(zip(words, colors, strict=True))
        ]
    )
