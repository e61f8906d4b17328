"""
Item Catalogue: the universe of learnable items.

Provides an ordered list of item ids per ItemType. The built-in catalogue
covers the Greek alphabet, first/second declension noun endings and the
λύω verb paradigm. A JSON file can replace it:

    {"letter": ["letter-alpha", ...], "noun-ending": [...], "verb-ending": [...]}

The catalogue is only used to create default-state items for an empty store.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path

from loguru import logger

from .srs.models import ItemType, ReviewItem

# =============================================================================
# Built-in Universe
# =============================================================================

GREEK_LETTERS: tuple[str, ...] = (
    "alpha", "beta", "gamma", "delta", "epsilon", "zeta", "eta", "theta",
    "iota", "kappa", "lambda", "mu", "nu", "xi", "omicron", "pi",
    "rho", "sigma", "tau", "upsilon", "phi", "chi", "psi", "omega",
)

NOUN_PATTERNS: tuple[str, ...] = ("1d-eta", "1d-alpha", "2d-masc", "2d-neut")
NOUN_CASES: tuple[str, ...] = ("nom", "gen", "dat", "acc", "voc")
NUMBERS: tuple[str, ...] = ("s", "p")

PERSONS: tuple[str, ...] = ("1s", "2s", "3s", "1p", "2p", "3p")
VERB_FINITE_PARADIGMS: tuple[str, ...] = (
    "pres-act-ind",
    "pres-mp-ind",
    "impf-act-ind",
    "fut-act-ind",
    "aor-act-ind",
    "perf-act-ind",
    "pres-act-subj",
)
IMPERATIVE_PERSONS: tuple[str, ...] = ("2s", "3s", "2p", "3p")
VERB_NONFINITE: tuple[str, ...] = (
    "pres-act-inf",
    "pres-act-ptc-m-nom-s",
    "pres-act-ptc-f-nom-s",
    "pres-act-ptc-n-nom-s",
)


def _noun_ending_ids() -> list[str]:
    return [
        f"{pattern}-{case}-{number}"
        for pattern in NOUN_PATTERNS
        for number in NUMBERS
        for case in NOUN_CASES
    ]


def _verb_ending_ids() -> list[str]:
    ids = [f"{paradigm}-{person}" for paradigm in VERB_FINITE_PARADIGMS for person in PERSONS]
    ids += [f"pres-act-imp-{person}" for person in IMPERATIVE_PERSONS]
    ids += list(VERB_NONFINITE)
    return ids


def make_item_id(item_type: ItemType, key: str) -> str:
    """Item id for a catalogue key, e.g. (LETTER, "alpha") -> "letter-alpha"."""
    return f"{item_type.id_prefix}-{key}"


# =============================================================================
# Catalog
# =============================================================================


class Catalog:
    """
    Ordered item ids per ItemType.

    Ids must be unique across the whole universe.
    """

    def __init__(self, ids_by_type: Mapping[ItemType, Sequence[str]]):
        self._ids: dict[ItemType, tuple[str, ...]] = {
            item_type: tuple(ids_by_type.get(item_type, ())) for item_type in ItemType
        }
        self._type_by_id: dict[str, ItemType] = {}
        for item_type, ids in self._ids.items():
            for item_id in ids:
                if item_id in self._type_by_id:
                    raise ValueError(f"Duplicate item id in catalogue: {item_id}")
                self._type_by_id[item_id] = item_type

    @classmethod
    def default(cls) -> Catalog:
        """The built-in Greek alphabet + parsing universe."""
        return cls(
            {
                ItemType.LETTER: [make_item_id(ItemType.LETTER, k) for k in GREEK_LETTERS],
                ItemType.NOUN_ENDING: [
                    make_item_id(ItemType.NOUN_ENDING, k) for k in _noun_ending_ids()
                ],
                ItemType.VERB_ENDING: [
                    make_item_id(ItemType.VERB_ENDING, k) for k in _verb_ending_ids()
                ],
            }
        )

    @classmethod
    def from_json(cls, path: Path | str) -> Catalog:
        """
        Load a catalogue from a JSON file.

        Args:
            path: File mapping item-type values to lists of ids

        Returns:
            Catalog

        Raises:
            ValueError: unknown item type key or duplicate ids
        """
        path = Path(path)
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)

        ids_by_type = {ItemType(key): [str(v) for v in values] for key, values in raw.items()}
        catalog = cls(ids_by_type)
        logger.info(f"Loaded catalogue from {path} ({len(catalog)} items)")
        return catalog

    def ids(self, item_type: ItemType) -> tuple[str, ...]:
        return self._ids[item_type]

    def item_type_of(self, item_id: str) -> ItemType | None:
        return self._type_by_id.get(item_id)

    def materialize(self, now: int) -> list[ReviewItem]:
        """Default-state items for the whole universe, in catalogue order."""
        return [
            ReviewItem.new(item_id, item_type, now)
            for item_type in ItemType
            for item_id in self._ids[item_type]
        ]

    def counts(self) -> dict[ItemType, int]:
        return {item_type: len(ids) for item_type, ids in self._ids.items()}

    def __len__(self) -> int:
        return len(self._type_by_id)

    def __iter__(self) -> Iterator[str]:
        for item_type in ItemType:
            yield from self._ids[item_type]

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._type_by_id
