"""
Pairing engine: match original keys to remix keys.

Three phases run in order, each skipping keys matched by an earlier one:

1. leading track number ("03 - Song.mp3" <-> "03_Song_Remix.mp3")
2. normalized stem ("Nightfall (Radio Edit).mp3" <-> "nightfall remix.wav")
3. position in natural sort order, dropping the longer side's tail
"""

import logging
from typing import Dict, Iterable, List, NamedTuple, Set

from .rules import DEFAULT_RULES, MatchRules, natural_sort_key

logger = logging.getLogger(__name__)


class KeyPair(NamedTuple):
    original: str
    remix: str


def _index_by_number(keys: List[str], rules: MatchRules) -> Dict[int, str]:
    """Map track number -> first key carrying it."""
    by_number: Dict[int, str] = {}
    for key in keys:
        number = rules.key_number(key)
        if number is not None and number not in by_number:
            by_number[number] = key
    return by_number


def _match_numbers(originals: List[str], remixes: List[str], rules: MatchRules,
                   used_o: Set[str], used_r: Set[str]) -> List[KeyPair]:
    o_by_num = _index_by_number(originals, rules)
    r_by_num = _index_by_number(remixes, rules)

    pairs = []
    for number in sorted(set(o_by_num) | set(r_by_num)):
        o = o_by_num.get(number)
        r = r_by_num.get(number)
        if o is not None and r is not None:
            pairs.append(KeyPair(o, r))
            used_o.add(o)
            used_r.add(r)
    return pairs


def _match_stems(originals: List[str], remixes: List[str], rules: MatchRules,
                 used_o: Set[str], used_r: Set[str]) -> List[KeyPair]:
    r_by_stem: Dict[str, str] = {}
    for r in remixes:
        if r not in used_r:
            r_by_stem[rules.key_stem(r)] = r

    pairs = []
    for o in originals:
        if o in used_o:
            continue
        r = r_by_stem.pop(rules.key_stem(o), None)
        if r is not None:
            pairs.append(KeyPair(o, r))
            used_o.add(o)
            used_r.add(r)
    return pairs


def _match_positions(originals: List[str], remixes: List[str],
                     used_o: Set[str], used_r: Set[str]) -> List[KeyPair]:
    o_remain = [k for k in originals if k not in used_o]
    r_remain = [k for k in remixes if k not in used_r]
    if len(o_remain) != len(r_remain):
        logger.debug(f"positional fallback drops {abs(len(o_remain) - len(r_remain))} unmatched keys")
    return [KeyPair(o, r) for o, r in zip(o_remain, r_remain)]


def pair_keys(original_keys: Iterable[str], remix_keys: Iterable[str],
              rules: MatchRules = DEFAULT_RULES) -> List[KeyPair]:
    """
    Pair original keys with remix keys.

    The result does not depend on the order of the inputs. Pairs come out
    as numeric matches (ascending number), then stem matches (discovery
    order), then positional matches (natural order).

    Args:
        original_keys: Keys of the original versions
        remix_keys: Keys of the remix versions
        rules: Matching policy

    Returns:
        List of (original, remix) pairs
    """
    originals = sorted(set(original_keys), key=natural_sort_key)
    remixes = sorted(set(remix_keys), key=natural_sort_key)
    used_o: Set[str] = set()
    used_r: Set[str] = set()

    by_number = _match_numbers(originals, remixes, rules, used_o, used_r)
    by_stem = _match_stems(originals, remixes, rules, used_o, used_r)
    by_position = _match_positions(originals, remixes, used_o, used_r)

    logger.debug(
        f"pair_keys: originals={len(originals)} remixes={len(remixes)} "
        f"number={len(by_number)} stem={len(by_stem)} position={len(by_position)}"
    )
    return by_number + by_stem + by_position
