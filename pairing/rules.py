"""
Filename matching rules used by the pairing engine.

All heuristics live here as one named rule table so the matching policy can
be tested and tuned without touching the pairing control flow:

- one numeric-extraction pattern for leading track numbers
- the extension and bracketed-content patterns
- an ordered list of filler tokens removed as whole words
"""

import re
import unicodedata
from dataclasses import dataclass, field
from typing import Optional, Pattern, Tuple, List

# "18. Something", "02 - Title", "003_Title"
NUMERIC_PREFIX_PATTERN = re.compile(r'^\s*(\d{1,4})[.\-_ ]?')
EXTENSION_PATTERN = re.compile(r'\.[a-z0-9]{2,5}$', re.IGNORECASE)
BRACKETED_PATTERN = re.compile(r'\(.*?\)|\[.*?\]|\{.*?\}')
NON_ALNUM_PATTERN = re.compile(r'[^a-z0-9]+')
WHITESPACE_PATTERN = re.compile(r'\s+')
DIGIT_RUN_PATTERN = re.compile(r'(\d+)')

# Regex fragments, applied in order as whole words, case-insensitively
DEFAULT_FILLER_TOKENS: Tuple[str, ...] = (
    r'remix',
    r'fwea[-\s]?go',
    r'jit',
)


def final_segment(key: str) -> str:
    """Last path segment of a key ("originals/01 Song.mp3" -> "01 Song.mp3")."""
    return key.rsplit('/', 1)[-1] or key


def strip_diacritics(value: str) -> str:
    decomposed = unicodedata.normalize('NFD', value)
    return ''.join(c for c in decomposed if not unicodedata.combining(c))


def natural_sort_key(value: str):
    """
    Sort key where digit runs compare by numeric value.

    Text compares case- and accent-insensitively; equal keys fall back to
    case-insensitive, then exact, lexicographic order so the ordering is total.
    """
    folded = strip_diacritics(value).casefold()
    parts = []
    for i, chunk in enumerate(DIGIT_RUN_PATTERN.split(folded)):
        if not chunk:
            continue
        if i % 2:
            parts.append((0, int(chunk), ''))
        else:
            parts.append((1, 0, chunk))
    return (tuple(parts), value.casefold(), value)


@dataclass(frozen=True)
class MatchRules:
    """The complete matching policy: numeric extraction and stem normalization."""
    numeric_prefix: Pattern = NUMERIC_PREFIX_PATTERN
    extension: Pattern = EXTENSION_PATTERN
    bracketed: Pattern = BRACKETED_PATTERN
    filler_tokens: Tuple[str, ...] = DEFAULT_FILLER_TOKENS
    _filler_patterns: List[Pattern] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        patterns = [re.compile(rf'\b{token}\b', re.IGNORECASE) for token in self.filler_tokens]
        object.__setattr__(self, '_filler_patterns', patterns)

    def with_filler_tokens(self, extra: Tuple[str, ...]) -> 'MatchRules':
        """Copy of these rules with extra literal filler words appended."""
        if not extra:
            return self
        escaped = tuple(re.escape(token) for token in extra)
        return MatchRules(
            numeric_prefix=self.numeric_prefix,
            extension=self.extension,
            bracketed=self.bracketed,
            filler_tokens=self.filler_tokens + escaped,
        )

    def extract_number(self, name: str) -> Optional[int]:
        """Leading track number of a filename, or None."""
        m = self.numeric_prefix.match(name)
        return int(m.group(1)) if m else None

    def normalize_stem(self, name: str) -> str:
        """
        Reduce a filename to a comparable stem.

        "Nightfall (Radio Edit).mp3" and "nightfall remix.wav" both become
        "nightfall".
        """
        s = self.extension.sub('', name)
        s = self.bracketed.sub('', s)
        for pattern in self._filler_patterns:
            s = pattern.sub('', s)
        s = strip_diacritics(s.lower())
        s = NON_ALNUM_PATTERN.sub(' ', s)
        return WHITESPACE_PATTERN.sub(' ', s.strip())

    def key_number(self, key: str) -> Optional[int]:
        return self.extract_number(final_segment(key))

    def key_stem(self, key: str) -> str:
        return self.normalize_stem(final_segment(key))


DEFAULT_RULES = MatchRules()


def extract_number(name: str) -> Optional[int]:
    return DEFAULT_RULES.extract_number(name)


def normalize_stem(name: str) -> str:
    return DEFAULT_RULES.normalize_stem(name)


def leading_number_sort_key(key: str):
    """
    Order keys by the leading track number of their final segment, then naturally.

    Used for manifest banks so "2 Intro" sorts before "10 Outro".
    """
    name = final_segment(key)
    number = extract_number(name)
    if number is None:
        return (1, -1, natural_sort_key(name), key)
    return (0, number, natural_sort_key(name), key)
