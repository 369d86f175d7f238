"""
    Tokenizer for record data in presentation (zone file) form

    Parentheses only continue a record over several lines, so they are
    dropped along with comments and line breaks - the parser sees a flat
    stream of words.

    >>> t = Tokenizer('''A 5 2 3600 ( ; comment
    ...     20040101000000 20031201000000 12345 example.com.
    ...     AQID )''')
    >>> t.get("type")
    'A'
    >>> t.remaining()
    ['5', '2', '3600', '20040101000000', '20031201000000', '12345', 'example.com.', 'AQID']
    >>> t.has_more()
    False
    >>> t.get("signer")
    Traceback (most recent call last):
    ...
    dnssig.lex.LexError: Missing signer
    >>> Tokenizer.from_words(["3600(", "AQ", "ID)"]).remaining()
    ['3600', 'AQ', 'ID']
"""

from __future__ import annotations

import sys
from collections import deque
from typing import Iterable, Iterator, List

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self


class LexError(ValueError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Missing {field}")
        self.field = field


class Tokenizer:
    commentchars = {";"}
    parens = {"(", ")"}

    def __init__(self, text: str) -> None:
        self.words = deque(self._split(text))
        return

    @classmethod
    def from_words(cls, words: Iterable[str]) -> Self:
        """Tokenizer over words already split by a zone parser"""
        return cls(" ".join(words))

    def _split(self, text: str) -> Iterator[str]:
        for line in text.splitlines():
            for c in self.commentchars:
                line = line.split(c, 1)[0]
            for p in self.parens:
                line = line.replace(p, " ")
            yield from line.split()

    def has_more(self) -> bool:
        return bool(self.words)

    def get(self, field: str) -> str:
        """Next word

        Args:
            field: name of the field being read (used in errors)

        Raises:
            LexError: if there are no more words
        """
        if not self.words:
            raise LexError(field)
        return self.words.popleft()

    def remaining(self) -> List[str]:
        """Consume and return all remaining words"""
        words = list(self.words)
        self.words.clear()
        return words


if __name__ == "__main__":
    import doctest, sys

    sys.exit(0 if doctest.testmod(optionflags=doctest.IGNORE_EXCEPTION_DETAIL).failed == 0 else 1)
