"""
Command Parser Module

Splits a raw command line into a command name and its arguments.

Author: NEOTERMINAL Team
Version: 1.0.0
"""

from dataclasses import dataclass, field
from typing import Optional, List


QUOTE_CHARS = ('"', "'")


@dataclass
class ParsedCommand:
    """A parsed command line."""
    command: str
    args: List[str] = field(default_factory=list)
    raw: str = ""


class CommandParser:
    """
    Parses shell command lines.

    Handles:
    - Whitespace-separated words
    - Single- and double-quoted strings (whitespace inside is kept)
    - Backslash escapes, inside or outside quotes

    A quote left open at the end of the line swallows the rest of the line.
    Empty quotes produce no token.

    Example:
        >>> CommandParser().tokenize('cp "my file.txt" dest')
        ['cp', 'my file.txt', 'dest']
    """

    def parse(self, line: str) -> Optional[ParsedCommand]:
        """
        Parse a command line.

        Returns:
            ParsedCommand, or None if the line holds no tokens
        """
        tokens = self.tokenize(line)

        if not tokens:
            return None

        return ParsedCommand(command=tokens[0], args=tokens[1:], raw=line)

    def tokenize(self, line: str) -> List[str]:
        """Convert a line into words."""
        tokens: List[str] = []
        current = ""
        in_quote: Optional[str] = None
        i = 0

        while i < len(line):
            char = line[i]

            # Escape: next character is literal
            if char == '\\' and i + 1 < len(line):
                current += line[i + 1]
                i += 2
                continue

            if char in QUOTE_CHARS and in_quote is None:
                in_quote = char
                i += 1
                continue

            if char == in_quote:
                in_quote = None
                i += 1
                continue

            if in_quote:
                current += char
                i += 1
                continue

            if char.isspace():
                if current:
                    tokens.append(current)
                    current = ""
                i += 1
                continue

            current += char
            i += 1

        if current:
            tokens.append(current)

        return tokens
