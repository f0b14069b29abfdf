"""Non-standard tag discovery and closing-tag resolution."""

from tags.resolver import NonStandardTagResolver, create_closing_tag, parse_tag_line

__all__ = ["NonStandardTagResolver", "create_closing_tag", "parse_tag_line"]
