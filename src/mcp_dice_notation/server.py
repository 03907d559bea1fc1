from __future__ import annotations

from typing import Any

import structlog
from mcp.server.fastmcp import FastMCP

from .config import get_settings
from .dice import roll
from .errors import DiceError
from .logging import setup_logging
from .models import Bounded
from .parser import parse, to_notation


log = structlog.get_logger(__name__)

mcp = FastMCP(get_settings().server_name)


@mcp.tool()
def roll_dice(notation: str) -> dict[str, Any]:
    """Roll dice written in compact notation.

    Examples: '2d6+3', 'a20+5' (advantage), 's20' (disadvantage),
    '4d6r' (reroll 1s), '3d6!' (exploding), 'a20+10+s2d10r2!-3'.

    Output: structured JSON with audit details + explanation

    Raises a hard error (exception) on invalid input.
    """

    try:
        return roll(notation)
    except DiceError as e:
        log.info("server.tool.error", tool="roll_dice", notation=notation, error=str(e))
        # Fail-fast: surface stable error codes in the message.
        raise ValueError(str(e)) from None


@mcp.tool()
def parse_dice(notation: str) -> dict[str, Any]:
    """Parse dice notation without rolling and describe each term."""

    try:
        expression = parse(notation)
    except DiceError as e:
        log.info("server.tool.error", tool="parse_dice", notation=notation, error=str(e))
        raise ValueError(str(e)) from None

    terms = []
    for term in expression.terms:
        bounded = isinstance(term.value, Bounded)
        terms.append(
            {
                "count": term.count,
                "kind": "bounded" if bounded else "fixed",
                "value": term.value.magnitude,
                "invert": term.invert,
                "advantage": term.advantage,
                "disadvantage": term.disadvantage,
                "reroll": term.reroll,
                "explode": term.explode,
            }
        )

    return {
        "input": notation,
        "normalized_expression": to_notation(expression),
        "terms": terms,
    }


def run() -> None:
    setup_logging(get_settings())
    # Default transport is stdio, which works well for MCP clients.
    mcp.run()


if __name__ == "__main__":
    run()
