"""Quote- and bracket-aware scanning of formula text."""

OPENING_BRACKETS = "(["
CLOSING_BRACKETS = ")]"
QUOTES = "\"'"


def split_arguments(text: str) -> list[str]:
    """
    Split the inner text of a call into its top-level arguments.

    Commas separate arguments only outside quoted literals and at bracket
    depth zero, so ``'"a, b", g(1, 2)'`` yields two arguments with the nested
    call text left untouched.

    Args:
        text: Everything between the outermost parentheses of a call

    Returns:
        Trimmed argument strings; an empty list for blank input
    """
    args: list[str] = []
    current: list[str] = []
    quote: str = ""
    depth = 0
    escaped = False

    for char in text:
        if quote:
            current.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = ""
            continue

        if char in QUOTES:
            quote = char
        elif char in OPENING_BRACKETS:
            depth += 1
        elif char in CLOSING_BRACKETS:
            depth -= 1
        elif char == "," and depth == 0:
            args.append("".join(current).strip())
            current = []
            continue
        current.append(char)

    last = "".join(current).strip()
    if last:
        args.append(last)

    return args


def find_closing_bracket(text: str, open_pos: int) -> int:
    """
    Find the bracket that closes the one at ``open_pos``.

    Brackets inside quoted literals are ignored. ``(`` and ``[`` share one
    depth counter.

    Returns:
        Index of the closing bracket, or -1 when it is missing
    """
    quote = ""
    depth = 0
    escaped = False

    for pos in range(open_pos, len(text)):
        char = text[pos]
        if quote:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = ""
            continue

        if char in QUOTES:
            quote = char
        elif char in OPENING_BRACKETS:
            depth += 1
        elif char in CLOSING_BRACKETS:
            depth -= 1
            if depth == 0:
                return pos

    return -1


def is_wrapped(text: str) -> bool:
    """Check whether the whole text is enclosed in one pair of parentheses."""
    return text.startswith("(") and find_closing_bracket(text, 0) == len(text) - 1
