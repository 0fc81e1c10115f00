"""Chat message limits and formatting."""

# Discord rejects messages longer than this many characters.
MESSAGE_LIMIT = 2000

# Room for the ``` fences around an escaped chunk.
FENCE_ALLOWANCE = 6

BARRIER_REACTION = "\N{WHITE HEAVY CHECK MARK}"
ASIDE_REACTION = "\N{SPEAKER WITH CANCELLATION STROKE}"


def split_message(text: str, limit: int = MESSAGE_LIMIT, escape: bool = False) -> list[str]:
    """Split *text* into chunks that each fit in one message.

    With ``escape`` every chunk is wrapped in a ``` code block, which shows
    LaTeX source verbatim instead of letting Discord's markdown eat it.
    """
    size = limit - FENCE_ALLOWANCE
    chunks = [text[i:i + size] for i in range(0, len(text), size)]
    if escape:
        chunks = [f"```{chunk}```" for chunk in chunks]
    return chunks
