"""Post-processing for model replies before they are typeset.

Normalises LaTeX math delimiters so that pandoc's ``tex_math_dollars``
extension picks up every formula regardless of which notation the model
chose, and makes multi-line display math typeset as separate lines.

Conversion table
----------------
``\\( ... \\)``  →  ``$ ... $``     (inline math)
``\\[ ... \\]``  →  ``$$ ... $$``  (display math)

Consecutive single-line block merging
--------------------------------------
Models often write each step of a calculation as its own ``$$expr$$`` line.
Such runs are merged into one ``$$\\n...\\n$$`` block.  A blank line between
two blocks is treated as intentional separation and prevents merging.

Multi-line display blocks
-------------------------
LaTeX's display math ignores ``\\\\`` outside an environment, so a ``$$``
block with several content lines is wrapped in ``gathered`` and every line
but the last is terminated with ``\\\\``.  Blocks that already open an
environment (``\\begin{...}``) are left alone.
"""

import re


# ── Helpers ────────────────────────────────────────────────────────────────────

# A complete single-line display block: $$<content>$$ filling the whole line
_SINGLE_LINE_DISPLAY = re.compile(r"^\$\$(.+)\$\$$")

_MULTI_LINE_DISPLAY = re.compile(r"^\$\$\n([\s\S]*?)\n\$\$$", re.MULTILINE)


def _merge_consecutive_display_blocks(text: str) -> str:
    """Merge adjacent single-line ``$$...$$`` blocks into one multi-line block."""
    lines = text.split("\n")
    result: list[str] = []
    i = 0
    while i < len(lines):
        m = _SINGLE_LINE_DISPLAY.match(lines[i])
        if not m:
            result.append(lines[i])
            i += 1
            continue

        run = [m.group(1).strip()]
        j = i + 1
        while j < len(lines):
            m2 = _SINGLE_LINE_DISPLAY.match(lines[j])
            if not m2:
                break
            run.append(m2.group(1).strip())
            j += 1

        if len(run) == 1:
            result.append(lines[i])
        else:
            result.append("$$")
            result.extend(run)
            result.append("$$")
        i = j
    return "\n".join(result)


def _wrap_multiline_display(match: re.Match) -> str:
    """Callback for re.sub: typeset a multi-line $$ block line by line."""
    inner = match.group(1)
    if r"\begin{" in inner:
        return match.group(0)

    lines = [line.rstrip() for line in inner.split("\n")]
    content = [line for line in lines if line.strip()]
    if len(content) <= 1:
        return match.group(0)

    terminated = [
        line if line.endswith(r"\\") else line + r" \\" for line in content[:-1]
    ]
    last = content[-1]
    if last.endswith(r"\\"):
        last = last[:-2].rstrip()
    body = "\n".join(terminated + [last])
    return "$$\n\\begin{gathered}\n" + body + "\n\\end{gathered}\n$$"


# ── Public API ─────────────────────────────────────────────────────────────────


def normalize_latex_delimiters(text: str) -> str:
    """Run the full LaTeX delimiter normalisation pipeline.

    1. ``\\( ... \\)`` → ``$ ... $``    (inline math)
    2. ``\\[ ... \\]`` → ``$$ ... $$``  (display math)
    3. Consecutive single-line ``$$...$$`` blocks → single ``$$\\n...\\n$$``
    4. Multi-line ``$$ ... $$`` blocks → ``gathered`` with ``\\\\`` terminators

    Whitespace immediately inside the delimiters is preserved, so
    ``\\( x \\)`` becomes ``$ x $`` rather than ``$x$``.  Applying the
    pipeline twice gives the same result as applying it once.
    """
    text = re.sub(r"\\\[(.*?)\\\]", r"$$\1$$", text, flags=re.DOTALL)
    text = re.sub(r"\\\((.*?)\\\)", r"$\1$", text, flags=re.DOTALL)
    text = _merge_consecutive_display_blocks(text)
    text = _MULTI_LINE_DISPLAY.sub(_wrap_multiline_display, text)
    return text
