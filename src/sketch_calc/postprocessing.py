"""Post-processing for evaluation results.

Turns result entries into the marked-up strings the typesetting engine
consumes, and cleans up the text that LLM-backed providers send back.

Typeset form
------------
Each result becomes one inline-math string::

    \\(\\LARGE{<expression> = <answer>}\\)

The typesetter is configured to recognise ``\\( ... \\)`` as inline math, so
any delimiters already wrapped around the expression or the answer by a model
are stripped first.  Otherwise they would nest and render literally.

Fenced JSON
-----------
Vision models often wrap their JSON reply in a Markdown code fence even when
asked not to.  ``extract_json`` returns the body of the first fence, or the
text unchanged when there is none.
"""

import re


# ── Helpers ────────────────────────────────────────────────────────────────────

# Delimiter pairs, longest first so "$$" is tried before "$".
_DELIMITERS = (
    ("$$", "$$"),
    (r"\[", r"\]"),
    (r"\(", r"\)"),
    ("$", "$"),
)

_CODE_FENCE = re.compile(r"```(?:json|JSON)?\s*\n?(.*?)\n?\s*```", re.DOTALL)


def strip_math_delimiters(text: str) -> str:
    """Remove one layer of math delimiters wrapped around the whole string.

    Delimiters that only enclose part of the string are left alone, so
    ``"$a$ + $b$"`` and ``"\\(a\\) + \\(b\\)"`` are returned unchanged.
    """
    stripped = text.strip()
    for opening, closing in _DELIMITERS:
        if (
            len(stripped) >= len(opening) + len(closing)
            and stripped.startswith(opening)
            and stripped.endswith(closing)
        ):
            inner = stripped[len(opening):-len(closing)]
            if opening in inner or closing in inner:
                continue
            return inner.strip()
    return stripped


# ── Public API ─────────────────────────────────────────────────────────────────


def to_latex(expression: str, answer: str) -> str:
    """Format one result as the inline-math string queued for typesetting."""
    expression = strip_math_delimiters(expression)
    answer = strip_math_delimiters(answer)
    return f"\\(\\LARGE{{{expression} = {answer}}}\\)"


def extract_json(text: str) -> str:
    """Return the body of the first fenced code block, or ``text`` stripped."""
    match = _CODE_FENCE.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()
