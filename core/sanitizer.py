"""
core/sanitizer.py

Cleans raw provider output before it reaches the parent.

Backends sometimes decorate their answers with "AI insights" panels, capability
banners or meta-commentary about how the answer was produced. The sanitizer removes
those with an ordered list of regex rules, normalizes list bullets to "• ", collapses
runs of blank lines and trims the result.

Sanitizing is idempotent: running the rules on already sanitized text changes nothing.
"""

import re
from typing import Pattern, Sequence, Tuple

_FLAGS = re.IGNORECASE

# Emoji-prefixed insight panels run until the next blank line or the end of the text.
_PANEL_HEADERS = (
    r"🎯\s*\*\*AI Insights:\*\*",
    r"🧠\s*\*\*Advanced AI Analysis\*\*",
    r"📈\s*\*\*AI Pattern Recognition:.*?\*\*",
    r"🔬\s*\*\*Evidence-Based Intelligence\*\*",
    r"💡\s*\*\*Cognitive Processing Framework\*\*",
)

_META_SENTENCES = (
    r"This guidance combines evidence-based practices with advanced AI analysis\.?",
    r"Recommendations are personalized based on your specific situation\.?",
    r"Multiple factors have been considered for comprehensive support\.?",
    r"\*\*Priority response\*\* due to urgency level detected\.?",
)

REMOVAL_RULES: Sequence[Pattern] = tuple(
    [re.compile(header + r"[\s\S]*?(?=\n\n|\n$|$)", _FLAGS) for header in _PANEL_HEADERS]
    + [
        re.compile(r"\*\*🧠 INTELLIGENT.*?\*\*", _FLAGS),
        re.compile(r"\*\*📈 AI Pattern Recognition.*?\*\*", _FLAGS),
        re.compile(r"### Additional Context ###", _FLAGS),
    ]
    + [re.compile(sentence, _FLAGS) for sentence in _META_SENTENCES]
    + [
        re.compile(r"^\*\*Enhanced with Latest Research & AI Analysis\*\*\s*", _FLAGS),
        re.compile(r"^\*\*Advanced AI Analysis\*\*\s*", _FLAGS),
    ]
)

# A single "*", "-" or "•" opening a line is a list bullet; "**" opens bold text.
BULLET_RULE: Tuple[Pattern, str] = (re.compile(r"^[ \t]*(?:[-•]|\*(?!\*))[ \t]*", re.MULTILINE), "• ")

BLANK_LINES_RULE: Tuple[Pattern, str] = (re.compile(r"\n{3,}"), "\n\n")


class ResponseSanitizer:
    """Applies the removal, bullet and whitespace rules to provider output."""

    def sanitize(self, raw: str) -> str:
        text = (raw or "").replace("\r\n", "\n").strip()

        # A removal can expose a new match (a header moved to the start of the text,
        # or a sentence rejoined around a removed one), so repeat until stable.
        previous = None
        while text != previous:
            previous = text
            for rule in REMOVAL_RULES:
                text = rule.sub("", text)
            text = text.strip()

        text = "\n".join(line.rstrip() for line in text.split("\n"))

        pattern, replacement = BULLET_RULE
        text = pattern.sub(replacement, text)
        pattern, replacement = BLANK_LINES_RULE
        text = pattern.sub(replacement, text)
        return text.strip()


def sanitize(raw: str) -> str:
    return ResponseSanitizer().sanitize(raw)
