from __future__ import annotations

import re
from dataclasses import dataclass

from inkcomplete.completion.settings_schema import NormalizedCompletionConfig
from inkcomplete.completion.suggestion import EditorPosition, QueryContext, Suggestion


@dataclass(frozen=True, slots=True)
class CalloutType:
    name: str
    icon: str
    color: str


CALLOUT_TYPES: tuple[CalloutType, ...] = (
    CalloutType("note", "lucide-pencil", "#448aff"),
    CalloutType("abstract", "lucide-clipboard-list", "#00b0ff"),
    CalloutType("info", "lucide-info", "#00b8d4"),
    CalloutType("todo", "lucide-check-circle-2", "#00b8d4"),
    CalloutType("tip", "lucide-flame", "#00bfa5"),
    CalloutType("success", "lucide-check", "#00c853"),
    CalloutType("question", "lucide-help-circle", "#64dd17"),
    CalloutType("warning", "lucide-alert-triangle", "#ff9100"),
    CalloutType("failure", "lucide-x", "#ff5252"),
    CalloutType("danger", "lucide-zap", "#ff1744"),
    CalloutType("bug", "lucide-bug", "#f50057"),
    CalloutType("example", "lucide-list", "#7c4dff"),
    CalloutType("quote", "lucide-quote", "#9e9e9e"),
)

# "> [!no" up to the cursor, any quote nesting depth.
_HEADER_BEFORE_CURSOR_RE = re.compile(r"^(\s*(?:>\s*)+)\[!([^\]\s]*)$")
_HEADER_REST_RE = re.compile(r"^[^\]\s]*\]")


class CalloutProvider:
    """Completes callout headers and takes precedence over word completion."""

    blocks_all_other_providers = True
    name = "callout"

    def __init__(self, callout_types: tuple[CalloutType, ...] = CALLOUT_TYPES) -> None:
        self._types = callout_types

    def get_suggestions(self, context: QueryContext, settings: NormalizedCompletionConfig) -> list[Suggestion]:
        if not settings.callout_provider_enabled or context.editor is None:
            return []

        cursor = context.end
        line_text = context.editor.get_line(cursor.line)
        match = _HEADER_BEFORE_CURSOR_RE.match(line_text[: cursor.ch])
        if match is None:
            return []

        typed = match.group(2).lower()
        start = EditorPosition(cursor.line, match.end(1))
        after = line_text[cursor.ch :]
        rest = _HEADER_REST_RE.match(after)
        end_ch = cursor.ch + (rest.end() if rest else 0)
        tail = after[rest.end():] if rest else after
        spacer = "" if tail[:1].isspace() else " "
        end = EditorPosition(cursor.line, end_ch)

        out: list[Suggestion] = []
        for callout in self._types:
            if not callout.name.startswith(typed):
                continue
            out.append(
                Suggestion(
                    display_name=callout.name,
                    replacement=f"[!{callout.name}]{spacer}",
                    override_start=start,
                    override_end=end,
                    icon=callout.icon,
                    color=callout.color,
                    preview=callout.name.capitalize(),
                )
            )
        return out
