"""Completion cycle orchestration: trigger, aggregate, popup, apply."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from inkcomplete.completion.aggregator import AggregationResult, SuggestionAggregator
from inkcomplete.completion.period_inserter import PeriodInserter
from inkcomplete.completion.popup_state import (
    CloseReason,
    CompletionPopupState,
    PopupCommand,
    SelectionDirection,
)
from inkcomplete.completion.replacement import AppliedReplacement, ReplacementApplier
from inkcomplete.completion.settings_schema import NormalizedCompletionConfig
from inkcomplete.completion.suggestion import EditorPosition, QueryContext, Suggestion, TriggerSpan
from inkcomplete.completion.trigger import TriggerDetector

if TYPE_CHECKING:
    from inkcomplete.ui.editor_surface import EditorSurface

logger = logging.getLogger(__name__)


class CompletionController:
    def __init__(
        self,
        settings: NormalizedCompletionConfig,
        aggregator: SuggestionAggregator,
        *,
        popup: CompletionPopupState | None = None,
        applier: ReplacementApplier | None = None,
        period_inserter: PeriodInserter | None = None,
    ) -> None:
        self._settings = settings
        self.aggregator = aggregator
        self.popup = popup if popup is not None else CompletionPopupState(settings.keybindings)
        self.trigger = TriggerDetector(settings, self.popup)
        self.applier = applier if applier is not None else ReplacementApplier()
        self.period_inserter = period_inserter if period_inserter is not None else PeriodInserter()
        self._applying = False

    @property
    def settings(self) -> NormalizedCompletionConfig:
        return self._settings

    def update_settings(self, settings: NormalizedCompletionConfig) -> None:
        self._settings = settings
        self.trigger.update_settings(settings)
        self.popup.update_keybindings(settings.keybindings)
        if not settings.insert_period_after_spaces:
            self.period_inserter.cancel_insert_period()

    # ---------- trigger cycle ----------

    def on_trigger(
        self,
        editor: "EditorSurface",
        cursor: EditorPosition | None = None,
        *,
        has_file: bool = True,
        manual: bool = False,
    ) -> AggregationResult | None:
        if self._applying:
            return None
        cursor = cursor if cursor is not None else editor.get_cursor()
        # Editors without an associated file only complete on request.
        manual = manual or not has_file

        info = self.trigger.on_trigger(editor, cursor, manual=manual)
        if info is None:
            self.popup.close(CloseReason.INVALIDATED)
            return None

        context = QueryContext(
            query=info.query,
            separator_char=info.separator_char,
            start=info.start,
            end=info.end,
            editor=editor,
            has_file=has_file,
        )
        result = self.aggregator.aggregate(context, self._settings)
        if result is None:
            self.popup.close(CloseReason.EMPTY)
            return None

        self.popup.open(
            result.suggestions,
            TriggerSpan(result.anchor_start, info.end),
            auto_focus=self._settings.auto_focus,
        )
        return result

    def request_completion(self, editor: "EditorSurface") -> AggregationResult | None:
        self.popup.consume_just_closed()
        return self.on_trigger(editor, manual=True)

    # ---------- popup commands ----------

    def navigate(self, direction: SelectionDirection) -> int:
        return self.popup.navigate(direction)

    def dismiss(self) -> bool:
        return self.popup.close(CloseReason.DISMISSED)

    def apply_selected(self, editor: "EditorSurface") -> AppliedReplacement | None:
        suggestion = self.popup.selected()
        if suggestion is None:
            return None
        return self.apply_suggestion(editor, suggestion)

    def apply_suggestion(self, editor: "EditorSurface", suggestion: Suggestion) -> AppliedReplacement | None:
        span = self.popup.span
        if span is None:
            return None

        self._applying = True
        try:
            applied = self.applier.apply(
                editor,
                suggestion,
                span,
                snippets_enabled=self._settings.snippets_enabled,
            )
            self.popup.close(CloseReason.APPLIED)
            if self._settings.insert_space_after_complete and not applied.snippet:
                cursor = editor.get_cursor()
                editor.replace_range(" ", cursor)
                editor.set_cursor(cursor.with_ch(cursor.ch + 1))
        finally:
            self._applying = False

        self.period_inserter.cancel_insert_period()
        if self._settings.insert_period_after_spaces and self._settings.insert_space_after_complete:
            self.period_inserter.allow_insert_period()
        return applied

    def reject_selected(self, editor: "EditorSurface") -> str | None:
        """Add the highlighted suggestion to the reject list and refresh the popup."""
        suggestion = self.popup.selected()
        if suggestion is None:
            return None
        reject_list = self.aggregator.reject_list
        if reject_list.add(suggestion.display_name):
            try:
                reject_list.save()
            except OSError as exc:
                logger.warning("Could not save reject list: %s", exc)
        self.on_trigger(editor, manual=True)
        return suggestion.display_name

    def handle_chord(self, editor: "EditorSurface", chord_text: str) -> bool:
        """Run the popup command bound to ``chord_text``; True when consumed."""
        command = self.popup.command_for_chord(chord_text)
        if command is None:
            return False
        if command is PopupCommand.SELECT_NEXT:
            self.navigate(SelectionDirection.NEXT)
            return True
        if command is PopupCommand.SELECT_PREVIOUS:
            self.navigate(SelectionDirection.PREVIOUS)
            return True
        if command is PopupCommand.DISMISS:
            self.dismiss()
            return True
        if command is PopupCommand.APPLY:
            # Nothing highlighted: let the key reach the editor.
            return self.apply_selected(editor) is not None
        if command is PopupCommand.REJECT:
            return self.reject_selected(editor) is not None
        return False

    # ---------- editor activity ----------

    def on_cursor_activity(self, editor: "EditorSurface") -> None:
        if self._applying:
            return
        self.period_inserter.cancel_insert_period()
        span = self.popup.span
        if span is None:
            return
        cursor = editor.get_cursor()
        if cursor.line != span.end.line or cursor.ch < span.start.ch:
            self.popup.close(CloseReason.INVALIDATED)

    def on_space_typed(self, editor: "EditorSurface") -> bool:
        if not self._settings.insert_period_after_spaces:
            return False
        inserted = self.period_inserter.attempt_insert_period(editor)
        if inserted:
            logger.debug("Inserted period after completion")
        return inserted
