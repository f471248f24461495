from inkcomplete.completion.period_inserter import PeriodInserter
from inkcomplete.completion.suggestion import EditorPosition
from inkcomplete.ui.editor_surface import TextBufferSurface


def test_not_allowed_by_default():
    editor = TextBufferSurface("hello ", EditorPosition(0, 6))
    assert not PeriodInserter().attempt_insert_period(editor)
    assert editor.get_line(0) == "hello "


def test_replaces_trailing_space_with_period():
    editor = TextBufferSurface("say hello ", EditorPosition(0, 10))
    inserter = PeriodInserter()
    inserter.allow_insert_period()
    assert inserter.attempt_insert_period(editor)
    assert editor.get_line(0) == "say hello. "
    assert editor.get_cursor() == EditorPosition(0, 11)
    assert not inserter.can_insert_period


def test_cancel_prevents_insert():
    editor = TextBufferSurface("hello ", EditorPosition(0, 6))
    inserter = PeriodInserter()
    inserter.allow_insert_period()
    inserter.cancel_insert_period()
    assert not inserter.attempt_insert_period(editor)


def test_requires_single_trailing_space():
    editor = TextBufferSurface("hello  ", EditorPosition(0, 7))
    inserter = PeriodInserter()
    inserter.allow_insert_period()
    assert not inserter.attempt_insert_period(editor)
    assert editor.get_line(0) == "hello  "
