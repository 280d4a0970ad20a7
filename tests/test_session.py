"""Tests for the editing session: edits, markers, undo/redo, commit and discard."""

import asyncio
from pathlib import Path

import pytest

from voxedit.core.cache import AnalysisCache
from voxedit.core.editor import AudioEditor
from voxedit.core.segment import Marker
from voxedit.core.session import EditSession, Original, Pending


@pytest.fixture
def session(backend) -> EditSession:
    return EditSession(
        "memo.wav",
        10.0,
        [Marker(5.0), Marker(1.0), Marker(2.5)],
        editor=AudioEditor(backend=backend),
        cache=AnalysisCache(backend=backend),
    )


def _times(session):
    return [round(m.time, 6) for m in session.markers]


class TestEdits:
    def test_initial_state(self, session) -> None:
        assert isinstance(session.current, Original)
        assert session.selection == (0.0, 10.0)
        assert _times(session) == [1.0, 2.5, 5.0]
        assert not session.has_changes

    def test_cut_updates_everything(self, session) -> None:
        session.select(2.0, 3.0)
        result = asyncio.run(session.cut())

        assert result.success
        assert isinstance(session.current, Pending)
        assert session.audio_file.name == "memo_edited_1.wav"
        assert session.duration == pytest.approx(9.0)
        assert _times(session) == [1.0, 4.0]
        assert session.selection == (0.0, pytest.approx(9.0))
        assert session.history.undo_description == "Cut"
        assert session.has_changes

    def test_trim(self, session) -> None:
        result = asyncio.run(session.trim(2.0, 6.0))
        assert result.success
        assert session.duration == pytest.approx(4.0)
        assert _times(session) == [0.5, 3.0]

    def test_refused_edit_leaves_no_history(self, session, backend) -> None:
        result = asyncio.run(session.trim(0.0, 10.0))
        assert not result.success
        assert not session.can_undo
        assert backend.writes == []

    def test_failed_rewrite_pops_snapshot(self, session, backend) -> None:
        """A failed rewrite leaves the session exactly as it was."""
        backend.fail_writes = True
        result = asyncio.run(session.cut(2.0, 3.0))
        assert not result.success
        assert not session.can_undo
        assert session.audio_file == Path("memo.wav")
        assert session.duration == 10.0
        assert _times(session) == [1.0, 2.5, 5.0]

    def test_edits_run_in_order_on_the_latest_file(self, session, backend) -> None:
        async def run():
            return await asyncio.gather(session.cut(2.0, 3.0), session.cut(5.0, 6.0))

        first, second = asyncio.run(run())
        assert first.success and second.success
        assert backend.writes[1][1] == first.output_file
        assert session.duration == pytest.approx(8.0)
        assert session.history.undo_count == 2

    def test_new_file_is_analyzed_fresh(self, session, backend) -> None:
        asyncio.run(session.waveform())
        asyncio.run(session.cut(2.0, 3.0))
        pyramid = asyncio.run(session.waveform())
        assert backend.decode_calls == 2
        assert session.cache.peek_waveform(session.audio_file) is pyramid


class TestSilenceRemoval:
    def test_highlight_and_remove_selected(self, session) -> None:
        ranges = asyncio.run(session.highlight_silence())
        assert len(ranges) == 2
        assert all(r.included for r in ranges)

        ranges[1].toggle()
        result = asyncio.run(session.remove_silence(ranges))

        assert result.success
        assert result.removed_ranges_count == 1
        assert session.duration == pytest.approx(8.9)
        assert _times(session) == [1.0, 3.9]
        assert session.history.undo_description == "Remove Silence"

    def test_nothing_selected_is_a_no_op(self, session) -> None:
        ranges = asyncio.run(session.highlight_silence())
        for r in ranges:
            r.toggle()
        result = asyncio.run(session.remove_silence(ranges))
        assert result.success
        assert result.removed_ranges_count == 0
        assert not session.can_undo
        assert isinstance(session.current, Original)


class TestMarkers:
    def test_add_and_undo(self, session) -> None:
        marker = session.add_marker(3.0, label="intro")
        assert marker in session.markers
        assert _times(session) == [1.0, 2.5, 3.0, 5.0]
        assert session.history.undo_description == "Add Marker"

        session.undo()
        assert marker not in session.markers

    def test_marker_clamped_to_duration(self, session) -> None:
        marker = session.add_marker(42.0)
        assert marker.time == 10.0

    def test_remove(self, session) -> None:
        target = session.markers[0]
        assert session.remove_marker(target.id)
        assert target not in session.markers
        assert not session.remove_marker("missing")


class TestUndoRedo:
    def test_undo_then_redo(self, session) -> None:
        asyncio.run(session.cut(2.0, 3.0))
        edited = session.audio_file

        snapshot = session.undo()
        assert snapshot.description == "Cut"
        assert isinstance(session.current, Original)
        assert session.duration == 10.0
        assert _times(session) == [1.0, 2.5, 5.0]
        assert session.can_redo

        session.redo()
        assert session.audio_file == edited
        assert session.duration == pytest.approx(9.0)
        assert _times(session) == [1.0, 4.0]
        assert session.can_undo
        assert not session.can_redo

    def test_undo_and_redo_when_empty(self, session) -> None:
        assert session.undo() is None
        assert session.redo() is None

    def test_new_edit_after_undo_discards_redo_file(self, session, backend) -> None:
        asyncio.run(session.cut(2.0, 3.0))
        abandoned = session.audio_file
        session.undo()
        asyncio.run(session.cut(5.0, 6.0))
        assert not session.can_redo
        assert backend.removed_files == [abandoned]


class TestEndingSession:
    def test_commit(self, session, backend) -> None:
        asyncio.run(session.cut(2.0, 3.0))
        intermediate = session.audio_file
        asyncio.run(session.trim(1.0, 9.0))

        result = session.commit()
        assert result.changed
        assert result.audio_file.name == "memo_edited_2.wav"
        assert result.duration == pytest.approx(8.0)
        assert [round(m.time, 6) for m in result.markers] == [0.0, 3.0]
        assert backend.removed_files == [intermediate]
        assert not session.can_undo
        assert isinstance(session.current, Original)
        assert not session.has_changes

    def test_discard(self, session, backend) -> None:
        asyncio.run(session.cut(2.0, 3.0))
        pending = session.audio_file

        session.discard()
        assert session.audio_file == Path("memo.wav")
        assert session.duration == 10.0
        assert _times(session) == [1.0, 2.5, 5.0]
        assert not session.can_undo
        assert backend.removed_files == [pending]


class TestRangesOutsideRecording:
    """Explicit edit ranges are clamped to the recording like a selection."""

    def test_trim_past_end(self, session) -> None:
        result = asyncio.run(session.trim(1.0, 100.0))
        assert result.success
        assert session.duration == pytest.approx(9.0)
        assert _times(session) == [0.0, 1.5, 4.0]

    def test_cut_past_end(self, session) -> None:
        result = asyncio.run(session.cut(8.0, 12.0))
        assert result.success
        assert session.duration == pytest.approx(8.0)
        assert _times(session) == [1.0, 2.5, 5.0]

    def test_cut_before_start(self, session) -> None:
        result = asyncio.run(session.cut(-1.0, 1.5))
        assert result.success
        assert session.duration == pytest.approx(8.5)
        assert _times(session) == [1.0, 3.5]
