"""Analysis, promotion and release of staged objects."""

import pytest

from notetune.errors import DefinitionError, ExitCode, ObjectNotStagedError, PromotionError, ReleaseError
from notetune.staging import Registry, ReleaseCoordinator, analyze, promote
from notetune.staging.release import CONFIRM_TEXT, PREFIX, analyze_note, analyze_solutions

from conftest import note_text


SOLUTIONS = """\
[ArchX86]
SOL1 = 8888880 1111111
OTHER = 1111111
"""


def coordinator(registry, answer=True, questions=None, report=None):
    def confirm(question):
        if questions is not None:
            questions.append(question)
        return answer
    return ReleaseCoordinator(registry, "ArchX86", confirm, report=report or (lambda line: None))


@pytest.fixture
def staged(tree):
    tree.write("staging", "9999990", note_text(version="1", date="09.09.2024", description="New"))
    tree.write("working", "8888880", note_text(version="1"))
    tree.write("staging", "8888880", note_text(version="2"))
    tree.write("working", "solutions", SOLUTIONS)
    tree.write("package", "solutions", SOLUTIONS)
    tree.set_sysconfig("TUNE_FOR_SOLUTIONS", "SOL1")
    return tree


class TestAnalysis:

    def test_new_note(self, staged, make_ctx):
        registry = Registry.build(make_ctx())
        lines = analyze(registry.get("9999990"), registry, "ArchX86")
        assert lines == ["Release of 9999990 Version 1 (09.09.2024)"]

    def test_deleted_note_breaks_enabled_solution(self, staged, make_ctx):
        registry = Registry.build(make_ctx())
        lines = analyze(registry.get("8888880"), registry, "ArchX86")
        assert lines == [
            "Deletion of 8888880",
            PREFIX + "Note is not enabled, no action required.",
            PREFIX + "Note is part of the currently enabled solution 'SOL1'. Release would break the solution!",
        ]

    def test_updated_note_applied_with_override(self, staged, make_ctx):
        staged.write("package", "1111111", note_text())
        staged.write("working", "1111111", note_text())
        staged.write("staging", "1111111", note_text(version="3"))
        (staged.paths.override_dir / "1111111").write_text("")
        staged.mark_applied("1111111")
        registry = Registry.build(make_ctx())
        lines = analyze_note(registry.get("1111111"))
        assert lines == [
            PREFIX + "Override file exists and might need adjustments.",
            PREFIX + "Note is enabled and must be reapplied.",
            PREFIX + "Note is part of the not-enabled solution(s) 'OTHER'",
            PREFIX + "Note is part of the currently enabled solution 'SOL1'.",
        ]

    def test_solutions(self, staged, make_ctx):
        staged.write("staging", "solutions", "[ArchX86]\nNEWSOL = 9999990\nOTHER = 1111111\n")
        registry = Registry.build(make_ctx())
        lines = analyze_solutions(registry.get("solutions"), registry.identifiers, "ArchX86")
        assert lines == [
            PREFIX + "Solution 'NEWSOL' requires releasing of '9999990' or it breaks!",
            PREFIX + "Solution 'SOL1' is currently enabled, but now deleted. Must be reverted.",
        ]

    def test_solutions_enabled_kept(self, staged, make_ctx):
        staged.write("staging", "solutions", "[ArchX86]\nSOL1 = 1111111\n")
        registry = Registry.build(make_ctx())
        lines = analyze_solutions(registry.get("solutions"), registry.identifiers, "ArchX86")
        assert lines == [PREFIX + "Solution 'SOL1' is enabled and must be re-applied."]

    def test_solutions_without_architecture(self, staged, make_ctx):
        staged.write("staging", "solutions", "[ArchPPC64LE]\nSOL1 = 1111111\n")
        registry = Registry.build(make_ctx())
        with pytest.raises(DefinitionError):
            analyze_solutions(registry.get("solutions"), registry.identifiers, "ArchX86")


class TestPromote:

    def test_moves_staged_copy(self, staged, make_ctx):
        content = staged.path("staging", "9999990").read_text()
        promote(Registry.build(make_ctx()).get("9999990"))
        assert staged.path("working", "9999990").read_text() == content
        assert not staged.path("staging", "9999990").exists()

    def test_same_content_twice(self, staged, make_ctx):
        content = staged.path("staging", "9999990").read_text()
        promote(Registry.build(make_ctx()).get("9999990"))
        staged.write("staging", "9999990", content)
        promote(Registry.build(make_ctx()).get("9999990"))
        assert staged.path("working", "9999990").read_text() == content

    def test_removes_deleted_object(self, staged, make_ctx):
        promote(Registry.build(make_ctx()).get("8888880"))
        assert not staged.path("working", "8888880").exists()
        assert not staged.path("staging", "8888880").exists()

    def test_deleted_object_both_removals_attempted(self, staged, make_ctx):
        status = Registry.build(make_ctx()).get("8888880")
        staged.path("staging", "8888880").unlink()
        with pytest.raises(PromotionError) as exc:
            promote(status)
        assert exc.value.failures.labels() == ["staging area"]
        assert not staged.path("working", "8888880").exists()


class TestRelease:

    def test_single(self, staged, make_ctx):
        questions = []
        outcome = coordinator(Registry.build(make_ctx()), questions=questions).release(["9999990"])
        assert outcome.confirmed
        assert outcome.released == ["9999990"]
        assert questions == [CONFIRM_TEXT]
        assert staged.path("working", "9999990").exists()

    def test_analysis_reported_before_question(self, staged, make_ctx):
        lines = []
        coordinator(Registry.build(make_ctx()), answer=False, report=lines.append).release(["9999990"])
        assert lines == ["Release of 9999990 Version 1 (09.09.2024)"]

    def test_declined(self, staged, make_ctx):
        outcome = coordinator(Registry.build(make_ctx()), answer=False).release(["all"])
        assert not outcome.confirmed
        assert outcome.released == []
        assert staged.path("staging", "9999990").exists()
        assert staged.path("working", "8888880").exists()

    def test_not_staged(self, staged, make_ctx):
        with pytest.raises(ObjectNotStagedError) as exc:
            coordinator(Registry.build(make_ctx())).release(["7777777"])
        assert exc.value.exit_code == ExitCode.NOT_IN_STAGING == 127

    def test_all_single_question(self, staged, make_ctx):
        questions = []
        outcome = coordinator(Registry.build(make_ctx()), questions=questions).release(["all"])
        assert questions == [CONFIRM_TEXT]
        assert outcome.released == ["8888880", "9999990"]
        assert outcome.ok
        assert staged.path("working", "9999990").exists()
        assert not staged.path("working", "8888880").exists()
        assert list(staged.paths.staging_area.iterdir()) == []

    def test_single_failure(self, staged, make_ctx):
        staged.write("package", "1000001", note_text())
        working = staged.path("working", "1000001")
        working.mkdir()
        (working / "blocker").write_text("")
        staged.write("staging", "1000001", note_text(version="2"))

        with pytest.raises(ReleaseError) as exc:
            coordinator(Registry.build(make_ctx())).release(["1000001"])
        assert exc.value.exit_code == ExitCode.RELEASE_FAILED == 128

    def test_all_continues_after_failure(self, staged, make_ctx):
        staged.write("package", "1000001", note_text())
        working = staged.path("working", "1000001")
        working.mkdir()
        (working / "blocker").write_text("")
        staged.write("staging", "1000001", note_text(version="2"))

        with pytest.raises(ReleaseError) as exc:
            coordinator(Registry.build(make_ctx())).release(["all"])
        assert exc.value.exit_code == ExitCode.RELEASE_ALL_FAILED == 126
        assert "1000001" in exc.value.message
        assert staged.path("working", "9999990").exists()
        assert not staged.path("working", "8888880").exists()

    def test_all_skips_object_gone_from_staging(self, staged, make_ctx):
        def confirm(question):
            staged.path("staging", "9999990").unlink()
            return True

        releaser = ReleaseCoordinator(Registry.build(make_ctx()), "ArchX86", confirm, report=lambda line: None)
        with pytest.raises(ReleaseError) as exc:
            releaser.release(["all"])
        assert exc.value.exit_code == ExitCode.RELEASE_ALL_FAILED
        assert exc.value.message == "Release failed for: 9999990"
        assert not staged.path("working", "9999990").exists()
        assert not staged.path("working", "8888880").exists()
