"""
Tests for the command line interface.
"""

import json

import pytest

from mentormatch import __version__
from mentormatch.app import main
from mentormatch.store import SQLiteStore

ENV_VARS = (
    "MENTORMATCH_BACKEND",
    "MENTORMATCH_DB",
    "MENTORMATCH_LOG_LEVEL",
    "MENTORMATCH_LOG_DIR",
    "SUPABASE_URL",
    "SUPABASE_KEY",
)


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    """Run every command from an empty directory with no settings in the environment."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


@pytest.fixture
def mentee_file(tmp_path, cardiology_mentee_record):
    return write_json(tmp_path / "mentee.json", cardiology_mentee_record)


@pytest.fixture
def mentors_file(tmp_path, cardiology_mentor_record, unrelated_mentor_record):
    return write_json(tmp_path / "mentors.json", [cardiology_mentor_record, unrelated_mentor_record])


class TestBasics:
    def test_version(self, capsys):
        main(["--version"])
        assert capsys.readouterr().out.strip() == __version__

    def test_no_command_prints_help(self, capsys):
        main([])
        assert "usage: mentormatch" in capsys.readouterr().out

    def test_missing_input_file(self, tmp_path):
        with pytest.raises(SystemExit, match="Input file not found"):
            main(["validate", "--role", "mentee", "--input", str(tmp_path / "nope.json")])

    def test_invalid_json(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{not json", encoding="utf-8")
        with pytest.raises(SystemExit, match="Invalid JSON"):
            main(["validate", "--role", "mentee", "--input", str(bad)])

    def test_unknown_backend(self, monkeypatch, mentee_file):
        monkeypatch.setenv("MENTORMATCH_BACKEND", "postgres")
        with pytest.raises(SystemExit, match="Unknown backend"):
            main(["validate", "--role", "mentee", "--input", mentee_file])

    def test_unknown_log_level(self, monkeypatch, mentee_file):
        monkeypatch.setenv("MENTORMATCH_LOG_LEVEL", "verbose")
        with pytest.raises(SystemExit, match="Unknown log level 'VERBOSE'"):
            main(["validate", "--role", "mentee", "--input", mentee_file])

    def test_log_level_is_case_insensitive(self, capsys, monkeypatch, mentee_file):
        monkeypatch.setenv("MENTORMATCH_LOG_LEVEL", "debug")
        main(["validate", "--role", "mentee", "--input", mentee_file])
        assert capsys.readouterr().out.strip() == "Valid"


class TestValidateCommand:
    def test_valid(self, capsys, mentee_file):
        main(["validate", "--role", "mentee", "--input", mentee_file])
        assert capsys.readouterr().out.strip() == "Valid"

    def test_invalid_exits_2(self, capsys, tmp_path, cardiology_mentor_record):
        cardiology_mentor_record["degree"] = "phd"
        path = write_json(tmp_path / "mentor.json", cardiology_mentor_record)

        with pytest.raises(SystemExit) as exc_info:
            main(["validate", "--role", "mentor", "--input", path])

        assert exc_info.value.code == 2
        out = capsys.readouterr().out
        assert "Invalid:" in out
        assert "degree" in out


class TestScoreCommand:
    def test_json_breakdown(self, capsys, tmp_path, mentee_file, cardiology_mentor_record):
        mentor_file = write_json(tmp_path / "mentor.json", cardiology_mentor_record)

        main(["score", "--mentee", mentee_file, "--mentor", mentor_file, "--json"])

        result = json.loads(capsys.readouterr().out)
        assert result["score"] == 47
        assert result["mentor_id"] == "mentor-1"
        assert result["factors"]["specialty"] == 9
        assert set(result["factors"]) == {
            "specialty", "helpAreas", "communication", "background", "degreeTrack", "mentorshipStyle", "timeline",
        }

    def test_text_breakdown(self, capsys, tmp_path, mentee_file, cardiology_mentor_record):
        mentor_file = write_json(tmp_path / "mentor.json", cardiology_mentor_record)

        main(["score", "--mentee", mentee_file, "--mentor", mentor_file])

        out = capsys.readouterr().out
        assert "1. Ana Reyes (mentor-1) score=47" in out
        assert "factors: specialty=9" in out


class TestMatchCommand:
    def test_against_file_pool(self, capsys, mentee_file, mentors_file, tmp_path):
        main(["match", "--mentee", mentee_file, "--mentors", mentors_file])

        out = capsys.readouterr().out
        assert "Top 1 mentors:" in out
        assert "Ana Reyes (mentor-1) score=47" in out
        assert "Okafor" not in out
        # A file pool never touches the database
        assert not (tmp_path / "data").exists()

    def test_json_output(self, capsys, mentee_file, mentors_file):
        main(["match", "--mentee", mentee_file, "--mentors", mentors_file, "--json"])

        results = json.loads(capsys.readouterr().out)
        assert [r["score"] for r in results] == [47]

    def test_no_matches(self, capsys, tmp_path, mentee_file, unrelated_mentor_record):
        pool = write_json(tmp_path / "pool.json", [unrelated_mentor_record])

        main(["match", "--mentee", mentee_file, "--mentors", pool])

        assert "No matches found." in capsys.readouterr().out

    def test_needs_a_mentee(self, tmp_path):
        with pytest.raises(SystemExit, match="Provide --mentee or --mentee-id"):
            main(["match", "--db", str(tmp_path / "m.db")])

    def test_file_pool_needs_mentee_file(self, mentors_file):
        with pytest.raises(SystemExit, match="Provide --mentee when scoring against --mentors"):
            main(["match", "--mentors", mentors_file, "--mentee-id", "mentee-1"])

    def test_unknown_mentee_id(self, tmp_path):
        with pytest.raises(SystemExit, match="Mentee not found"):
            main(["match", "--mentee-id", "nobody", "--db", str(tmp_path / "m.db")])


class TestStoreWorkflow:
    """Import, match, list and review against a SQLite file."""

    def test_full_workflow(self, capsys, tmp_path, mentee_file, mentors_file, cardiology_mentor_record):
        db = str(tmp_path / "mentormatch.db")
        rejected = dict(cardiology_mentor_record, id="mentor-3", first_name="Bad", career_stage="retired")
        pool = write_json(tmp_path / "pool.json", json.loads((tmp_path / "mentors.json").read_text()) + [rejected])

        main(["import-mentors", "--input", pool, "--db", db])
        out = capsys.readouterr().out
        assert "[saved] mentor-1" in out
        assert "[validation_error] Bad" in out
        assert "Done. saved=2 rejected=1" in out

        main(["import-mentee", "--input", mentee_file, "--db", db])
        out = capsys.readouterr().out
        assert "Mentee: mentee-1" in out
        assert "Status: saved" in out

        main(["match", "--mentee-id", "mentee-1", "--db", db])
        out = capsys.readouterr().out
        assert "Top 1 mentors:" in out
        assert "[warn]" not in out

        main(["matches", "--mentee-id", "mentee-1", "--db", db])
        out = capsys.readouterr().out
        assert "Found 1 matches for mentee-1" in out
        assert "Mentor: mentor-1" in out
        assert "Status: pending" in out

        match_id = SQLiteStore(tmp_path / "mentormatch.db").list_matches("mentee-1")[0]["id"]
        main(["set-status", "--match-id", match_id, "--status", "accepted", "--db", db])
        assert "Status: accepted" in capsys.readouterr().out

        with pytest.raises(SystemExit, match="Cannot move match"):
            main(["set-status", "--match-id", match_id, "--status", "declined", "--db", db])

    def test_no_save(self, capsys, tmp_path, mentee_file, mentors_file):
        db = str(tmp_path / "mentormatch.db")
        main(["import-mentors", "--input", mentors_file, "--db", db])
        capsys.readouterr()

        main(["match", "--mentee", mentee_file, "--no-save", "--db", db])
        assert "Top 1 mentors:" in capsys.readouterr().out

        main(["matches", "--mentee-id", "mentee-1", "--db", db])
        assert "No matches stored." in capsys.readouterr().out

    def test_default_db_comes_from_env(self, tmp_path, monkeypatch, mentors_file):
        monkeypatch.setenv("MENTORMATCH_DB", str(tmp_path / "env.db"))

        main(["import-mentors", "--input", mentors_file])

        assert len(SQLiteStore(tmp_path / "env.db").fetch_mentors()) == 2

    def test_invalid_mentee_import(self, capsys, tmp_path, cardiology_mentee_record):
        cardiology_mentee_record["applicationTarget"] = "someday"
        path = write_json(tmp_path / "mentee.json", cardiology_mentee_record)

        with pytest.raises(SystemExit) as exc_info:
            main(["import-mentee", "--input", path, "--db", str(tmp_path / "m.db")])

        assert exc_info.value.code == 2
        assert "application_target" in capsys.readouterr().out

    def test_mentee_without_help_areas_imports(self, capsys, tmp_path, cardiology_mentee_record):
        cardiology_mentee_record["helpAreas"] = []
        path = write_json(tmp_path / "mentee.json", cardiology_mentee_record)

        main(["import-mentee", "--input", path, "--db", str(tmp_path / "m.db")])

        assert "Status: saved" in capsys.readouterr().out
