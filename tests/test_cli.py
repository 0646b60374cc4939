"""Tests for session documents and the command line."""

from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest

from fitness_assess.analysis.evaluators import GpsInputs, InertialInputs, ManualInputs, VisionInputs
from fitness_assess.cli import main, score_session
from fitness_assess.core.exceptions import InvalidInputError, UnknownTestTypeError
from fitness_assess.core.types import BodyLandmark
from fitness_assess.session import AttemptEntry, load_session, to_calibration, to_inputs

JUMP_MOTION = [[0.0, -3.0, 0.0, 0]] + [[0.0, 0.0, 0.0, t] for t in (100, 200, 300)] + [
    [0.0, 3.0, 0.0, 400]
] + [[0.0, 0.0, 0.0, t] for t in (500, 600, 700, 800, 900)]


def _write(tmp_path: Path, document: dict) -> Path:
    path = tmp_path / "session.json"
    path.write_text(json.dumps(document))
    return path


@pytest.fixture
def session_document() -> dict:
    """Session with a height, a weight and a vertical jump."""
    return {
        "calibration": {"pixels_per_cm": 10.0},
        "tests": [
            {"test": "height", "head_point": [320, 50], "floor_point": [320, 770]},
            {"test": "weight", "weight_kg": 70.5},
            {"test": "vertical_jump", "motion": JUMP_MOTION},
        ],
    }


class TestSession:
    """Tests for session parsing."""

    def test_load_session(self, tmp_path: Path, session_document: dict) -> None:
        """A valid document parses into entries."""
        document = load_session(_write(tmp_path, session_document))

        assert len(document.tests) == 3
        assert to_calibration(document.calibration).pixels_per_cm == 10.0

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Malformed JSON is an input error."""
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(InvalidInputError):
            load_session(path)

    def test_schema_violation(self, tmp_path: Path) -> None:
        """Values of the wrong shape are an input error."""
        with pytest.raises(InvalidInputError):
            load_session(_write(tmp_path, {"calibration": {"pixels_per_cm": -1}}))

    def test_inputs_by_modality(self) -> None:
        """Each test gets inputs of its modality."""
        assert isinstance(to_inputs(AttemptEntry(test="height")), VisionInputs)
        assert isinstance(to_inputs(AttemptEntry(test="shuttle_run")), InertialInputs)
        assert isinstance(to_inputs(AttemptEntry(test="30m_sprint")), GpsInputs)
        assert isinstance(to_inputs(AttemptEntry(test="weight", weight_kg=70)), ManualInputs)

    def test_pose_keypoints(self) -> None:
        """Keypoint names map to body landmarks."""
        entry = AttemptEntry.model_validate(
            {
                "test": "sit_ups",
                "poses": [{"timestamp": 0.5, "keypoints": [{"name": "leftKnee", "x": 1, "y": 2}]}],
            }
        )

        inputs = to_inputs(entry)

        assert isinstance(inputs, VisionInputs)
        assert inputs.poses[0].require(BodyLandmark.LEFT_KNEE).x == 1.0

    def test_unordered_trajectory(self) -> None:
        """Out-of-order trajectory points are an input error."""
        entry = AttemptEntry.model_validate(
            {"test": "medicine_ball_throw", "trajectory": {"points": [[0, 0, 1.0], [1, 0, 0.5]]}}
        )

        with pytest.raises(InvalidInputError):
            to_inputs(entry)

    def test_weight_required(self) -> None:
        """A weight entry without a value is an input error."""
        with pytest.raises(InvalidInputError):
            to_inputs(AttemptEntry(test="weight"))

    def test_unknown_test(self) -> None:
        """Unknown test names are rejected."""
        with pytest.raises(UnknownTestTypeError):
            to_inputs(AttemptEntry(test="juggling"))


class TestScoreCommand:
    """Tests for the score command."""

    def test_score_session(self, tmp_path: Path, session_document: dict) -> None:
        """Every entry is evaluated into the profile."""
        profile, failures = score_session(_write(tmp_path, session_document))

        assert failures == []
        assert profile.latest("height").score == 72.0
        assert profile.latest("weight").score == 70.5
        assert profile.latest("vertical_jump").score == 20

    def test_main_writes_csv(
        self, tmp_path: Path, session_document: dict, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """The score command prints results and writes a CSV."""
        output = tmp_path / "out" / "results.csv"

        exit_code = main(["score", str(_write(tmp_path, session_document)), "--csv", str(output)])

        assert exit_code == 0
        assert "Overall fitness score" in capsys.readouterr().out

        with open(output, newline="") as f:
            rows = list(csv.DictReader(f))
        assert [row["test_type"] for row in rows] == ["height", "weight", "vertical_jump"]
        assert rows[2]["rating"] == "Poor"

    def test_failed_entry_sets_exit_code(self, tmp_path: Path, session_document: dict) -> None:
        """A failing test is reported and the command exits non-zero."""
        session_document["tests"].append({"test": "vertical_jump", "motion": []})
        session_document["tests"].append({"test": "juggling"})

        profile, failures = score_session(_write(tmp_path, session_document))

        assert [test for test, _ in failures] == ["vertical_jump", "juggling"]
        assert len(profile) == 3
        assert main(["score", str(tmp_path / "session.json")]) == 1

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing session file exits non-zero."""
        assert main(["score", str(tmp_path / "nope.json")]) == 1


class TestCalibrateCommand:
    """Tests for the calibrate command."""

    def test_calibrate(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Prints pixels per centimeter."""
        assert main(["calibrate", "credit_card", "85.6"]) == 0
        assert "10.0000 px/cm" in capsys.readouterr().out

    def test_invalid_width(self) -> None:
        """A zero width fails."""
        assert main(["calibrate", "credit_card", "0"]) == 1
