import json

import pytest

from fare_engine.cli import EXIT_INVALID_INPUT, build_parser, main


@pytest.fixture
def ride_file(tmp_path):
    path = tmp_path / "ride.json"
    path.write_text(
        json.dumps(
            {
                "origin": {"lat": 0.0, "lng": 0.0},
                "departure_time": "2025-01-15T12:00:00",
                "riders": [
                    {
                        "rider_id": "a",
                        "pickup": {"lat": 0.0, "lng": 0.0},
                        "drop": {"lat": 0.0, "lng": 0.05},
                        "drop_order": 1,
                    },
                    {
                        "rider_id": "b",
                        "pickup": {"lat": 0.0, "lng": 0.0},
                        "drop": {"lat": 0.0, "lng": 0.1},
                        "drop_order": 2,
                    },
                ],
            }
        )
    )
    return path


@pytest.fixture(autouse=True)
def restore_root_logger():
    import logging

    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers.copy()
    original_level = root_logger.level
    yield
    root_logger.handlers = original_handlers
    root_logger.setLevel(original_level)


@pytest.mark.unit
class TestQuoteCommand:
    def test_text_output(self, ride_file, capsys):
        assert main(["quote", str(ride_file)]) == 0

        out = capsys.readouterr().out
        assert "== a ==" in out
        assert "== b ==" in out
        assert "Shared Travel" in out

    def test_json_output(self, ride_file, capsys):
        assert main(["quote", str(ride_file), "--json"]) == 0

        fares = json.loads(capsys.readouterr().out)
        assert set(fares) == {"a", "b"}
        assert fares["a"]["finalized"] is True
        assert fares["b"]["surge_multiplier"] == 1.0

    def test_departure_override(self, ride_file, capsys):
        assert main(["quote", str(ride_file), "--json", "--at", "2025-01-15T08:30"]) == 0
        fares = json.loads(capsys.readouterr().out)
        assert fares["a"]["surge_multiplier"] == 1.3

    def test_missing_file(self, tmp_path, capsys):
        assert main(["quote", str(tmp_path / "nope.json")]) == EXIT_INVALID_INPUT
        assert "error:" in capsys.readouterr().err

    def test_malformed_ride(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"origin": {"lat": 120, "lng": 0}, "riders": []}))
        assert main(["quote", str(path)]) == EXIT_INVALID_INPUT

    def test_bad_config(self, ride_file, monkeypatch):
        monkeypatch.setenv("FARE_RATE_PER_KM", "-3")
        assert main(["quote", str(ride_file)]) == EXIT_INVALID_INPUT


@pytest.mark.unit
class TestSingleCommand:
    def test_seats(self, capsys):
        code = main(
            ["single", "0", "0", "0", "0.1", "--seats", "2", "--at", "2025-01-15T12:00", "--json"]
        )
        assert code == 0

        quote = json.loads(capsys.readouterr().out)
        assert quote["seats"] == 2
        assert quote["total_fare"] == quote["fare_per_person"] * 2

    def test_zero_seats(self, capsys):
        assert main(["single", "0", "0", "0", "0.1", "--seats", "0"]) == EXIT_INVALID_INPUT


@pytest.mark.unit
class TestParser:
    def test_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_rejects_bad_timestamp(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["quote", "ride.json", "--at", "yesterday"])


@pytest.mark.unit
class TestLoggingSettings:
    def test_invalid_log_level_exits_cleanly(self, ride_file, monkeypatch, capsys):
        monkeypatch.setenv("FARE_LOG_LEVEL", "LOUD")

        assert main(["quote", str(ride_file)]) == EXIT_INVALID_INPUT
        assert "invalid logging settings" in capsys.readouterr().err

    def test_json_logs_go_to_stderr(self, ride_file, monkeypatch, capsys):
        monkeypatch.setenv("FARE_LOG_FORMAT", "json")

        assert main(["quote", str(ride_file), "--json"]) == 0
        assert set(json.loads(capsys.readouterr().out)) == {"a", "b"}
