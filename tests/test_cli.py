"""
Tests for the misp-client command line front end.

The client built by the CLI is redirected to the FakeMisp transport.
"""

import base64
import json
import logging

import httpx
import pytest
import structlog

import misp_client.__main__ as cli
from misp_client import MispClient


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def wired(misp, monkeypatch):
    transport = httpx.MockTransport(misp.handle)
    built = []

    def from_config(config):
        built.append(config)
        return MispClient(config.base_url, config.api_key, transport=transport)

    monkeypatch.setattr(cli.MispClient, "from_config", from_config)
    return built


@pytest.fixture
def conn(base_url, api_key):
    return ["--url", base_url, "--key", api_key]


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_download_needs_a_mode(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["download", "42"])


class TestCommands:
    def test_event(self, misp, wired, conn, event_payload, capsys):
        misp.add("GET", "/events/42", json_data=event_payload("42", n_attributes=2))
        assert cli.main(conn + ["event", "42"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["id"] == "42"
        assert len(out["Attribute"]) == 2

    def test_flags_reach_config(self, misp, wired, conn):
        misp.add("POST", "/events/alert/42", json_data={})
        assert cli.main(conn + ["--insecure", "--timeout", "5", "publish", "42", "--email"]) == 0
        assert wired[0].insecure is True
        assert wired[0].timeout == 5.0
        assert misp.paths() == [("POST", "/events/alert/42")]

    def test_search(self, misp, wired, conn, capsys):
        misp.add("POST", "/attributes/restSearch/json/", json_data={
            "response": {"Attribute": [{"id": "1", "value": "evil.example"}]},
        })
        assert cli.main(conn + ["search", "--value", "evil.example", "--from", "2024-01-01"]) == 0
        assert misp.body() == {"request": {"value": "evil.example", "from": "2024-01-01"}}
        assert json.loads(capsys.readouterr().out)[0]["value"] == "evil.example"

    def test_tag(self, misp, wired, conn):
        misp.add("POST", "/tags/attachTagToObject", json_data={})
        assert cli.main(conn + ["tag", "some-uuid", "tlp:white"]) == 0
        assert misp.body() == {"uuid": "some-uuid", "tag": "tlp:white"}

    def test_sighting_many_values(self, misp, wired, conn):
        misp.add("POST", "/sightings/add/", json_data={"saved": True})
        assert cli.main(conn + ["sighting", "a.example", "b.example"]) == 0
        assert misp.body() == {"request": {"values": ["a.example", "b.example"]}}

    def test_upload(self, misp, wired, conn, tmp_path, capsys):
        sample = tmp_path / "dropper.exe"
        sample.write_bytes(b"MZ\x90\x00")
        misp.add("POST", "/events/upload_sample/42", json_data={"id": "42", "message": "Success"})
        assert cli.main(conn + ["upload", str(sample), "--event-id", "42", "--to-ids"]) == 0
        request = misp.body()["request"]
        assert request["files"] == [{
            "filename": "dropper.exe",
            "data": base64.b64encode(b"MZ\x90\x00").decode(),
        }]
        assert request["to_ids"] is True
        assert json.loads(capsys.readouterr().out)["id"] == 42

    def test_download_index(self, misp, wired, conn, event_payload, sample_descriptor, tmp_path):
        misp.add("GET", "/events/42", json_data=event_payload("42"))
        misp.add("GET", "/attributes/downloadSample/", json_data={"result": [sample_descriptor("501")]})
        misp.add("GET", "/attributes/downloadAttachment/download/501", content=b"bytes")
        out = tmp_path / "s.bin"
        assert cli.main(conn + ["download", "42", "--index", "0", "-o", str(out)]) == 0
        assert out.read_bytes() == b"bytes"


class TestErrors:
    def test_status_error_prints_body(self, misp, wired, conn, capsys):
        misp.add("GET", "/events/42", status=403, json_data={"message": "Authentication failed."})
        assert cli.main(conn + ["event", "42"]) == 1
        err = capsys.readouterr().err
        assert "status=403" in err
        assert "Authentication failed." in err

    def test_missing_configuration(self, monkeypatch, capsys):
        monkeypatch.delenv("MISP_URL", raising=False)
        monkeypatch.delenv("MISP_API_KEY", raising=False)
        assert cli.main(["event", "42"]) == 1
        assert "MISP_URL" in capsys.readouterr().err

    def test_download_without_output(self, misp, wired, conn, event_payload, capsys):
        misp.add("GET", "/events/42", json_data=event_payload("42"))
        assert cli.main(conn + ["download", "42", "--hash", "abc"]) == 1
        assert "--output" in capsys.readouterr().err

    def test_download_bad_pattern(self, misp, wired, conn, event_payload, tmp_path, capsys):
        misp.add("GET", "/events/42", json_data=event_payload("42"))
        pattern = str(tmp_path / "out.bin")
        assert cli.main(conn + ["download", "42", "--pattern", pattern]) == 1
        assert "filename pattern" in capsys.readouterr().err
        assert misp.paths() == [("GET", "/events/42")]
        assert not (tmp_path / "out.bin").exists()
