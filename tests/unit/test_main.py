"""
Unit tests for the command-line output modes, with network and auth stubbed.
"""
import json
from datetime import timedelta

import pytest

from nextmeet import main as cli
from nextmeet.config import Settings
from nextmeet.exceptions import CredentialIOError, NetworkError
from nextmeet.models import TokenPair
from tests.conftest import make_meeting

TOKENS = TokenPair(access_token="ya29", refresh_token="1//r")

MEETING = make_meeting(
    summary="Planning",
    description='Agenda <a href="http://a.ext">x</a> <a href="http://b.ext">y</a> https://acme.zoom.us/j/1',
)


@pytest.fixture
def stubbed(monkeypatch, settings):
    """Stub settings, the token manager and the calendar pipelines."""
    state = {"meeting": MEETING, "all": [MEETING], "refresh_error": None, "error": None, "logins": 0}

    monkeypatch.setattr(Settings, "from_env", classmethod(lambda cls: settings))

    def refresh_saved_tokens(self):
        if state["refresh_error"]:
            raise state["refresh_error"]
        return TOKENS

    def login(self):
        state["logins"] += 1
        return TOKENS

    monkeypatch.setattr(cli.TokenManager, "refresh_saved_tokens", refresh_saved_tokens)
    monkeypatch.setattr(cli.TokenManager, "login", login)

    async def retrieve(settings, manager, debug=False):
        if state["error"]:
            raise state["error"]
        return state["meeting"]

    async def retrieve_with_tokens(settings, tokens, debug=False, now=None):
        return state["meeting"]

    async def retrieve_all(settings, manager):
        return state["all"]

    async def today_json(settings, manager):
        if state["error"]:
            raise state["error"]
        return '{"items": []}'

    monkeypatch.setattr(cli, "retrieve", retrieve)
    monkeypatch.setattr(cli, "retrieve_with_tokens", retrieve_with_tokens)
    monkeypatch.setattr(cli, "retrieve_all", retrieve_all)
    monkeypatch.setattr(cli, "today_json", today_json)
    return state


class TestDefaultMode:
    def test_prints_meeting(self, stubbed, capsys):
        assert cli.main([]) == 0
        out = capsys.readouterr().out
        assert out.startswith("Planning\n10:30 - 11:00\n")
        assert "Meet: https://acme.zoom.us/j/1" in out

    def test_no_meeting(self, stubbed, capsys):
        stubbed["meeting"] = None
        assert cli.main([]) == 0
        assert capsys.readouterr().out.strip() == cli.NO_MEETING_MESSAGE

    def test_error_exits_nonzero_without_traceback(self, stubbed, capsys):
        stubbed["error"] = NetworkError("Failed to reach Google Calendar")
        assert cli.main([]) == 1
        captured = capsys.readouterr()
        assert captured.err.strip() == "Error: Failed to reach Google Calendar"
        assert "Traceback" not in captured.err


class TestLinkMode:
    def test_prints_link(self, stubbed, capsys):
        assert cli.main(["-m"]) == 0
        assert capsys.readouterr().out.strip() == "https://acme.zoom.us/j/1"

    def test_no_meeting_exits_1(self, stubbed, capsys):
        stubbed["meeting"] = None
        assert cli.main(["--link"]) == 1
        assert capsys.readouterr().out == ""


class TestJsonMode:
    def test_prints_raw_json(self, stubbed, capsys):
        assert cli.main(["-j"]) == 0
        assert capsys.readouterr().out.strip() == '{"items": []}'

    def test_error_goes_to_stdout(self, stubbed, capsys):
        stubbed["error"] = NetworkError("Calendar API returned 401")
        assert cli.main(["-j"]) == 1
        assert capsys.readouterr().out.strip() == "Error: Calendar API returned 401"


class TestMachineModes:
    def test_machine_full_record(self, stubbed, capsys):
        assert cli.main(["-mf"]) == 0
        record = json.loads(capsys.readouterr().out)
        assert record == {
            "summary": "Planning",
            "start": {"date": "04/03/2024", "time": "10:30"},
            "end": {"date": "04/03/2024", "time": "11:00"},
            "description": MEETING.description,
            "hangoutLink": "https://meet.google.com/abc-defg-hij",
        }

    def test_machine_full_no_meeting(self, stubbed, capsys):
        stubbed["meeting"] = None
        assert cli.main(["--machine-full"]) == 0
        assert capsys.readouterr().out == "\n"

    def test_additional_links(self, stubbed, capsys):
        assert cli.main(["-al"]) == 0
        assert capsys.readouterr().out.strip() == "http://a.ext http://b.ext"

    def test_token_failure_never_logs_in(self, stubbed, capsys):
        stubbed["refresh_error"] = CredentialIOError("Credential file not found")
        assert cli.main(["-mf"]) == 1
        assert capsys.readouterr().err.strip() == "Error: Could not refresh tokens"
        assert stubbed["logins"] == 0


class TestAllMode:
    def test_lists_meetings(self, stubbed, capsys):
        other = make_meeting(summary="Retro", start_offset=timedelta(hours=4))
        stubbed["all"] = [MEETING, other]
        assert cli.main(["-a"]) == 0
        out = capsys.readouterr().out
        assert out.index("Planning") < out.index("Retro")
        assert "\n\n" in out

    def test_empty(self, stubbed, capsys):
        stubbed["all"] = []
        assert cli.main(["--all"]) == 0
        assert capsys.readouterr().out == ""


class TestLoginMode:
    def test_forces_login(self, stubbed, capsys):
        assert cli.main(["--login"]) == 0
        assert stubbed["logins"] == 1
        assert "Authorization successful" in capsys.readouterr().out


def test_missing_configuration(monkeypatch, capsys):
    for name in ("NEXTMEET_CLIENT_ID", "NEXTMEET_CLIENT_SECRET", "NEXTMEET_EMAIL"):
        monkeypatch.delenv(name, raising=False)
    assert cli.main([]) == 1
    assert "Missing required settings" in capsys.readouterr().err
