import pytest
from typer.testing import CliRunner

from envolve_chat import SignedPayload, encode_field
from envolve_chat.cli.main import app
from envolve_chat.core import config

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    """No project .env from the working tree."""
    monkeypatch.chdir(tmp_path)


def _command_string(markup):
    line = next(row for row in markup.splitlines() if row.startswith("env_commandString="))
    return line[len("env_commandString='"):-len("';")]


def test_render_login():
    result = runner.invoke(app, ["render", "--api-key", "123-abc", "--first-name", "Jane", "--admin"])
    assert result.exit_code == 0, result.output
    assert result.stdout.startswith("<!-- Envolve Chat -->")
    assert "var envoSn=123;" in result.stdout

    payload = SignedPayload.parse(_command_string(result.stdout))
    assert payload.command == f"v=0.3,c=login,fn={encode_field('Jane')},admin=t"
    assert payload.verify("abc")


def test_render_anonymous_uses_env_key(monkeypatch):
    monkeypatch.setenv("ENVOLVE_CHAT_API_KEY", "55-xyz")
    result = runner.invoke(app, ["render"])
    assert result.exit_code == 0, result.output
    assert "var envoSn=55;" in result.stdout
    assert SignedPayload.parse(_command_string(result.stdout)).command == "v=0.3,c=logout"


def test_render_to_file(tmp_path):
    out = tmp_path / "snippets" / "chat.html"
    result = runner.invoke(app, ["render", "-k", "123-abc", "--output", str(out)])
    assert result.exit_code == 0, result.output
    text = out.read_text(encoding="utf-8")
    assert text.endswith("</script>\n")


def test_render_bad_key():
    result = runner.invoke(app, ["render", "--api-key", "not-a-valid-key"])
    assert result.exit_code == 1
    assert "Invalid or missing Envolve API Key" in result.output


def test_render_without_key():
    result = runner.invoke(app, ["render"])
    assert result.exit_code != 0


def test_command_logout_flag():
    result = runner.invoke(app, ["command", "-k", "123-abc", "--first-name", "Jane", "--logout"])
    assert result.exit_code == 0, result.output
    payload = SignedPayload.parse(result.stdout.strip())
    assert payload.command == "v=0.3,c=logout"


def test_inspect_verifies_signature():
    signed = str(SignedPayload.create("abc", 1300000000000, f"v=0.3,c=login,fn={encode_field('Jane')},admin=f"))

    ok = runner.invoke(app, ["inspect", signed, "--api-key", "123-abc"])
    assert ok.exit_code == 0, ok.output
    assert "Jane" in ok.stdout
    assert "Signature OK" in ok.stdout

    bad = runner.invoke(app, ["inspect", signed, "--api-key", "123-other"])
    assert bad.exit_code == 1


def test_inspect_malformed_payload():
    result = runner.invoke(app, ["inspect", "garbage"])
    assert result.exit_code == 1


def test_setup_writes_user_env(tmp_path, monkeypatch):
    env_path = tmp_path / "user" / ".env"
    monkeypatch.setattr(config, "get_user_env_file", lambda: env_path)

    result = runner.invoke(app, ["setup"], input="123-abc\n")
    assert result.exit_code == 0, result.output
    assert 'ENVOLVE_CHAT_API_KEY="123-abc"' in env_path.read_text(encoding="utf-8")


def test_setup_rejects_bad_key(tmp_path, monkeypatch):
    env_path = tmp_path / "user" / ".env"
    monkeypatch.setattr(config, "get_user_env_file", lambda: env_path)

    result = runner.invoke(app, ["setup"], input="nope\n")
    assert result.exit_code == 1
    assert not env_path.exists()


def test_inspect_non_ascii_timestamp_exits_cleanly():
    result = runner.invoke(app, ["inspect", "0" * 40 + ";²;v=0.3,c=logout"])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Timestamp is not an integer" in result.output
