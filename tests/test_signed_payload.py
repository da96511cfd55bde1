import pytest

from envolve_chat import SignedPayload, SignedPayloadError

COMMAND = "v=0.3,c=login,fn=SmFuZQ==,admin=f"


def test_serialize_and_parse():
    payload = SignedPayload.create("abc", 1300000000000, COMMAND)
    text = str(payload)
    assert text == f"{payload.hex_digest};1300000000000;{COMMAND}"
    assert SignedPayload.parse(text) == payload


def test_verify_detects_tampering():
    payload = SignedPayload.create("abc", 1000, COMMAND)
    assert payload.verify("abc")
    assert not payload.verify("abd")

    tampered = payload.model_copy(update={"command": COMMAND.replace("admin=f", "admin=t")})
    assert not tampered.verify("abc")


@pytest.mark.parametrize(
    "text",
    [
        "",
        "abc",
        "0" * 40 + ";1000",
        "0" * 40 + ";1000;",
        "0" * 40 + ";soon;v=0.3,c=logout",
        "XYZ;1000;v=0.3,c=logout",
        "A" * 40 + ";1000;v=0.3,c=logout",
        "0" * 40 + ";\u00b2;v=0.3,c=logout",
        "0" * 40 + ";\u0661\u0662;v=0.3,c=logout",
    ],
)
def test_parse_rejects_malformed(text):
    with pytest.raises(SignedPayloadError):
        SignedPayload.parse(text)

