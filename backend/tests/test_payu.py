"""PayU hash sequences and field helpers."""

import hashlib

import pytest

from templecms.core.config import settings
from templecms.core.exceptions import GatewayNotConfiguredError
from templecms.services import payu


@pytest.fixture(autouse=True)
def merchant(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "PAYU_MERCHANT_KEY", "testkey")
    monkeypatch.setattr(settings, "PAYU_MERCHANT_SALT", "testsalt")
    monkeypatch.setattr(settings, "PAYU_MODE", "test")


def _sha512(s: str) -> str:
    return hashlib.sha512(s.encode()).hexdigest()


def test_request_hash_sequence():
    fields = {
        "key": "testkey",
        "txnid": "TXN1234",
        "amount": "501",
        "productinfo": "Annadanam",
        "firstname": "Ramesh",
        "email": "ramesh@example.com",
        "udf1": "7",
    }
    expected = _sha512(
        "testkey|TXN1234|501|Annadanam|Ramesh|ramesh@example.com|7||||||||||testsalt"
    )
    assert payu.request_hash(fields) == expected


def test_response_hash_sequence():
    fields = {
        "key": "testkey",
        "txnid": "TXN1234",
        "amount": "501.00",
        "productinfo": "Annadanam",
        "firstname": "Ramesh",
        "email": "ramesh@example.com",
        "udf1": "7",
        "status": "success",
    }
    expected = _sha512(
        "testsalt|success||||||||||7|ramesh@example.com|Ramesh|Annadanam|501.00|TXN1234|testkey"
    )
    assert payu.response_hash(fields) == expected


def test_response_hash_prepends_additional_charges():
    fields = {"txnid": "TXN1", "status": "success", "additionalCharges": "12.50"}
    without = payu.response_hash({k: v for k, v in fields.items() if k != "additionalCharges"})
    with_charges = payu.response_hash(fields)
    assert with_charges != without
    assert with_charges == _sha512(
        "12.50|testsalt|success|||||||||||||||TXN1|testkey"
    )


def test_verify_response_hash():
    fields = {"txnid": "TXN1", "status": "success", "amount": "10.00"}
    fields["hash"] = payu.response_hash(fields)
    assert payu.verify_response_hash(fields)
    assert payu.verify_response_hash({**fields, "hash": fields["hash"].upper()})
    assert not payu.verify_response_hash({**fields, "status": "failure"})
    assert not payu.verify_response_hash({**fields, "hash": ""})
    assert not payu.verify_response_hash({k: v for k, v in fields.items() if k != "hash"})


@pytest.mark.parametrize("bad_hash", ["\u00e9" * 128, "\u00fc", "not-a-hex-digest"])
def test_verify_response_hash_rejects_malformed_hash(bad_hash: str):
    fields = {"txnid": "TXN1", "status": "success", "amount": "10.00", "hash": bad_hash}
    assert payu.verify_response_hash(fields) is False


@pytest.mark.parametrize(
    ("reported", "expected", "ok"),
    [
        ("501", 501, True),
        ("501.00", 501, True),
        ("500.99", 501, False),
        ("", 501, False),
        ("abc", 501, False),
    ],
)
def test_amounts_match(reported: str, expected: int, ok: bool):
    assert payu.amounts_match(reported, expected) is ok


def test_clean_field_strips_separators():
    assert payu.clean_field("Gau | Seva\nFund") == "Gau   Seva Fund"
    assert len(payu.clean_field("x" * 300)) == 100


def test_build_payment_params():
    params = payu.build_payment_params(
        txnid="TXNABC",
        amount=1100,
        productinfo="Temple|Construction",
        firstname="Sita",
        email="sita@example.com",
        phone="9999999999",
        udf1="3",
        surl="https://example.org/s",
        furl="https://example.org/f",
    )
    assert params["key"] == settings.PAYU_MERCHANT_KEY
    assert params["amount"] == "1100"
    assert "|" not in params["productinfo"]
    assert params["hash"] == payu.request_hash(params)
    assert settings.PAYU_MERCHANT_SALT not in params.values()


def test_require_configured(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "PAYU_MERCHANT_KEY", "")
    with pytest.raises(GatewayNotConfiguredError):
        payu.require_configured()


def test_payment_urls_follow_mode(monkeypatch: pytest.MonkeyPatch):
    assert settings.payu_payment_url == "https://test.payu.in/_payment"
    monkeypatch.setattr(settings, "PAYU_MODE", "live")
    assert settings.payu_payment_url == "https://secure.payu.in/_payment"
    assert settings.payu_verify_url.startswith("https://info.payu.in/")
