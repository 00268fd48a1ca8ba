import json
import logging

import pytest

from common.log import APP_LOGGER
from seller import main as cli

from conftest import BUFF_COOKIE, SELLER_ID, STEAM_COOKIE


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for var in ("BUFF_BASE_URL", "BUFF_COOKIE", "STEAM_COOKIE", "SELLER_STEAM_ID",
                "BUFF_TIMEOUT", "BUFF_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    logging.getLogger(APP_LOGGER).handlers.clear()


def test_success_prints_outcome(http, capsys):
    http.post_replies.append({"code": "OK"})
    http.get_replies.append({"code": "OK", "data": {"items": [{"tradeofferid": "T1"}]}})

    code = cli.main(["ORD1", "--buff-cookie", BUFF_COOKIE, "--steam-cookie", STEAM_COOKIE])

    assert code == cli.EXIT_OK
    out = json.loads(capsys.readouterr().out.strip())
    assert out["success"] is True
    assert out["orderId"] == "ORD1"
    assert out["tradeOfferId"] == "T1"
    body = json.loads(http.posts[0]["data"])
    assert body["steamid"] == SELLER_ID


def test_failure_exit_code(http, capsys):
    http.post_replies.append({"code": "FAIL", "msg": "balance insufficient"})
    code = cli.main(["ORD1", "--buff-cookie", BUFF_COOKIE, "--steam-cookie", STEAM_COOKIE])
    assert code == cli.EXIT_FAILED
    out = json.loads(capsys.readouterr().out.strip())
    assert out["success"] is False
    assert "balance insufficient" in out["error"]


def test_cookies_from_env(http, monkeypatch, capsys):
    monkeypatch.setenv("BUFF_COOKIE", BUFF_COOKIE)
    monkeypatch.setenv("STEAM_COOKIE", STEAM_COOKIE)
    http.post_replies.append({"code": "OK"})
    http.get_replies.append({"code": "OK", "data": {"items": []}})

    assert cli.main(["ORD1", "--seller-id", "42"]) == cli.EXIT_OK
    assert json.loads(http.posts[0]["data"])["steamid"] == "42"


def test_cookies_from_config_file(http, tmp_path, capsys):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"buff_cookie": BUFF_COOKIE, "cookies": STEAM_COOKIE}), encoding="utf-8")
    http.post_replies.extend([{"code": "OK"}, {"code": "OK"}])
    http.get_replies.extend([{"code": "OK", "data": {"items": []}}] * 2)

    assert cli.main(["A", "B", "--config", str(path)]) == cli.EXIT_OK
    lines = capsys.readouterr().out.strip().splitlines()
    assert [json.loads(line)["orderId"] for line in lines] == ["A", "B"]


def test_missing_cookie_is_config_error(http, capsys):
    assert cli.main(["ORD1", "--buff-cookie", BUFF_COOKIE]) == cli.EXIT_CONFIG
    assert "Steam cookie" in capsys.readouterr().err
    assert http.posts == []


def test_malformed_config_file(http, tmp_path, capsys):
    path = tmp_path / "bad.json"
    path.write_text("{", encoding="utf-8")
    assert cli.main(["ORD1", "--config", str(path)]) == cli.EXIT_CONFIG
