"""CLI 测试 -- python -m todoapp.core"""

import sys

import pytest
from todoapp.core.__main__ import main


def _run(monkeypatch, *argv: str) -> int:
    monkeypatch.setattr(sys, "argv", ["todoapp.core", *argv])
    with pytest.raises(SystemExit) as exc_info:
        main()
    return exc_info.value.code


class TestCli:
    def test_usage_without_command(self, monkeypatch, capsys):
        assert _run(monkeypatch) == 1
        assert "create-user" in capsys.readouterr().out

    def test_create_user_and_show_unknown_history(self, monkeypatch, capsys, tmp_path):
        monkeypatch.setenv("TODOAPP_DB_PATH", str(tmp_path / "cli.db"))

        assert _run(monkeypatch, "create-user", "田中", "tanaka@example.com") == 0
        user_id = capsys.readouterr().out.strip()
        assert len(user_id) == 26

        assert _run(monkeypatch, "create-user", "田中2", "TANAKA@example.com") == 1
        assert "邮箱已存在" in capsys.readouterr().out

        assert _run(monkeypatch, "show-history", "01JNOPE0000000000000000001") == 1

    def test_create_user_validates_fields(self, monkeypatch, capsys, tmp_path):
        db_path = tmp_path / "invalid.db"
        monkeypatch.setenv("TODOAPP_DB_PATH", str(db_path))

        assert _run(monkeypatch, "create-user", "a", "bad-email") == 1
        out = capsys.readouterr().out
        assert "name: は2文字以上50文字以内で入力してください" in out
        assert "email: は不正な値です" in out
        # 校验失败时不创建数据库
        assert not db_path.exists()

    def test_unknown_command(self, monkeypatch, capsys):
        assert _run(monkeypatch, "rebuild") == 1
        assert "未知命令" in capsys.readouterr().out
