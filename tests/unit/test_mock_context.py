"""
Tests for MockExecutionContext: dry-run of node-mutating primitives.
"""

import pytest

from provisioner.engine import Package


class TestMockPrimitives:
    def test_mutating_primitives_only_log(self, mock_context, node, log):
        """No transport call is made; each effect is described instead."""
        assert mock_context.run("uptime") == ""
        assert mock_context.sudo("reboot") == ""
        assert mock_context.upload("/local/a", "/remote/a") is None
        assert mock_context.download("/remote/b", "/local/b") is None
        assert mock_context.mkdir("/srv") is None
        assert mock_context.remove("/srv/old") is None
        assert mock_context.copy("/a", "/b") is None
        assert mock_context.move("/b", "/c") is None
        assert mock_context.set_permissions("/c", 0o600) is None
        assert mock_context.set_owner("/c", "www", "www-data") is None
        assert mock_context.set_owner("/c", "www") is None

        assert node.calls == []
        assert log.kinds("mock") == [
            "uptime",
            "sudo reboot",
            "UPLOAD: /local/a => /remote/a",
            "DOWNLOAD: /local/b <= /remote/b",
            "MKDIR: /srv",
            "REMOVE: /srv/old",
            "COPY: /a /b",
            "MOVE: /b /c",
            "SET_PERMISSIONS: /c 600",
            "SET_OWNER: /c www www-data",
            "SET_OWNER: /c www",
        ]

    def test_script_through_trigger_makes_no_transport_calls(self, mock_context, node, log, index):
        pkg = index.register(Package(name="app", defaults={"app": {"user": "svc"}}))

        def install(r):
            r.sudo(f"useradd {r.app['user']}")
            r.mkdir("/srv/app")
            r.upload("/build/app.tar", "/srv/app/app.tar")
            r.in_dir("/srv/app", lambda rr: rr.run("tar xf app.tar"))
            r.remove("/srv/app/app.tar")

        pkg.action("install", apply=install)
        mock_context.trigger("install:app")

        assert [c for c in node.calls if c[0] != "for_user"] == []
        assert "sudo useradd svc" in log.kinds("mock")
        assert "tar xf app.tar" in log.kinds("mock")

    def test_remote_handles_are_mocked(self, mock_context, node, log):
        remote = mock_context.remote("/etc/app.conf")
        remote.set_permissions("640")
        remote.set_owner("root")
        remote.delete()
        assert remote.stat() == (None, None, None)
        assert node.calls == []
        assert "SET_PERMISSIONS: /etc/app.conf 640" in log.kinds("mock")
        assert "REMOVE: /etc/app.conf" in log.kinds("mock")

    def test_non_mutating_queries_still_reach_node(self, mock_context, node):
        assert mock_context.binary_exists("sh") is True
        assert ("binary_exists", "sh") in node.calls

    def test_trigger_resolution_unchanged(self, mock_context, index):
        from provisioner.engine import MissingActionError

        with pytest.raises(MissingActionError):
            mock_context.trigger("missing:nowhere")
