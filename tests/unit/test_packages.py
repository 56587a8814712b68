"""
Tests for packages, actions, the package index and YAML manifests.
"""

import pytest

from provisioner.engine import Action, Config, ConfigurationError, Package, PackageIndex


class TestPackage:
    def test_defaults_wrapped_in_config(self):
        pkg = Package(name="nginx", defaults={"nginx": {"port": 80}})
        assert isinstance(pkg.defaults, Config)

    def test_name_required(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Package(name=" ")
        assert exc_info.value.code == "package_name_missing"

    def test_action_registration(self):
        pkg = Package(name="nginx")
        action = pkg.action("install", apply=lambda r: None, description="Install nginx")
        assert pkg.actions["install"] is action
        assert action.ref == "install:nginx"
        assert action.package == "nginx"

    def test_duplicate_action(self):
        pkg = Package(name="nginx")
        pkg.action("install")
        with pytest.raises(ConfigurationError) as exc_info:
            pkg.action("install")
        assert exc_info.value.code == "duplicate_action"
        assert exc_info.value.to_dict() == {
            "code": "duplicate_action",
            "message": "Action 'install' is already defined in package 'nginx'",
            "details": {"package": "nginx", "action": "install"},
        }

    def test_decorators_set_bodies(self):
        pkg = Package(name="nginx")
        action = pkg.action("site")

        @action.applies
        def apply(r):
            return "applied"

        @action.validates
        def validate(r):
            return True

        assert action.body("apply") is apply
        assert action.body("validate") is validate
        assert action.body("revert") is None

    def test_unknown_phase(self):
        with pytest.raises(ValueError):
            Action(name="a", package="p").body("restart")

    def test_depends_on_is_unique(self):
        pkg = Package(name="nginx")
        pkg.depends_on("install:nginx")
        pkg.depends_on("install:nginx")
        assert pkg.dependents == ["install:nginx"]


class TestPackageIndex:
    def test_register_and_get(self):
        index = PackageIndex()
        pkg = index.register(Package(name="nginx"))
        assert index.get("nginx") is pkg
        assert index.get("missing") is None
        assert index.get(None) is None
        assert "nginx" in index
        assert len(index) == 1

    def test_duplicate_package(self):
        index = PackageIndex()
        index.register(Package(name="nginx"))
        with pytest.raises(ConfigurationError) as exc_info:
            index.register(Package(name="nginx"))
        assert exc_info.value.code == "duplicate_package"

    def test_list_sorted_by_name(self):
        index = PackageIndex({"b": Package(name="b"), "a": Package(name="a")})
        assert [p.name for p in index] == ["a", "b"]


class TestManifests:
    def test_load_creates_and_fills_packages(self, tmp_path):
        (tmp_path / "nginx.yaml").write_text(
            "name: nginx\n"
            "description: Web server\n"
            "defaults:\n"
            "  nginx:\n"
            "    port: 80\n"
            "    workers: 4\n"
            "dependents:\n"
            "  - install\n"
            "  - site:nginx\n",
            encoding="utf-8",
        )
        (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

        index = PackageIndex()
        existing = index.register(Package(name="nginx", defaults={"nginx": {"port": 8080}}))
        assert index.load(tmp_path) == 1

        assert index.get("nginx") is existing
        assert existing.defaults.to_dict() == {"nginx": {"port": 8080, "workers": 4}}
        assert existing.description == "Web server"
        assert existing.dependents == ["install", "site:nginx"]

    def test_load_new_package(self, tmp_path):
        (tmp_path / "users.yml").write_text("name: users\n", encoding="utf-8")
        index = PackageIndex()
        index.load(tmp_path)
        assert index.get("users").actions == {}

    def test_invalid_manifest(self, tmp_path):
        (tmp_path / "bad.yaml").write_text("name: bad\nunknown: 1\n", encoding="utf-8")
        with pytest.raises(ConfigurationError) as exc_info:
            PackageIndex().load(tmp_path)
        assert exc_info.value.code == "invalid_package_manifest"
        assert exc_info.value.details["path"].endswith("bad.yaml")

    def test_non_mapping_manifest(self, tmp_path):
        (tmp_path / "list.yaml").write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            PackageIndex().load(tmp_path)

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PackageIndex().load(tmp_path / "absent")
