"""Tests for copier settings."""

import pytest
from pydantic import ValidationError

from unproxy import CopierSettings, GraphCopier


def test_defaults():
    settings = CopierSettings(_env_file=None)

    assert settings.max_nodes is None
    assert settings.max_resolve_hops == 16
    assert settings.preserve_container_types is True


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("UNPROXY_MAX_NODES", "500")
    monkeypatch.setenv("UNPROXY_PRESERVE_CONTAINER_TYPES", "false")

    settings = CopierSettings(_env_file=None)

    assert settings.max_nodes == 500
    assert settings.preserve_container_types is False


def test_explicit_values_override_environment(monkeypatch):
    monkeypatch.setenv("UNPROXY_MAX_RESOLVE_HOPS", "3")

    settings = CopierSettings(_env_file=None, max_resolve_hops=7)

    assert settings.max_resolve_hops == 7


def test_validation():
    with pytest.raises(ValidationError):
        CopierSettings(_env_file=None, max_resolve_hops=0)


def test_copier_reads_environment_by_default(monkeypatch):
    monkeypatch.setenv("UNPROXY_MAX_NODES", "2")

    assert GraphCopier().settings.max_nodes == 2
