"""
tests/test_targets.py
Unit tests for core/targets.py and WorkItem ordering.
Run: pytest tests/test_targets.py -v
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import socket

import pytest
from core.models import WorkItem
from core.targets import TargetError, build_work_items, expand_targets, resolve_host


class TestExpandTargets:

    def test_single_ipv4(self):
        assert expand_targets("10.0.0.5") == ["10.0.0.5"]

    def test_single_ipv6_normalized(self):
        assert expand_targets("::0001") == ["::1"]

    def test_cidr_hosts_only(self):
        hosts = expand_targets("192.168.1.0/30")
        assert hosts == ["192.168.1.1", "192.168.1.2"]

    def test_cidr_slash_32(self):
        assert expand_targets("10.1.2.3/32") == ["10.1.2.3"]

    def test_comma_list_deduplicated_in_order(self):
        hosts = expand_targets("10.0.0.9, 10.0.0.1,10.0.0.9")
        assert hosts == ["10.0.0.9", "10.0.0.1"]

    def test_invalid_cidr(self):
        with pytest.raises(TargetError, match="Invalid CIDR"):
            expand_targets("10.0.0.0/33")

    def test_oversized_cidr(self):
        with pytest.raises(TargetError, match="limit"):
            expand_targets("10.0.0.0/8")

    def test_empty(self):
        with pytest.raises(TargetError):
            expand_targets("  ")

    def test_hostname_resolved(self, monkeypatch):
        def fake_getaddrinfo(host, port, type=0):
            assert host == "db.internal"
            return [
                (socket.AF_INET6, socket.SOCK_STREAM, 6, "", ("fd00::5", 0, 0, 0)),
                (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("10.9.8.7", 0)),
            ]
        monkeypatch.setattr(socket, "getaddrinfo", fake_getaddrinfo)
        assert expand_targets("db.internal") == ["10.9.8.7"]

    def test_unresolvable_hostname(self, monkeypatch):
        def fail(*a, **kw):
            raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")
        monkeypatch.setattr(socket, "getaddrinfo", fail)
        with pytest.raises(TargetError, match="Could not resolve"):
            resolve_host("nope.invalid")


class TestWorkItems:

    def test_host_major_order(self):
        items = build_work_items(["10.0.0.2", "10.0.0.1"], [443, 22])
        assert items == [
            WorkItem("10.0.0.2", 443), WorkItem("10.0.0.2", 22),
            WorkItem("10.0.0.1", 443), WorkItem("10.0.0.1", 22),
        ]

    def test_duplicates_removed(self):
        items = build_work_items(["h", "h"], [1, 1, 2])
        assert items == [WorkItem("h", 1), WorkItem("h", 2)]

    def test_empty_ports(self):
        assert build_work_items(["10.0.0.1"], []) == []

    def test_sort_key_numeric_addresses(self):
        items = [WorkItem("10.0.0.10", 1), WorkItem("10.0.0.2", 1), WorkItem("10.0.0.2", 0)]
        ordered = sorted(items, key=lambda i: i.sort_key)
        assert ordered == [WorkItem("10.0.0.2", 0), WorkItem("10.0.0.2", 1),
                           WorkItem("10.0.0.10", 1)]

    def test_sort_key_v4_before_v6_before_names(self):
        items = [WorkItem("zeta", 1), WorkItem("::1", 1), WorkItem("127.0.0.1", 1)]
        ordered = [i.host for i in sorted(items, key=lambda i: i.sort_key)]
        assert ordered == ["127.0.0.1", "::1", "zeta"]

    def test_str_brackets_ipv6(self):
        assert str(WorkItem("::1", 22)) == "[::1]:22"
        assert str(WorkItem("10.0.0.1", 22)) == "10.0.0.1:22"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
