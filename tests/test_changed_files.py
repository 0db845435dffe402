from __future__ import annotations

from caught_lines.changed_files import list_changed_files

from conftest import FakeGraphQLClient


def test_paths_returned_in_api_order_across_pages():
    files = [f"src/file_{i}.py" for i in range(7)]
    client = FakeGraphQLClient(files=files)
    assert list_changed_files(client, "acme", "widgets", 42, page_size=3) == files
    assert [call[1] for call in client.calls_to("files")] == [None, "cursor:3", "cursor:6"]


def test_larger_pages_need_fewer_requests():
    files = [f"f{i}" for i in range(150)]
    small = FakeGraphQLClient(files=files)
    large = FakeGraphQLClient(files=files)
    assert list_changed_files(small, "acme", "widgets", 1, page_size=25) == files
    assert list_changed_files(large, "acme", "widgets", 1, page_size=100) == files
    assert len(small.calls_to("files")) == 6
    assert len(large.calls_to("files")) == 2


def test_duplicates_are_passed_through():
    client = FakeGraphQLClient(files=["a.txt", "b.txt", "a.txt"])
    assert list_changed_files(client, "acme", "widgets", 1, page_size=2) == ["a.txt", "b.txt", "a.txt"]


def test_no_changed_files_is_valid():
    client = FakeGraphQLClient(files=[])
    assert list_changed_files(client, "acme", "widgets", 1) == []
    assert len(client.calls_to("files")) == 1
