"""
Tests for the descriptor loader (templates → Program objects).

Covers:
    - Field mapping and metadata pass-through
    - Directory walking (recursion, ordering, skipped files)
    - Validation errors (ids, shapes, duplicates)
"""

import json

import pytest

from progchain.loader import (
    LoaderError,
    load_program_file,
    load_programs,
    load_programs_from_string,
    program_from_dict,
)


NMAP = {
    "program": "nmap",
    "input": [["ip"], ["subdomain"]],
    "output": ["port", "service"],
    "commands": ["nmap -sV {ip}"],
    "comments": ["Service scan"],
    "filter": "state == open",
    "regex": {"port": "(\\d+)/tcp"},
}


def _write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")


class TestProgramFromDict:
    def test_fields_mapped(self):
        p = program_from_dict(NMAP)
        assert p.id == "nmap"
        assert p.requirement_sets == [frozenset({"ip"}), frozenset({"subdomain"})]
        assert p.outputs == {"port", "service"}

    def test_metadata_passed_through(self):
        p = program_from_dict(NMAP)
        assert p.metadata.commands == ["nmap -sV {ip}"]
        assert p.metadata.comments == ["Service scan"]
        assert p.metadata.filter == "state == open"
        assert p.metadata.regex == {"port": "(\\d+)/tcp"}

    def test_optional_fields_default(self):
        p = program_from_dict({"program": "bare"})
        assert p.requirement_sets == []
        assert p.outputs == set()
        assert p.metadata.commands == []
        assert p.metadata.filter == ""

    def test_missing_id(self):
        with pytest.raises(LoaderError, match="program"):
            program_from_dict({"input": [["ip"]]})

    def test_empty_id(self):
        with pytest.raises(LoaderError):
            program_from_dict({"program": "   "})

    def test_input_must_be_list_of_lists(self):
        with pytest.raises(LoaderError, match="input"):
            program_from_dict({"program": "x", "input": ["ip"]})

    def test_output_must_be_list_of_strings(self):
        with pytest.raises(LoaderError, match="output"):
            program_from_dict({"program": "x", "output": "ip"})

    def test_not_a_mapping(self):
        with pytest.raises(LoaderError):
            program_from_dict(["nmap"])

    def test_empty_bundle_warns(self):
        with pytest.warns(UserWarning, match="empty input bundle"):
            p = program_from_dict({"program": "x", "input": [[]]})
        assert p.requirement_sets == [frozenset()]


class TestLoadFromString:
    def test_single_json_descriptor(self):
        programs = load_programs_from_string(json.dumps(NMAP))
        assert [p.id for p in programs] == ["nmap"]

    def test_json_list(self):
        content = json.dumps([NMAP, {"program": "httpx", "input": [["ip", "port"]], "output": ["url"]}])
        assert [p.id for p in load_programs_from_string(content)] == ["nmap", "httpx"]

    def test_yaml(self):
        content = """
- program: dnsx
  input: [[domain]]
  output: [ip]
- program: whois
  input: [[domain], [ip]]
  output: [organization]
"""
        programs = load_programs_from_string(content, fmt="yaml")
        assert [p.id for p in programs] == ["dnsx", "whois"]
        assert programs[1].requirement_sets == [frozenset({"domain"}), frozenset({"ip"})]

    def test_empty_yaml_document(self):
        assert load_programs_from_string("", fmt="yaml") == []

    def test_invalid_json(self):
        with pytest.raises(LoaderError, match="Failed to parse"):
            load_programs_from_string("{not json")

    def test_unsupported_format(self):
        with pytest.raises(LoaderError, match="Unsupported"):
            load_programs_from_string("{}", fmt="toml")

    def test_duplicates_within_document(self):
        with pytest.raises(LoaderError, match="Duplicate"):
            load_programs_from_string(json.dumps([NMAP, NMAP]))


class TestLoadDirectory:
    def test_recursive_sorted_walk(self, tmp_path):
        (tmp_path / "web").mkdir()
        _write_json(tmp_path / "b_nmap.json", NMAP)
        _write_json(tmp_path / "a_dnsx.json", {"program": "dnsx", "input": [["domain"]], "output": ["ip"]})
        _write_json(tmp_path / "web" / "httpx.json", {"program": "httpx", "input": [["ip", "port"]], "output": ["url"]})
        (tmp_path / "web" / "nuclei.yaml").write_text(
            "program: nuclei\ninput: [[url]]\noutput: [vulnerability]\n", encoding="utf-8"
        )

        programs = load_programs(str(tmp_path))
        assert [p.id for p in programs] == ["dnsx", "nmap", "httpx", "nuclei"]

    def test_other_files_skipped(self, tmp_path):
        _write_json(tmp_path / "nmap.json", NMAP)
        (tmp_path / "README.md").write_text("# templates", encoding="utf-8")
        (tmp_path / "notes.txt").write_text("not a template", encoding="utf-8")
        assert [p.id for p in load_programs(str(tmp_path))] == ["nmap"]

    def test_duplicate_across_files(self, tmp_path):
        _write_json(tmp_path / "one.json", NMAP)
        _write_json(tmp_path / "two.json", NMAP)
        with pytest.raises(LoaderError, match="Duplicate program ids: \\['nmap'\\]"):
            load_programs(str(tmp_path))

    def test_error_names_the_file(self, tmp_path):
        _write_json(tmp_path / "broken.json", {"input": []})
        with pytest.raises(LoaderError, match="broken.json"):
            load_programs(str(tmp_path))

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_programs(str(tmp_path / "nope"))

    def test_empty_directory(self, tmp_path):
        assert load_programs(str(tmp_path)) == []


def test_load_program_file_rejects_extension(tmp_path):
    path = tmp_path / "nmap.txt"
    path.write_text("{}", encoding="utf-8")
    with pytest.raises(LoaderError, match="Unsupported template extension"):
        load_program_file(str(path))
