"""Tests for reading and writing JSON and YAML documents."""

import datetime
import json

import pytest
import yaml

from apisnip.codec import decode, detect_format, encode, read_spec, sniff_format, write_spec
from apisnip.errors import ParseError, UnsupportedFormat


class TestFormats:
    """Tests for format detection."""

    @pytest.mark.parametrize('name, fmt', [
        ('spec.json', 'json'),
        ('spec.YAML', 'yaml'),
        ('dir/spec.yml', 'yaml'),
        ('https://example.com/openapi.json?v=2', 'json'),
    ])
    def test_detect(self, name, fmt):
        """Test extensions map to formats."""
        assert detect_format(name) == fmt

    def test_unknown_extension(self):
        """Test unknown extensions raise unless a default is given."""
        with pytest.raises(UnsupportedFormat):
            detect_format('spec.txt')
        assert detect_format('spec.txt', default='yaml') == 'yaml'

    def test_sniff(self):
        """Test JSON is recognized by its first character."""
        assert sniff_format('  {"openapi": "3.0.0"}') == 'json'
        assert sniff_format('openapi: 3.0.0') == 'yaml'


class TestDecodeEncode:
    """Tests for decode and encode."""

    def test_yaml_keeps_key_order(self):
        """Test YAML output keeps the input key order."""
        text = "openapi: 3.0.0\ninfo:\n  version: '1'\n  title: t\npaths: {}\n"
        tree = decode(text, 'yaml')

        assert list(tree) == ['openapi', 'info', 'paths']
        assert encode(tree, 'yaml').index('version') < encode(tree, 'yaml').index('title')

    def test_invalid_json(self):
        """Test broken JSON raises ParseError."""
        with pytest.raises(ParseError, match="JSON"):
            decode('{"openapi": ', 'json')

    def test_invalid_yaml(self):
        """Test broken YAML raises ParseError."""
        with pytest.raises(ParseError, match="YAML"):
            decode('openapi: [3.0', 'yaml')

    def test_json_writes_dates_as_strings(self):
        """Test dates read from YAML are written to JSON as ISO strings."""
        text = encode({'info': {'x-released': datetime.date(2024, 1, 2)}}, 'json')

        assert json.loads(text) == {'info': {'x-released': '2024-01-02'}}

    def test_yaml_writes_shared_nodes_without_aliases(self):
        """Test nodes shared through anchors are written out in full."""
        tree = yaml.safe_load("a: &shared\n  type: string\nb: *shared\n")
        text = encode(tree, 'yaml')

        assert '&' not in text
        assert '*' not in text
        assert yaml.safe_load(text) == {'a': {'type': 'string'}, 'b': {'type': 'string'}}

    def test_yaml_self_containing_node(self):
        """Test a node that contains itself is still written."""
        tree = yaml.safe_load("x-loop: &l\n  - *l\n")
        decoded = yaml.safe_load(encode(tree, 'yaml'))

        assert decoded['x-loop'][0] is decoded['x-loop']

    def test_unicode_kept(self):
        """Test non-ASCII text is written as-is."""
        assert '✂' in encode({'summary': '✂ snip'}, 'json')
        assert '✂' in encode({'summary': '✂ snip'}, 'yaml')


class TestFiles:
    """Tests for read_spec and write_spec."""

    def test_round_trip_yaml(self, tmp_path, petstore_raw):
        """Test a YAML file reads back as the tree that was written."""
        path = tmp_path / 'petstore.yaml'
        write_spec(petstore_raw, str(path))

        tree, fmt = read_spec(str(path))
        assert fmt == 'yaml'
        assert tree == petstore_raw

    def test_write_json_by_format(self, tmp_path, petstore_raw):
        """Test an explicit format wins over the extension."""
        path = tmp_path / 'out.yaml'
        write_spec(petstore_raw, str(path), 'json')

        assert json.loads(path.read_text(encoding='utf-8'))['openapi'] == '3.0.3'

    def test_unsupported_extension_writes_nothing(self, tmp_path):
        """Test an unknown output extension fails before creating the file."""
        path = tmp_path / 'out.txt'
        with pytest.raises(UnsupportedFormat):
            write_spec({'openapi': '3.0.0'}, str(path))
        assert not path.exists()

    def test_missing_file(self, tmp_path):
        """Test a missing input file raises ParseError."""
        with pytest.raises(ParseError):
            read_spec(str(tmp_path / 'missing.yaml'))

    def test_non_utf8_file(self, tmp_path):
        """Test a file that is not UTF-8 raises ParseError."""
        path = tmp_path / 'latin1.yaml'
        path.write_bytes(b'openapi: 3.0.0\ninfo:\n  title: caf\xe9\n')

        with pytest.raises(ParseError, match="Cannot read"):
            read_spec(str(path))

    def test_reads_json(self, tmp_path):
        """Test JSON files are decoded."""
        path = tmp_path / 'spec.json'
        path.write_text('{"openapi": "3.0.0", "paths": {}}', encoding='utf-8')

        assert read_spec(str(path)) == ({'openapi': '3.0.0', 'paths': {}}, 'json')

    def test_yaml_output_is_block_style(self, tmp_path, petstore_raw):
        """Test YAML is written in block style."""
        path = tmp_path / 'out.yml'
        write_spec(petstore_raw, str(path))

        assert yaml.safe_load(path.read_text(encoding='utf-8')) == petstore_raw
        assert '{' not in path.read_text(encoding='utf-8').splitlines()[0]
