"""Tests for inferring schemas from JSON files."""

import json
import os
import shutil
import sys
import tempfile
import unittest

import yaml

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from jsoninfer.errors import SchemaDecodeError
from jsoninfer.jsontoschema import convert_json_to_schema, infer_schema_from_files
from jsoninfer.rawschema import to_dict


class TestJsonToSchema(unittest.TestCase):
    """Test cases for the file driver."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def write_file(self, name: str, content: str) -> str:
        path = os.path.join(self.temp_dir, name)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
        return path

    def test_single_document(self):
        path = self.write_file('doc.json', '{\n  "id": 1,\n  "name": "a"\n}\n')
        self.assertEqual(to_dict(infer_schema_from_files([path])), {
            'type': 'object',
            'properties': {'id': {'type': 'integer'}, 'name': {'type': 'string'}},
            'required': ['id', 'name'],
        })

    def test_root_array_is_flattened(self):
        path = self.write_file('docs.json', json.dumps([{"id": 1}, {"id": 2.5, "tag": "x"}]))
        self.assertEqual(to_dict(infer_schema_from_files([path])), {
            'type': 'object',
            'properties': {'id': {'type': 'number'}, 'tag': {'type': 'string'}},
            'required': ['id'],
        })

    def test_root_array_without_flattening(self):
        path = self.write_file('docs.json', json.dumps([{"id": 1}]))
        schema = infer_schema_from_files([path], flatten_arrays=False)
        self.assertEqual(to_dict(schema)['type'], 'array')

    def test_concatenated_values(self):
        path = self.write_file('docs.json', '{"a": 1}\n{"a": 2, "b": true}\n')
        self.assertEqual(to_dict(infer_schema_from_files([path])), {
            'type': 'object',
            'properties': {'a': {'type': 'integer'}, 'b': {'type': 'boolean'}},
            'required': ['a'],
        })

    def test_leading_whitespace(self):
        path = self.write_file('doc.json', '\n' * 2000 + '{"a": 1}')
        self.assertEqual(to_dict(infer_schema_from_files([path])), {
            'type': 'object',
            'properties': {'a': {'type': 'integer'}},
            'required': ['a'],
        })

    def test_root_array_followed_by_values(self):
        path = self.write_file('docs.json', '[{"a": 1}]\n{"b": "x"}\n[{"a": 2}]\n')
        self.assertEqual(to_dict(infer_schema_from_files([path])), {
            'type': 'object',
            'properties': {'a': {'type': 'integer'}, 'b': {'type': 'string'}},
        })

    def test_sample_size_within_root_array(self):
        path = self.write_file('docs.json', '[1, 2, "x"]\n"y"')
        schema = infer_schema_from_files([path], sample_size=2)
        self.assertEqual(to_dict(schema), {'type': 'integer'})

    def test_json_lines(self):
        path = self.write_file('docs.jsonl', '{"a": 1}\n\n{"a": null}\n')
        self.assertEqual(to_dict(infer_schema_from_files([path])), {
            'type': 'object',
            'properties': {'a': {'type': 'integer', 'nullable': True}},
            'required': ['a'],
        })

    def test_json_lines_invalid_line(self):
        path = self.write_file('docs.jsonl', '{"a": 1}\n{"a": \n')
        with self.assertRaises(SchemaDecodeError) as ctx:
            infer_schema_from_files([path])
        self.assertIn('docs.jsonl:2', str(ctx.exception))

    def test_json_lines_skip_invalid(self):
        path = self.write_file('docs.jsonl', '{"a": 1}\nnot json\n{"a": 2}\n')
        with self.assertLogs('jsoninfer.jsontoschema', level='WARNING'):
            schema = infer_schema_from_files([path], skip_invalid=True)
        self.assertEqual(to_dict(schema), {
            'type': 'object',
            'properties': {'a': {'type': 'integer'}},
            'required': ['a'],
        })

    def test_invalid_document(self):
        path = self.write_file('doc.json', '{"a": [1,')
        with self.assertRaises(SchemaDecodeError):
            infer_schema_from_files([path])

    def test_sample_size(self):
        path = self.write_file('docs.jsonl', '{"a": 1}\n{"a": "x"}\n')
        schema = infer_schema_from_files([path], sample_size=1)
        self.assertEqual(to_dict(schema)['properties'], {'a': {'type': 'integer'}})

    def test_sample_size_across_files(self):
        first = self.write_file('first.json', json.dumps([1, 2]))
        second = self.write_file('second.json', '"x"')
        schema = infer_schema_from_files([first, second], sample_size=2)
        self.assertEqual(to_dict(schema), {'type': 'integer'})

    def test_no_input_files(self):
        with self.assertRaises(ValueError):
            infer_schema_from_files([])

    def test_no_samples(self):
        path = self.write_file('empty.json', '   \n')
        with self.assertRaises(ValueError):
            infer_schema_from_files([path])

    def test_convert_json(self):
        path = self.write_file('docs.json', json.dumps([{"v": True}, {"v": "x"}]))
        output_file = os.path.join(self.temp_dir, 'out', 'schema.json')
        convert_json_to_schema([path], output_file, sort_alternatives=True)
        with open(output_file, 'r', encoding='utf-8') as f:
            schema = json.load(f)
        self.assertEqual(schema['properties']['v'], {'oneOf': [{'type': 'string'}, {'type': 'boolean'}]})

    def test_convert_json_text(self):
        path = self.write_file('doc.json', '{"v": 1}')
        output_file = os.path.join(self.temp_dir, 'schema.json')
        convert_json_to_schema([path], output_file)
        with open(output_file, 'r', encoding='utf-8') as f:
            self.assertEqual(f.read(), json.dumps({
                'type': 'object',
                'properties': {'v': {'type': 'integer'}},
                'required': ['v'],
            }, indent=2))

    def test_convert_yaml(self):
        path = self.write_file('docs.json', '{"v": [1, null]}')
        output_file = os.path.join(self.temp_dir, 'schema.yaml')
        convert_json_to_schema([path], output_file, output_format='yaml')
        with open(output_file, 'r', encoding='utf-8') as f:
            schema = yaml.safe_load(f)
        self.assertEqual(schema, {
            'type': 'object',
            'properties': {'v': {'type': 'array', 'items': {'type': 'integer', 'nullable': True}}},
            'required': ['v'],
        })

    def test_unsupported_format(self):
        path = self.write_file('doc.json', '{}')
        with self.assertRaises(ValueError):
            convert_json_to_schema([path], os.path.join(self.temp_dir, 'x'), output_format='xml')


if __name__ == '__main__':
    unittest.main()
