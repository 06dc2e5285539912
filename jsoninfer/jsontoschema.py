"""Infers a raw schema from JSON files.

This module provides:
- infer_schema_from_files: Fold JSON, JSON array and JSON Lines files into one schema tree
- convert_json_to_schema: Infer the schema and write it as JSON or YAML
"""

import logging
import os
from typing import List, Optional

from jsoninfer.errors import SchemaDecodeError
from jsoninfer.rawschema import RawSchema, to_json, to_yaml
from jsoninfer.schema_inference import DECODER_ERRORS, SchemaInferrer

logger = logging.getLogger(__name__)

JSON_LINES_EXTENSIONS = ('.jsonl', '.ndjson')


def infer_schema_from_files(
    input_files: List[str],
    sample_size: int = 0,
    flatten_arrays: bool = True,
    skip_invalid: bool = False,
    backend: Optional[str] = 'python'
) -> RawSchema:
    """Infers a raw schema from JSON files.

    JSON Lines files (.jsonl, .ndjson) are applied line by line. Other files
    may hold one or more concatenated JSON values; every top-level array is
    treated as one sample per element when `flatten_arrays` is set.

    Args:
        input_files: List of JSON file paths to analyze
        sample_size: Maximum number of samples to apply (0 = all)
        flatten_arrays: Apply the elements of root-level arrays as separate samples
        skip_invalid: Log and skip malformed JSON Lines instead of failing
        backend: Optional ijson backend name

    Returns:
        The inferred schema tree
    """
    if not input_files:
        raise ValueError("At least one input file is required")

    inferrer = SchemaInferrer(backend=backend)
    count = 0

    for file_path in input_files:
        if sample_size > 0 and count >= sample_size:
            break
        logger.info("Inferring schema from %s", file_path)
        if file_path.lower().endswith(JSON_LINES_EXTENSIONS):
            count += _apply_json_lines(inferrer, file_path, sample_size - count if sample_size > 0 else 0, skip_invalid)
        else:
            count += _apply_json_values(inferrer, file_path, sample_size - count if sample_size > 0 else 0, flatten_arrays)

    if count == 0:
        raise ValueError("No valid JSON data found in input files")
    logger.info("Applied %d samples", count)
    return inferrer.target()


def _apply_json_lines(inferrer: SchemaInferrer, file_path: str, limit: int, skip_invalid: bool) -> int:
    count = 0
    with open(file_path, 'rb') as f:
        for line_number, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                inferrer.apply(line)
            except SchemaDecodeError as e:
                if not skip_invalid:
                    raise e.wrap(f"{file_path}:{line_number}") from e
                logger.warning("Skipping %s:%d: %s", file_path, line_number, e)
                continue
            count += 1
            if limit > 0 and count >= limit:
                break
    return count


def _is_blank(file_path: str) -> bool:
    with open(file_path, 'rb') as f:
        for chunk in iter(lambda: f.read(65536), b''):
            if chunk.strip():
                return False
    return True


def _apply_json_values(inferrer: SchemaInferrer, file_path: str, limit: int, flatten_arrays: bool) -> int:
    if _is_blank(file_path):
        return 0

    count = 0
    with open(file_path, 'rb') as f:
        try:
            for value in inferrer.parser.items(f, '', use_float=False, multiple_values=True):
                samples = value if flatten_arrays and isinstance(value, list) else [value]
                for sample in samples:
                    inferrer.apply_value(sample)
                    count += 1
                    if limit > 0 and count >= limit:
                        return count
        except DECODER_ERRORS as e:
            if isinstance(e, SchemaDecodeError):
                raise
            raise SchemaDecodeError(f"{file_path}: {e}", cause=e) from e
    return count


def convert_json_to_schema(
    input_files: List[str],
    schema_file: str,
    output_format: str = 'json',
    sample_size: int = 0,
    flatten_arrays: bool = True,
    skip_invalid: bool = False,
    sort_alternatives: bool = False,
    backend: Optional[str] = 'python'
) -> None:
    """Infers a raw schema from JSON files and writes it.

    Args:
        input_files: List of JSON file paths to analyze
        schema_file: Output path for the schema
        output_format: 'json' or 'yaml'
        sample_size: Maximum number of samples to apply (0 = all)
        flatten_arrays: Apply the elements of root-level arrays as separate samples
        skip_invalid: Log and skip malformed JSON Lines instead of failing
        sort_alternatives: Order union alternatives by type
        backend: Optional ijson backend name
    """
    if output_format not in ('json', 'yaml'):
        raise ValueError(f"Unsupported output format: {output_format}")

    schema = infer_schema_from_files(input_files, sample_size, flatten_arrays, skip_invalid, backend)

    # Ensure output directory exists
    output_dir = os.path.dirname(schema_file)
    if output_dir and not os.path.exists(output_dir):
        os.makedirs(output_dir)

    with open(schema_file, 'w', encoding='utf-8') as f:
        if output_format == 'yaml':
            f.write(to_yaml(schema, sort_alternatives))
        else:
            f.write(to_json(schema, sort_alternatives))
