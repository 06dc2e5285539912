import importlib

mod = "jsoninfer"
class LazyLoader:
    """
    Lazy loader for the jsoninfer functions to keep the ijson and YAML imports off the startup path.
    """
    def __init__(self, mappings):
        self._modules = {}
        self._mappings = mappings

    def _load_module(self, module_name):
        if module_name not in self._modules:
            self._modules[module_name] = importlib.import_module(module_name)
        return self._modules[module_name]

    def __getattr__(self, item):
        if item in self._mappings:
            module_name, attr_name = self._mappings[item]
            module = self._load_module(module_name)
            return getattr(module, attr_name)
        else:
            return self._load_module(f"{mod}.{item}")

# Define the public names and their corresponding module paths
_mappings = {
    "SchemaInferrer": (f"{mod}.schema_inference", "SchemaInferrer"),
    "infer_schema_from_json": (f"{mod}.schema_inference", "infer_schema_from_json"),
    "infer_schema_from_documents": (f"{mod}.schema_inference", "infer_schema_from_documents"),
    "infer_schema_from_files": (f"{mod}.jsontoschema", "infer_schema_from_files"),
    "convert_json_to_schema": (f"{mod}.jsontoschema", "convert_json_to_schema"),
    "RawSchema": (f"{mod}.rawschema", "RawSchema"),
    "to_dict": (f"{mod}.rawschema", "to_dict"),
    "to_json": (f"{mod}.rawschema", "to_json"),
    "to_yaml": (f"{mod}.rawschema", "to_yaml"),
    "load_raw_schema": (f"{mod}.rawschema", "load_raw_schema"),
    "schemas_equivalent": (f"{mod}.rawschema", "schemas_equivalent"),
    "SchemaResolver": (f"{mod}.schemaresolver", "SchemaResolver"),
    "resolve_raw_schema": (f"{mod}.schemaresolver", "resolve_raw_schema"),
    "convert_raw_schema": (f"{mod}.schemaresolver", "convert_raw_schema"),
    "SchemaDecodeError": (f"{mod}.errors", "SchemaDecodeError"),
    "SchemaValidationError": (f"{mod}.errors", "SchemaValidationError"),
}

_lazy_loader = LazyLoader(_mappings)

def __getattr__(name):
    return getattr(_lazy_loader, name)
