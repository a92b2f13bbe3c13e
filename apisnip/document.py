"""
Typed view over a parsed OpenAPI 3.x document.

The document is built once from the tree produced by the JSON/YAML codec and
is never modified afterwards. Every node keeps its original body, so fields
the model does not interpret (vendor extensions, ``info``, ``servers`` ...)
survive a round trip untouched.
"""
from dataclasses import dataclass, field
from typing import NamedTuple, Optional

from apisnip.errors import ParseError, ReferenceProblem
from apisnip.refs import COMPONENT_KINDS, find_refs, parse_ref

HTTP_METHODS = ('get', 'put', 'post', 'delete', 'options', 'head', 'patch', 'trace')


class EndpointKey(NamedTuple):
    """Identity of an endpoint: the path template and the lower-case method."""

    path: str
    method: str

    @classmethod
    def of(cls, path, method):
        return cls(path, method.lower())

    @classmethod
    def parse(cls, text):
        """
        Parse ``"POST /pets"`` into an EndpointKey.

        Raises:
            ValueError: The text is not a known method followed by a path
        """
        method, _, path = text.strip().partition(' ')
        path = path.strip()
        if method.lower() not in HTTP_METHODS or not path:
            raise ValueError(f"Expected 'METHOD /path', got {text!r}")
        return cls(path, method.lower())

    def __str__(self):
        return f"{self.method.upper()} {self.path}"


@dataclass
class Operation:
    path: str
    method: str
    body: dict

    def _text(self, name):
        value = self.body.get(name)
        return value if isinstance(value, str) else ''

    @property
    def summary(self):
        return self._text('summary')

    @property
    def description(self):
        return self._text('description')

    @property
    def operation_id(self):
        return self.body.get('operationId')

    @property
    def tags(self):
        tags = self.body.get('tags')
        return [t for t in tags if isinstance(t, str)] if isinstance(tags, list) else []

    @property
    def parameters(self):
        params = self.body.get('parameters')
        return params if isinstance(params, list) else []

    @property
    def request_body(self):
        return self.body.get('requestBody')

    @property
    def responses(self):
        responses = self.body.get('responses')
        return responses if isinstance(responses, dict) else {}

    @property
    def security(self):
        """Security requirements, or None when the document default applies."""
        if 'security' not in self.body:
            return None
        security = self.body['security']
        return security if isinstance(security, list) else []


@dataclass
class PathItem:
    path: str
    body: dict

    @property
    def operations(self):
        """Operations keyed by method, in the order they appear in the document."""
        return {
            key: Operation(self.path, key, value)
            for key, value in self.body.items()
            if key in HTTP_METHODS and isinstance(value, dict)
        }

    @property
    def extras(self):
        """Path-level fields that are not operations (parameters, servers, summary ...)."""
        return {key: value for key, value in self.body.items() if key not in HTTP_METHODS}

    def _text(self, name):
        value = self.body.get(name)
        return value if isinstance(value, str) else ''

    @property
    def summary(self):
        return self._text('summary')

    @property
    def description(self):
        return self._text('description')


@dataclass
class ComponentEntry:
    kind: str
    name: str
    body: object

    @property
    def refs(self):
        return find_refs(self.body)


def _parameter_label(param):
    if not isinstance(param, dict):
        return None
    if isinstance(param.get('$ref'), str):
        try:
            return parse_ref(param['$ref']).name
        except ReferenceProblem:
            return param['$ref']
    name = param.get('name')
    if not isinstance(name, str):
        return None
    prefix = {'path': '/', 'query': '?'}.get(param.get('in'), '')
    return prefix + name


@dataclass
class Endpoint:
    """One selectable (path, method) pair, a view over its operation."""

    key: EndpointKey
    index: int
    operation: Operation
    path_item: PathItem = field(repr=False)

    @property
    def path(self):
        return self.key.path

    @property
    def method(self):
        return self.key.method

    @property
    def summary(self):
        return (
            self.operation.summary
            or self.operation.description
            or self.path_item.summary
            or self.path_item.description
        )

    @property
    def description(self):
        """Text searched alongside the path: summary and description together."""
        parts = [
            self.operation.summary,
            self.operation.description,
            self.path_item.summary,
            self.path_item.description,
        ]
        seen = []
        for part in parts:
            if part and part not in seen:
                seen.append(part)
        return ' '.join(seen)

    @property
    def parameters(self):
        labels = []
        params = self.path_item.body.get('parameters')
        for param in (params if isinstance(params, list) else []) + self.operation.parameters:
            label = _parameter_label(param)
            if label and label not in labels:
                labels.append(label)
        return labels

    @property
    def refs(self):
        refs = []
        for ref in find_refs(self.operation.body):
            if ref not in refs:
                refs.append(ref)
        return refs


class Document:
    """
    An OpenAPI document split into path items and a components table.

    Use ``load`` to build one from a decoded tree.
    """

    def __init__(self, raw, path_items, components):
        self._raw = raw
        self._path_items = path_items
        self._components = components
        self._endpoints = None

    @property
    def openapi(self):
        return self._raw.get('openapi')

    @property
    def metadata(self):
        """Top-level fields other than paths and components, in document order."""
        return {k: v for k, v in self._raw.items() if k not in ('paths', 'components')}

    @property
    def tags(self):
        tags = self._raw.get('tags')
        return tags if isinstance(tags, list) else []

    @property
    def security(self):
        """Document-level security requirements, or None when absent."""
        security = self._raw.get('security')
        return security if isinstance(security, list) else None

    def path_items(self):
        return list(self._path_items.values())

    def path_item(self, path) -> Optional[PathItem]:
        return self._path_items.get(path)

    def operation(self, path, method) -> Optional[Operation]:
        path_item = self._path_items.get(path)
        if path_item is None:
            return None
        return path_item.operations.get(method.lower())

    def endpoints(self):
        """Every (path, method) endpoint, in document order."""
        if self._endpoints is None:
            endpoints = []
            for path_item in self._path_items.values():
                for method, operation in path_item.operations.items():
                    endpoints.append(Endpoint(EndpointKey(path_item.path, method), len(endpoints), operation, path_item))
            self._endpoints = endpoints
        return list(self._endpoints)

    def endpoint(self, key) -> Optional[Endpoint]:
        for endpoint in self.endpoints():
            if endpoint.key == key:
                return endpoint
        return None

    def components(self, kind):
        """The bucket for one component kind; empty when the document has none."""
        return dict(self._components.get(kind, {}))

    def component(self, kind, name) -> Optional[ComponentEntry]:
        bucket = self._components.get(kind, {})
        if name not in bucket:
            return None
        return ComponentEntry(kind, name, bucket[name])

    def component_keys(self):
        return [(kind, name) for kind, bucket in self._components.items() for name in bucket]

    def to_raw(self):
        """The tree this document was built from, ready for the codec."""
        return self._raw


def load(raw):
    """
    Build a Document from a decoded JSON/YAML tree.

    Only the shape needed to locate operations and component buckets is
    checked.

    Args:
        raw (dict): The decoded document

    Returns:
        Document: The typed view

    Raises:
        ParseError: The tree is not an OpenAPI 3.x document
    """
    if not isinstance(raw, dict):
        raise ParseError("The OpenAPI document must be a mapping at the top level")
    if 'openapi' not in raw and 'swagger' in raw:
        raise ParseError("Swagger 2.0 documents are not supported, please use the OpenAPI 3.x format")

    paths = raw.get('paths', {})
    if paths is None:
        paths = {}
    if not isinstance(paths, dict):
        raise ParseError("The 'paths' field is not a mapping")

    path_items = {}
    for path, body in paths.items():
        if not isinstance(path, str):
            raise ParseError(f"Path key {path!r} is not a string")
        if body is None:
            body = {}
        if not isinstance(body, dict):
            raise ParseError(f"Operations for '{path}' are not a mapping")
        path_items[path] = PathItem(path, body)

    components = raw.get('components', {})
    if components is None:
        components = {}
    if not isinstance(components, dict):
        raise ParseError("The 'components' field is not a mapping")

    buckets = {}
    for kind, bucket in components.items():
        if kind not in COMPONENT_KINDS:
            continue
        if bucket is None:
            bucket = {}
        if not isinstance(bucket, dict):
            raise ParseError(f"Component bucket '{kind}' is not a mapping")
        buckets[kind] = bucket

    return Document(raw, path_items, buckets)
