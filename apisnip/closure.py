"""
Trim a document down to a set of selected endpoints.

``trim`` keeps the selected operations and every component they need,
directly or through other components, and drops everything else. It never
raises: references that cannot be followed are reported as diagnostics next
to a best-effort result.
"""
import copy
import logging
from collections import deque
from dataclasses import dataclass, field

from apisnip.document import HTTP_METHODS, EndpointKey, load
from apisnip.errors import DanglingReference, ReferenceProblem
from apisnip.refs import COMPONENT_KINDS, ComponentKey, find_refs, parse_ref

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Diagnostic:
    """A reference the closure could not follow."""

    kind: str
    ref: str
    origin: str
    message: str

    def __str__(self):
        return f"{self.origin}: {self.message}"


@dataclass
class TrimResult:
    document: object
    diagnostics: list = field(default_factory=list)
    retained: dict = field(default_factory=dict)

    @property
    def operation_count(self):
        return len(self.document.endpoints())

    @property
    def component_count(self):
        return sum(len(names) for names in self.retained.values())


class _Collector:
    """Worklist over component keys, seeded from the selected operations."""

    def __init__(self, document):
        self.document = document
        self.visited = set()
        self.diagnostics = []
        self._queue = deque()
        self._reported = set()

    def report(self, problem, origin):
        diagnostic = Diagnostic(problem.label, problem.ref, origin, str(problem))
        if diagnostic not in self._reported:
            self._reported.add(diagnostic)
            self.diagnostics.append(diagnostic)
            logger.debug("%s", diagnostic)

    def add_key(self, key, origin, ref=None):
        if key in self.visited:
            return
        entry = self.document.component(key.kind, key.name)
        if entry is None:
            self.report(DanglingReference(ref or key.ref, "No such component"), origin)
            return
        self.visited.add(key)
        self._queue.append((entry.body, f"{key.kind}/{key.name}"))
        for name in _entry_security(key.kind, entry.body):
            self.add_key(ComponentKey('securitySchemes', name), f"{key.kind}/{key.name}")

    def add_ref(self, ref, origin):
        try:
            key = parse_ref(ref)
        except ReferenceProblem as problem:
            # Left in place in the output, the engine cannot vouch for it
            self.report(problem, origin)
            return
        self.add_key(key, origin, ref)

    def scan(self, obj, origin):
        self._queue.append((obj, origin))

    def drain(self):
        while self._queue:
            obj, origin = self._queue.popleft()
            for ref in find_refs(obj):
                self.add_ref(ref, origin)


def _normalize_selection(selection):
    keys = set()
    invalid = []
    for item in selection or ():
        if isinstance(item, str):
            try:
                item = EndpointKey.parse(item)
            except ValueError as e:
                invalid.append(Diagnostic('missing', item, item, str(e)))
                continue
        path, method = item
        keys.add(EndpointKey.of(path, method))
    return keys, invalid


def extract_paths(document, selected):
    """
    Copy the path items holding a selected endpoint, with only the selected methods.

    Path-level fields (parameters, servers, summary, extensions) keep their
    place; unselected operations are dropped.

    Args:
        document (Document): The full document
        selected (set): EndpointKeys to keep

    Returns:
        dict: path -> trimmed path item body, in document order
    """
    extracted_paths = {}
    for path_item in document.path_items():
        methods = {key.method for key in selected if key.path == path_item.path}
        methods &= set(path_item.operations)
        if not methods:
            continue

        path_data = {}
        for key, value in path_item.body.items():
            if key in HTTP_METHODS and key not in methods:
                continue
            path_data[key] = copy.deepcopy(value)
        extracted_paths[path_item.path] = path_data

    return extracted_paths


def _requirement_names(requirements):
    names = []
    for requirement in requirements or []:
        if isinstance(requirement, dict):
            names.extend(name for name in requirement if isinstance(name, str))
    return names


def _callback_path_items(operation):
    callbacks = operation.get('callbacks') if isinstance(operation, dict) else None
    if not isinstance(callbacks, dict):
        return []
    return [
        path_item
        for callback in callbacks.values()
        if isinstance(callback, dict)
        for path_item in callback.values()
    ]


def _nested_security(path_items):
    """
    Security requirement names of the operations in the given path items
    and, at any depth, in the callbacks of those operations.
    """
    names = []
    seen = set()
    pending = list(path_items)
    for path_item in pending:
        if not isinstance(path_item, dict) or id(path_item) in seen:
            continue
        seen.add(id(path_item))
        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if isinstance(operation, dict):
                names.extend(_requirement_names(operation.get('security')))
                pending.extend(_callback_path_items(operation))
    return names


def _entry_security(kind, body):
    if kind == 'callbacks' and isinstance(body, dict):
        return _nested_security(body.values())
    if kind == 'pathItems':
        return _nested_security([body])
    return []


def filter_tags(document, operations):
    """
    Keep the document-level tag objects used by at least one retained operation.

    Returns:
        list: Tag objects in document order
    """
    used = {tag for operation in operations for tag in operation.tags}
    return [
        copy.deepcopy(tag)
        for tag in document.tags
        if isinstance(tag, dict) and tag.get('name') in used
    ]


def collect_referenced_components(document, extracted_paths):
    """
    Find every component transitively required by the extracted paths.

    Args:
        document (Document): The full document
        extracted_paths (dict): Output of ``extract_paths``

    Returns:
        tuple: (visited ComponentKeys, diagnostics, whether the document-level
        security default is still in use)
    """
    collector = _Collector(document)

    inherits_security = False
    for path, path_data in extracted_paths.items():
        for key, value in path_data.items():
            if key in HTTP_METHODS:
                origin = str(EndpointKey(path, key))
                collector.scan(value, origin)
                operation = document.operation(path, key)
                if operation.security is None:
                    inherits_security = True
                    names = []
                else:
                    names = _requirement_names(operation.security)
                names += _nested_security(_callback_path_items(operation.body))
                for name in names:
                    collector.add_key(ComponentKey('securitySchemes', name), origin)
            else:
                collector.scan(value, f"{path} {key}")

    if inherits_security:
        for name in _requirement_names(document.security):
            collector.add_key(ComponentKey('securitySchemes', name), 'security')

    collector.drain()
    return collector.visited, collector.diagnostics, inherits_security


def filter_components(document, visited):
    """
    Keep only the visited entries of each bucket, in their original order.

    Fields of ``components`` that are not buckets (extensions) pass through.
    """
    components = document.to_raw().get('components') or {}
    referenced_components = {}
    for kind, bucket in components.items():
        if kind not in COMPONENT_KINDS:
            referenced_components[kind] = copy.deepcopy(bucket)
            continue
        kept = {
            name: copy.deepcopy(body)
            for name, body in (bucket or {}).items()
            if ComponentKey(kind, name) in visited
        }
        if kept:
            referenced_components[kind] = kept
    return referenced_components


def create_new_spec(document, extracted_paths, referenced_components, filtered_tags, keep_security):
    """
    Assemble the trimmed tree in the original top-level key order.

    Returns:
        dict: The new API specification
    """
    new_api_spec = {}
    for key, value in document.to_raw().items():
        if key == 'paths':
            new_api_spec['paths'] = extracted_paths
        elif key == 'components':
            if referenced_components:
                new_api_spec['components'] = referenced_components
        elif key == 'tags':
            if filtered_tags:
                new_api_spec['tags'] = filtered_tags
        elif key == 'security':
            if keep_security:
                new_api_spec['security'] = copy.deepcopy(value)
        elif key == 'webhooks':
            continue
        else:
            new_api_spec[key] = copy.deepcopy(value)

    # Only the paths section is mandatory, even when nothing was selected
    new_api_spec.setdefault('paths', extracted_paths)
    return new_api_spec


def trim(document, selection):
    """
    Build a new document holding only the selected endpoints and their closure.

    Args:
        document (Document): The full document, left untouched
        selection (iterable): EndpointKeys, (path, method) pairs or
            ``"METHOD /path"`` strings

    Returns:
        TrimResult: The trimmed document, diagnostics and the retained
        component names per kind
    """
    selected, invalid = _normalize_selection(selection)

    missing = invalid + [
        Diagnostic('missing', str(key), str(key), f"No operation {key} in the document")
        for key in sorted(selected)
        if document.operation(key.path, key.method) is None
    ]

    extracted_paths = extract_paths(document, selected)
    visited, diagnostics, inherits_security = collect_referenced_components(document, extracted_paths)
    referenced_components = filter_components(document, visited)

    operations = [
        document.operation(path, method)
        for path, path_data in extracted_paths.items()
        for method in path_data
        if method in HTTP_METHODS
    ]
    filtered_tags = filter_tags(document, operations)
    keep_security = inherits_security and document.security is not None

    new_api_spec = create_new_spec(document, extracted_paths, referenced_components, filtered_tags, keep_security)

    retained = {
        kind: list(bucket)
        for kind, bucket in referenced_components.items()
        if kind in COMPONENT_KINDS
    }
    logger.debug(
        "Retained %d paths, %d operations and %d components",
        len(extracted_paths),
        len(operations),
        sum(len(names) for names in retained.values()),
    )

    return TrimResult(load(new_api_spec), missing + diagnostics, retained)
