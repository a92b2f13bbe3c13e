from typing import NamedTuple
from urllib.parse import quote, unquote

from apisnip.errors import DanglingReference, MalformedReference, UnsupportedReference

LOCAL_PREFIX = '#/components/'

COMPONENT_KINDS = (
    'schemas',
    'responses',
    'parameters',
    'examples',
    'requestBodies',
    'headers',
    'securitySchemes',
    'links',
    'callbacks',
    'pathItems',
)


class ComponentKey(NamedTuple):
    """A (kind, name) pair addressing one entry of the components table."""

    kind: str
    name: str

    @property
    def ref(self):
        return LOCAL_PREFIX + '/'.join(_encode_token(t) for t in (self.kind, self.name))

    def __str__(self):
        return self.ref


def _decode_token(token):
    # JSON Pointer escaping per RFC 6901, after undoing URI fragment escaping
    return unquote(token).replace('~1', '/').replace('~0', '~')


def _encode_token(token):
    return quote(token.replace('~', '~0').replace('/', '~1'), safe="~!$&'()*+,;=:@")


def parse_ref(ref):
    """
    Parse a reference string into the component it points at.

    Only local pointers of the form ``#/components/<kind>/<name>`` are
    understood. Pointers that go deeper into an entry, e.g.
    ``#/components/schemas/Pet/properties/id``, address the whole entry.

    Args:
        ref (str): The value of a ``$ref`` key

    Returns:
        ComponentKey: The addressed (kind, name)

    Raises:
        MalformedReference: The string is empty or does not follow the grammar
        UnsupportedReference: The string points outside the local components table
    """
    if not isinstance(ref, str) or not ref.strip():
        raise MalformedReference(ref, "Empty reference")

    if not ref.startswith('#'):
        raise UnsupportedReference(ref, "External reference")
    if not ref.startswith(LOCAL_PREFIX):
        raise UnsupportedReference(ref, "Local pointer outside components")

    tokens = ref[len(LOCAL_PREFIX):].split('/')
    if len(tokens) < 2 or not tokens[0] or not tokens[1]:
        raise MalformedReference(ref, "Reference does not name a component")

    kind = _decode_token(tokens[0])
    if kind not in COMPONENT_KINDS:
        raise MalformedReference(ref, f"Unknown component kind '{kind}'")

    return ComponentKey(kind, _decode_token(tokens[1]))


def resolve(document, ref):
    """
    Dereference a reference against a document's components table.

    Args:
        document (Document): The document owning the components table
        ref (str | ComponentKey): A reference string or an already parsed key

    Returns:
        ComponentEntry: The referenced entry

    Raises:
        MalformedReference, UnsupportedReference: See ``parse_ref``
        DanglingReference: The reference is well formed but names no entry
    """
    key = ref if isinstance(ref, ComponentKey) else parse_ref(ref)
    entry = document.component(key.kind, key.name)
    if entry is None:
        raise DanglingReference(ref if isinstance(ref, str) else key.ref, "No such component")
    return entry


def _mapping_target(target):
    # Discriminator mappings may hold a bare schema name instead of a reference
    if '#' in target or '/' in target:
        return target
    return ComponentKey('schemas', target).ref


def find_refs(obj):
    """
    Recursively find every reference string in a structural tree.

    Besides ``$ref`` values this picks up the targets of discriminator
    mappings, which point at schemas without using ``$ref``. Containers
    shared through YAML anchors are scanned once, so self-containing trees
    terminate.

    Args:
        obj: Any parsed JSON/YAML value

    Returns:
        list: Reference strings in traversal order, duplicates included
    """
    found = []
    seen = set()

    def walk(node, parent_key=None):
        if isinstance(node, (dict, list)):
            if id(node) in seen:
                return
            seen.add(id(node))
        if isinstance(node, dict):
            for key, value in node.items():
                if key == '$ref' and isinstance(value, str):
                    found.append(value)
                elif key == 'mapping' and parent_key == 'discriminator' and isinstance(value, dict):
                    for target in value.values():
                        if isinstance(target, str):
                            found.append(_mapping_target(target))
                else:
                    walk(value, key)
        elif isinstance(node, list):
            for item in node:
                walk(item)

    walk(obj)
    return found
