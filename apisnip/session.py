from apisnip.closure import trim
from apisnip.document import EndpointKey
from apisnip.ranking import display_list


class Session:
    """
    State of one interactive run: the loaded document, the selected
    endpoints and the current search query.

    The document is never modified; ``trim`` returns a new one.
    """

    def __init__(self, document, selection=None, query=''):
        self.document = document
        self.selection = set()
        self.query = query
        for key in selection or ():
            self.select(key)

    @staticmethod
    def _key(key):
        if isinstance(key, str):
            return EndpointKey.parse(key)
        path, method = key
        return EndpointKey.of(path, method)

    def is_selected(self, key):
        return self._key(key) in self.selection

    def select(self, key):
        """Add an endpoint to the selection; returns False when the document lacks it."""
        key = self._key(key)
        if self.document.operation(key.path, key.method) is None:
            return False
        self.selection.add(key)
        return True

    def toggle(self, key):
        """Flip the selection of an endpoint; returns False when the document lacks it."""
        key = self._key(key)
        if key in self.selection:
            self.selection.discard(key)
            return True
        return self.select(key)

    def select_all_in_filter(self):
        """Select every endpoint in the current display list."""
        for endpoint in self.display_list():
            self.selection.add(endpoint.key)

    def clear(self):
        self.selection.clear()

    def search(self, query):
        self.query = query or ''

    def clear_search(self):
        self.query = ''

    @property
    def searching(self):
        return bool(self.query.strip())

    def display_list(self):
        return display_list(self.document, frozenset(self.selection), self.query)

    def selected_endpoints(self):
        """Selected endpoints in document order."""
        return [e for e in self.document.endpoints() if e.key in self.selection]

    def trim(self):
        return trim(self.document, frozenset(self.selection))
