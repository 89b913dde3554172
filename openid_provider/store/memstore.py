"""A simple store using only in-process memory."""
import threading

from openid_provider.store.interface import AssociationStore, \
     DuplicateAssociation


class MemoryStore(AssociationStore):
    """In-process memory store.

    Use for single long-running processes. Associations are lost when
    the process exits and are not shared between processes.

    @ivar associations: two-level dictionary, endpoint -> handle ->
        association
    """

    def __init__(self):
        self.associations = {}
        self._lock = threading.Lock()

    def add(self, association):
        with self._lock:
            assocs = self.associations.setdefault(association.endpoint, {})
            if association.handle in assocs:
                raise DuplicateAssociation(association.handle)
            assocs[association.handle] = association

    def get(self, endpoint, handle):
        with self._lock:
            return self.associations.get(endpoint, {}).get(handle)

    def find(self, endpoint):
        with self._lock:
            assocs = self.associations.get(endpoint, {})
            return [assocs[handle] for handle in sorted(assocs)]

    def delete(self, endpoint, handle):
        with self._lock:
            assocs = self.associations.get(endpoint)
            if not assocs or handle not in assocs:
                return False
            del assocs[handle]
            if not assocs:
                del self.associations[endpoint]
            return True

    def __len__(self):
        with self._lock:
            return sum(len(assocs) for assocs in self.associations.values())
