"""
This module contains the definition of the C{L{AssociationStore}}
interface.
"""


class DuplicateAssociation(Exception):
    """Raised by C{L{AssociationStore.add}} when an association with
    the same endpoint and handle is already stored. The provider
    reacts by generating a new handle."""


class AssociationStoreError(Exception):
    """The store could not complete an operation."""


class AssociationStore(object):
    """
    This is the interface for the association stores the provider
    uses. Associations are keyed by an endpoint and a handle. The
    provider itself only uses the empty endpoint C{''} for the
    associations it creates for stateless relying parties.

    Stores are shared between concurrent requests, so C{L{add}} and
    C{L{delete}} must each be atomic.

    @sort: add, get, find, delete
    """

    def add(self, association):
        """
        Put an C{L{Association<openid_provider.association.Association>}}
        into storage, retrievable by its endpoint and handle.

        Checking for an existing entry and inserting the new one must
        happen atomically: of two concurrent calls with the same key
        exactly one may succeed.

        @param association: The association to store.

        @raises DuplicateAssociation: if an association with the same
            endpoint and handle is already stored.

        @return: C{None}
        """
        raise NotImplementedError

    def get(self, endpoint, handle):
        """
        Return the association stored under the endpoint and handle,
        or C{None} if there is none. Expired associations are
        returned as well; checking expiry is the caller's job.

        @type endpoint: str
        @type handle: str

        @rtype: C{L{Association<openid_provider.association.Association>}}
            or C{NoneType}
        """
        raise NotImplementedError

    def find(self, endpoint):
        """
        Return all associations stored for an endpoint.

        @type endpoint: str

        @rtype: list
        """
        raise NotImplementedError

    def delete(self, endpoint, handle):
        """
        Remove the association stored under the endpoint and handle.
        Deleting a missing association is not an error.

        @type endpoint: str
        @type handle: str

        @return: C{True} if this call removed the association,
            C{False} if there was nothing to remove. Under concurrent
            calls for the same key at most one returns C{True}.
        @rtype: bool
        """
        raise NotImplementedError
