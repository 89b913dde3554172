# -*- test-case-name: openid_provider.test.test_association -*-
"""
This module contains code for dealing with associations between the
provider and relying parties. Associations contain a shared secret
that is used to sign C{openid.mode=id_res} messages.

The provider only creates associations on its own (no association
session with the relying party is ever negotiated), so every
association it makes is a stateless one: the relying party does not
know the secret and has to ask the provider to check signatures with
a C{check_authentication} request.

C{L{Signatory}} manages the lifecycle of associations in a store:
it creates them, looks them up with lazy expiry and consumes them when
a signature is verified.
"""
import base64
import logging
import time

from openid_provider import cryptutil
from openid_provider.store.interface import DuplicateAssociation, \
     AssociationStoreError

__all__ = [
    'Association',
    'Signatory',
    'UnsupportedAssociationType',
    'HMAC_SHA1',
    'HMAC_SHA256',
]

HMAC_SHA1 = 'HMAC-SHA1'
HMAC_SHA256 = 'HMAC-SHA256'


class UnsupportedAssociationType(ValueError):
    pass


class Association(object):
    """
    This class represents an association between the provider and a
    relying party.

    @ivar endpoint: The relying party context of this association. It
        is C{''} for associations created by the provider on its own.
    @type endpoint: str

    @ivar handle: The handle naming this association within its
        endpoint.
    @type handle: str

    @ivar secret: The shared secret.
    @type secret: bytes

    @ivar assoc_type: C{'HMAC-SHA1'} or C{'HMAC-SHA256'}.
    @type assoc_type: str

    @ivar expires: Unix timestamp at which the association stops being
        valid.
    @type expires: float

    @cvar hmac_algorithms: Mapping of association type to HMAC function.
    """

    hmac_algorithms = {
        HMAC_SHA1: cryptutil.hmacSha1,
        HMAC_SHA256: cryptutil.hmacSha256,
    }

    def __init__(self, endpoint, handle, secret, assoc_type, expires):
        if assoc_type not in self.hmac_algorithms:
            raise UnsupportedAssociationType(
                '%r is not a supported association type' % (assoc_type,))
        self.endpoint = endpoint
        self.handle = handle
        self.secret = secret
        self.assoc_type = assoc_type
        self.expires = expires

    @classmethod
    def fromExpiresIn(cls, expires_in, endpoint, handle, secret, assoc_type):
        """
        Alternate constructor taking the lifetime in seconds from now
        instead of an absolute expiry time.
        """
        return cls(endpoint, handle, secret, assoc_type, time.time() + expires_in)

    def getExpiresIn(self, now=None):
        """
        This returns the number of seconds this association is still
        valid for, or C{0} if the association is no longer valid.

        @rtype: float
        """
        if now is None:
            now = time.time()

        return max(0, self.expires - now)

    expiresIn = property(getExpiresIn)

    def isExpired(self, now=None):
        return self.getExpiresIn(now) <= 0

    def __eq__(self, other):
        return type(self) == type(other) and self.__dict__ == other.__dict__

    def __ne__(self, other):
        return not (self == other)

    def sign(self, signed_list, params):
        """
        Generate the signature of the fields named in C{signed_list}.

        The signed text is one C{field:value} line per field in the given
        order, with a missing field contributing an empty value. Values
        are signed as they are, newlines included.

        @param signed_list: Field names, in signing order
        @type signed_list: list of str

        @param params: The message fields
        @type params: dict

        @return: The signature, URL-safe base64 encoded
        @rtype: str

        @raises UnsupportedAssociationType: for an unknown association type
        """
        try:
            algorithm = self.hmac_algorithms[self.assoc_type]
        except KeyError:
            raise UnsupportedAssociationType(
                'Unknown association type: %r' % (self.assoc_type,))

        text = ''.join('%s:%s\n' % (field, params.get(field, '')) for field in signed_list)
        mac = algorithm(self.secret, text.encode('utf-8'))
        return base64.urlsafe_b64encode(mac).decode('ascii')

    def checkSignature(self, sig, signed_list, params):
        """Recalculate the signature over the fields and compare it with
        C{sig} in constant time.

        @rtype: bool
        """
        calculated_sig = self.sign(signed_list, params)
        return cryptutil.constEq(calculated_sig, sig)

    def __repr__(self):
        return "<%s.%s %s %r>" % (
            self.__class__.__module__,
            self.__class__.__name__,
            self.assoc_type,
            self.handle)


class Signatory(object):
    """Creates, looks up, and consumes associations kept in a store.

    @ivar store: an object implementing
        C{L{openid_provider.store.interface.AssociationStore}}

    @cvar lifetime: Seconds a new association stays valid.
    @cvar handle_attempts: How many handles to try before giving up
        on storing a new association.
    @cvar secret_size: Length of the generated secrets in bytes.
    @cvar assoc_type: Type of the associations created.
    """
    lifetime = 60
    handle_attempts = 10
    secret_size = 128
    assoc_type = HMAC_SHA256

    def __init__(self, store):
        if store is None:
            raise TypeError('Signatory needs an association store')
        self.store = store

    def getAssociation(self, handle, endpoint=''):
        """Return the unexpired association stored under the handle or
        C{None}. An expired association found on the way is deleted.
        """
        assoc = self.store.get(endpoint, handle)
        if assoc is not None and assoc.isExpired():
            logging.info('Association %r for %r expired, removing' % (handle, endpoint))
            self.store.delete(endpoint, handle)
            assoc = None
        return assoc

    def getOrCreate(self, handle, endpoint=''):
        """Return the association the relying party asked for if it is
        still valid, otherwise a freshly created one.

        @param handle: The handle supplied by the relying party, may be
            empty.
        @type handle: str

        @raises AssociationStoreError: if the association could not be
            stored.
        """
        if handle:
            assoc = self.getAssociation(handle, endpoint)
            if assoc is not None:
                return assoc
        return self.createAssociation(endpoint)

    def createAssociation(self, endpoint=''):
        """Create a new association and put it into the store.

        A new random handle is tried whenever the store reports a
        duplicate, up to C{handle_attempts} times.

        @raises AssociationStoreError: if every handle collided.
        """
        secret = cryptutil.getBytes(self.secret_size)
        for _ in range(self.handle_attempts):
            assoc = Association.fromExpiresIn(
                self.lifetime, endpoint, cryptutil.randomToken(16),
                secret, self.assoc_type)
            try:
                self.store.add(assoc)
            except DuplicateAssociation:
                logging.warning('Association handle collision for %r, retrying' % (endpoint,))
                continue
            logging.info('Created %s association for %r' % (assoc.assoc_type, endpoint))
            return assoc
        raise AssociationStoreError(
            'cannot store association: %d handle collisions' % self.handle_attempts)

    def verify(self, handle, sig, signed_list, params, endpoint=''):
        """Check a signature made with one of our associations.

        A successful check consumes the association, so the same
        verification can't be replayed. A failed check leaves it in
        place.

        @rtype: bool
        """
        assoc = self.getAssociation(handle, endpoint)
        if assoc is None:
            logging.info('No valid association %r to verify signature' % (handle,))
            return False

        if not assoc.checkSignature(sig, signed_list, params):
            logging.info('Signature mismatch for association %r' % (handle,))
            return False

        # Only one of concurrent verifications gets to remove it
        return self.store.delete(endpoint, handle)

    def removeExpired(self, endpoint='', now=None):
        """Delete every expired association of an endpoint.

        @returns: the number of associations removed
        @rtype: int
        """
        removed = 0
        for assoc in self.store.find(endpoint):
            if assoc.isExpired(now) and self.store.delete(endpoint, assoc.handle):
                removed += 1
        return removed
