"""Utilities for key-value format conversions."""
import logging

__all__ = ['seqToKV', 'kvToSeq', 'dictToKV', 'kvToDict', 'KVFormError']


class KVFormError(ValueError):
    pass


def seqToKV(seq, strict=False):
    """Represent a sequence of pairs of strings as newline-terminated
    key:value pairs. The pairs are generated in the order given.

    @param seq: The pairs
    @type seq: list of (str, str)

    @param strict: Raise KVFormError on suspicious but representable
        input (surrounding whitespace) instead of logging it.

    @return: A string representation of the sequence
    @rtype: str
    """
    def err(msg):
        formatted = 'seqToKV warning: %s: %r' % (msg, seq)
        if strict:
            raise KVFormError(formatted)
        logging.debug(formatted)

    lines = []
    for k, v in seq:
        if '\n' in k:
            raise KVFormError(
                'Invalid input for seqToKV: key contains newline: %r' % (k,))

        if ':' in k:
            raise KVFormError(
                'Invalid input for seqToKV: key contains colon: %r' % (k,))

        if k.strip() != k:
            err('Key has whitespace at beginning or end: %r' % (k,))

        if '\n' in v:
            raise KVFormError(
                'Invalid input for seqToKV: value contains newline: %r' % (v,))

        if v.strip() != v:
            err('Value has whitespace at beginning or end: %r' % (v,))

        lines.append(k + ':' + v + '\n')

    return ''.join(lines)


def kvToSeq(data, strict=False):
    """
    Parse newline-terminated key:value pair string into a sequence.

    @param data: The KV form text
    @type data: str

    @return: list of (key, value) pairs in document order
    """
    def err(msg):
        formatted = 'kvToSeq warning: %s: %r' % (msg, data)
        if strict:
            raise KVFormError(formatted)
        logging.debug(formatted)

    lines = data.split('\n')
    if lines[-1]:
        err('Does not end in a newline')
    else:
        del lines[-1]

    pairs = []
    for line_num, line in enumerate(lines, 1):
        if not line.strip():
            continue
        try:
            k, v = line.split(':', 1)
        except ValueError:
            err('Line %d does not contain a colon' % line_num)
            continue
        pairs.append((k, v))

    return pairs


def dictToKV(d):
    '''
    KV form of a dictionary, keys sorted so the output is stable.
    '''
    return seqToKV(sorted(d.items()))


def kvToDict(s):
    return dict(kvToSeq(s))
