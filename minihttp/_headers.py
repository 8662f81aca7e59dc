################################################################
# Facts:
#
# Headers are:
#   keys: case-insensitive ascii
#   values: mixture of ascii and raw bytes
#
# "Historically, HTTP has allowed field content with text in the ISO-8859-1
# charset [ISO-8859-1], supporting other charsets only through use of
# [RFC2047] encoding.  In practice, most HTTP header field values use only a
# subset of the US-ASCII charset [USASCII]. Newly defined header fields SHOULD
# limit their field values to US-ASCII octets.  A recipient SHOULD treat other
# octets in field content (obs-text) as opaque data."
#
# So on the way in we decode values as ISO-8859-1, which can't fail and maps
# every byte to exactly one character, and on the way out we encode the same
# way.
#
# Multiple occurences of the same header:
# "A sender MUST NOT generate multiple header fields with the same field name
# in a message unless either the entire field value for that header field is
# defined as a comma-separated list [or the header is Set-Cookie which gets a
# special exception]" - RFC 7230. (cookies are in RFC 6265)
#
# We don't do cookies, and we never send a header twice, so the one rule here
# is: setting a name throws away whatever that name held before.

__all__ = ["Headers", "get_comma_header"]


def _norm_key(key):
    if isinstance(key, (bytes, bytearray)):
        key = bytes(key).decode("latin-1")
    return key.lower()


def _to_str(value):
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("latin-1")
    return str(value)


# Loosely inspired by werkzeug.datastructures.Headers.
class Headers:
    """An ordered collection of ``(name, value)`` string pairs.

    Name lookups ignore case. :meth:`set` replaces every earlier entry with
    the same name and puts the new one at the end, keeping the spelling of
    the name it was given. Iterating yields ``(name, value)`` pairs.

    """

    __slots__ = ("_list",)

    def __init__(self, initial_pairs=()):
        self._list = []
        self.extend(initial_pairs)

    def __iter__(self):
        return iter(self._list)

    def __len__(self):
        return len(self._list)

    def __contains__(self, key):
        key = _norm_key(key)
        return any(_norm_key(name) == key for name, _ in self._list)

    def __getitem__(self, key):
        value = self.get(key)
        if value is None:
            raise KeyError(key)
        return value

    def get(self, key, default=None):
        key = _norm_key(key)
        for name, value in reversed(self._list):
            if _norm_key(name) == key:
                return value
        return default

    def set(self, key, value):
        "Replaces all existing values for key with value, at the end"
        self.discard(key)
        self._list.append((_to_str(key), _to_str(value)))

    __setitem__ = set

    def extend(self, entries):
        if hasattr(entries, "items"):
            entries = entries.items()
        for key, value in entries:
            self.set(key, value)

    def discard(self, key):
        "Discards all entries associated with given key"
        key = _norm_key(key)
        self._list = [entry for entry in self._list
                      if _norm_key(entry[0]) != key]

    def copy(self):
        return Headers(self._list)

    def items(self):
        return list(self._list)

    def __repr__(self):
        return "{}({!r})".format(self.__class__.__name__, self._list)

    def __eq__(self, other):
        if isinstance(other, Headers):
            return self._list == other._list
        if isinstance(other, list):
            return self._list == other
        return NotImplemented

    # This is an unhashable type.
    __hash__ = None


def get_comma_header(headers, name):
    # Should only be used for headers whose value is a list of comma-separated
    # values. Values come back lowercased.
    #
    # Transfer-Encoding: is more complex (allows for quoted strings), so
    # splitting on , is actually wrong. For example, this is legal:
    #
    #    Transfer-Encoding: foo; options="1,2", chunked
    #
    # and should be parsed as
    #
    #    foo; options="1,2"
    #    chunked
    #
    # but this naive function will parse it as
    #
    #    foo; options="1
    #    2"
    #    chunked
    #
    # However, this is okay because the only thing we are going to do with
    # any Transfer-Encoding is check whether the last coding is "chunked".
    value = headers.get(name)
    if value is None:
        return []
    out = []
    for split_value in value.lower().split(","):
        split_value = split_value.strip()
        if split_value:
            out.append(split_value)
    return out
