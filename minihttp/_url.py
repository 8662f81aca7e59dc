import re

from ._util import ErrorKind, HttpError

__all__ = ["URL"]

DEFAULT_PORTS = {"http": 80, "https": 443}

# Both the host and the target end up verbatim on the wire, so they may only
# contain visible ASCII (VCHAR). Anything else has to be percent-encoded by
# the caller.
_vchars_re = re.compile(r"[\x21-\x7e]*")


def _invalid(msg, text):
    return HttpError("{}: {!r}".format(msg, text), ErrorKind.INVALID_URL)


class URL:
    """A parsed ``http://`` or ``https://`` URL.

    Fields:

    .. attribute:: scheme

       ``"http"`` or ``"https"``, always lower-case.

    .. attribute:: host

       The host name or IP address. IPv6 literals are stored without their
       surrounding brackets.

    .. attribute:: port

       The port as an integer; the scheme's default when the URL gives none.

    .. attribute:: target

       The path plus query string, exactly as written in the URL, and exactly
       what goes into the request line. ``"/"`` when the URL has no path.

    """

    __slots__ = ("scheme", "host", "port", "target")

    def __init__(self, scheme, host, port, target="/"):
        self.scheme = scheme
        self.host = host
        self.port = port
        self.target = target

    @classmethod
    def parse(cls, text):
        if not isinstance(text, str):
            raise TypeError("expected str, not {}".format(type(text).__name__))
        scheme, sep, rest = text.partition("://")
        scheme = scheme.lower()
        if not sep or scheme not in DEFAULT_PORTS:
            raise _invalid("URL must start with http:// or https://", text)

        # Fragments are for the client only; they never go on the wire.
        rest = rest.partition("#")[0]

        if rest.startswith("["):
            end = rest.find("]")
            if end == -1:
                raise _invalid("unterminated IPv6 literal", text)
            host = rest[1:end]
            rest = rest[end + 1:]
        else:
            end = len(rest)
            for delim in "/:?":
                idx = rest.find(delim)
                if idx != -1:
                    end = min(end, idx)
            host = rest[:end]
            rest = rest[end:]
        if not host:
            raise _invalid("URL has no host", text)

        port = DEFAULT_PORTS[scheme]
        if rest.startswith(":"):
            end = len(rest)
            for delim in "/?":
                idx = rest.find(delim)
                if idx != -1:
                    end = min(end, idx)
            port_text = rest[1:end]
            if not (port_text.isascii() and port_text.isdigit()):
                raise _invalid("bad port", text)
            if not 0 < int(port_text) < 65536:
                raise _invalid("bad port", text)
            port = int(port_text)
            rest = rest[end:]
        elif rest and rest[0] not in "/?":
            raise _invalid("unexpected characters after host", text)

        if not rest:
            target = "/"
        elif rest.startswith("?"):
            target = "/" + rest
        else:
            target = rest
        if not _vchars_re.fullmatch(host):
            raise _invalid("illegal character in host", text)
        if not _vchars_re.fullmatch(target):
            raise _invalid("illegal character in path or query", text)
        return cls(scheme, host, port, target)

    @property
    def path(self):
        return self.target.partition("?")[0]

    @property
    def query(self):
        path, sep, query = self.target.partition("?")
        return query if sep else None

    @property
    def default_port(self):
        return DEFAULT_PORTS[self.scheme]

    @property
    def is_tls(self):
        return self.scheme == "https"

    @property
    def authority(self):
        # Used for the Host: header, so the port only appears when it's not
        # the one the scheme implies.
        host = "[{}]".format(self.host) if ":" in self.host else self.host
        if self.port == self.default_port:
            return host
        return "{}:{}".format(host, self.port)

    def __str__(self):
        return "{}://{}{}".format(self.scheme, self.authority, self.target)

    def __repr__(self):
        return "{}({!r})".format(self.__class__.__name__, str(self))

    def __eq__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        return (
            self.scheme == other.scheme
            and self.host == other.host
            and self.port == other.port
            and self.target == other.target
        )

    def __hash__(self):
        return hash((self.scheme, self.host, self.port, self.target))
