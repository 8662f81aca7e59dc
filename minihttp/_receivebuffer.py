import re

__all__ = ["ReceiveBuffer"]


# Operations we want to support:
# - find next \r\n or \r\n\r\n (\n or \n\n are also acceptable),
#   or wait until there is one
# - read at-most-N bytes
# - read exactly-N bytes, or wait until there are that many
# Goals:
# - worst case, do this in O(n) where n is the number of bytes processed
# Plan:
# - store a bytearray; deleting an initial slice of a bytearray is amortized
#   O(n), so we can just chop off whatever we hand out
# - remember how far we've already searched for a separator, so a slowly
#   arriving header block doesn't get rescanned on every read

blank_line_regex = re.compile(b"\n\r?\n", re.MULTILINE)


class ReceiveBuffer:
    def __init__(self):
        self._data = bytearray()
        self._next_line_search = 0
        self._multiple_lines_search = 0

    def __iadd__(self, byteslike):
        self._data += byteslike
        return self

    def __bool__(self):
        return bool(len(self))

    def __len__(self):
        return len(self._data)

    # for tests and for checking what a proxy left behind
    def __bytes__(self):
        return bytes(self._data)

    def _extract(self, count):
        out = self._data[:count]
        del self._data[:count]

        self._next_line_search = 0
        self._multiple_lines_search = 0

        return out

    def maybe_extract_at_most(self, count):
        """
        Extract up to ``count`` bytes from the buffer, or None if it's empty.
        """
        if not self._data:
            return None
        return self._extract(count)

    def maybe_extract_exactly(self, count):
        """
        Extract exactly ``count`` bytes, or None if fewer are buffered.
        """
        if len(self._data) < count:
            return None
        return self._extract(count)

    def maybe_extract_next_line(self):
        """
        Extract the first line, including its \\r\\n, if it is complete.
        """
        # Only search in buffer space that we've not already looked at.
        search_start_index = max(0, self._next_line_search - 1)
        partial_idx = self._data.find(b"\r\n", search_start_index)

        if partial_idx == -1:
            self._next_line_search = len(self._data)
            return None

        # + 2 is to compensate len(b"\r\n")
        return self._extract(partial_idx + 2)

    def maybe_extract_lines(self):
        """
        Extract everything up to the first blank line, and return a list of
        lines with their line endings stripped.
        """
        # Handle the case where we have an immediate empty line.
        if self._data[:1] == b"\n":
            self._extract(1)
            return []

        if self._data[:2] == b"\r\n":
            self._extract(2)
            return []

        match = blank_line_regex.search(self._data, self._multiple_lines_search)
        if match is None:
            self._multiple_lines_search = max(0, len(self._data) - 2)
            return None

        out = self._extract(match.span(0)[-1])
        lines = [line.rstrip(b"\r") for line in out.split(b"\n")]

        assert lines[-2] == lines[-1] == b""

        del lines[-2:]

        return lines
