"""
Library error codes.

The engine reports failures as negative integers. Library-specific codes are
4-byte tags packed little-endian (``-tag_to_code(b"EOF ")`` is end of stream);
everything else is a negated errno. This module holds the positive tag values.
"""

from enum import IntEnum

__all__ = [
    "STASHED_ERROR_CODE",
    "STASHED_ERROR_MESSAGE",
    "ErrorType",
    "code_to_tag",
    "tag_to_code",
]


def code_to_tag(code: int) -> bytes:
    """Convert an integer error code into its 4-byte tag.

    >>> code_to_tag(1953719668)
    b'test'
    """
    return bytes(
        (
            code & 0xFF,
            (code >> 8) & 0xFF,
            (code >> 16) & 0xFF,
            (code >> 24) & 0xFF,
        )
    )


def tag_to_code(tag: bytes) -> int:
    """Convert a 4-byte error tag into an integer code.

    >>> tag_to_code(b'test')
    1953719668
    """
    if len(tag) != 4:
        raise ValueError("Error tags are 4 bytes.")
    return tag[0] + (tag[1] << 8) + (tag[2] << 16) + (tag[3] << 24)


# Returned (negated) by a callback that stashed an exception.
STASHED_ERROR_CODE = tag_to_code(b"MDIO")
STASHED_ERROR_MESSAGE = "Error in I/O callback"


class ErrorType(IntEnum):
    """Recognized library error codes (positive form).

    Mirrors the errno module: ``ErrorType.EOF`` is the code whose negation
    the engine returns at end of stream.
    """

    BSF_NOT_FOUND = tag_to_code(b"\xf8BSF")
    BUG = tag_to_code(b"BUG!")
    BUFFER_TOO_SMALL = tag_to_code(b"BUFS")
    DECODER_NOT_FOUND = tag_to_code(b"\xf8DEC")
    DEMUXER_NOT_FOUND = tag_to_code(b"\xf8DEM")
    ENCODER_NOT_FOUND = tag_to_code(b"\xf8ENC")
    EOF = tag_to_code(b"EOF ")
    EXIT = tag_to_code(b"EXIT")
    EXTERNAL = tag_to_code(b"EXT ")
    FILTER_NOT_FOUND = tag_to_code(b"\xf8FIL")
    INVALIDDATA = tag_to_code(b"INDA")
    MUXER_NOT_FOUND = tag_to_code(b"\xf8MUX")
    OPTION_NOT_FOUND = tag_to_code(b"\xf8OPT")
    PATCHWELCOME = tag_to_code(b"PAWE")
    PROTOCOL_NOT_FOUND = tag_to_code(b"\xf8PRO")
    STREAM_NOT_FOUND = tag_to_code(b"\xf8STR")
    UNKNOWN = tag_to_code(b"UNKN")
    EXPERIMENTAL = 0x2BB2AFA8
    INPUT_CHANGED = 0x636E6701
    OUTPUT_CHANGED = 0x636E6702
    HTTP_BAD_REQUEST = tag_to_code(b"\xf8400")
    HTTP_UNAUTHORIZED = tag_to_code(b"\xf8401")
    HTTP_FORBIDDEN = tag_to_code(b"\xf8403")
    HTTP_NOT_FOUND = tag_to_code(b"\xf8404")
    HTTP_OTHER_4XX = tag_to_code(b"\xf84XX")
    HTTP_SERVER_ERROR = tag_to_code(b"\xf85XX")
    STASHED_CALLBACK = STASHED_ERROR_CODE

    @property
    def tag(self) -> bytes:
        """The 4-byte tag for this error."""
        return code_to_tag(self.value)

    @property
    def strerror(self) -> str:
        """The message the engine renders for this error."""
        return _MESSAGES[self.name]

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}.{self.name}: 0x{self.value:x}>"


_MESSAGES = {
    "BSF_NOT_FOUND": "Bitstream filter not found",
    "BUG": "Internal bug, should not have happened",
    "BUFFER_TOO_SMALL": "Buffer too small",
    "DECODER_NOT_FOUND": "Decoder not found",
    "DEMUXER_NOT_FOUND": "Demuxer not found",
    "ENCODER_NOT_FOUND": "Encoder not found",
    "EOF": "End of file",
    "EXIT": "Immediate exit requested",
    "EXTERNAL": "Generic error in an external library",
    "FILTER_NOT_FOUND": "Filter not found",
    "INVALIDDATA": "Invalid data found when processing input",
    "MUXER_NOT_FOUND": "Muxer not found",
    "OPTION_NOT_FOUND": "Option not found",
    "PATCHWELCOME": "Not yet implemented, patches welcome",
    "PROTOCOL_NOT_FOUND": "Protocol not found",
    "STREAM_NOT_FOUND": "Stream not found",
    "UNKNOWN": "Unknown error occurred",
    "EXPERIMENTAL": "Experimental feature",
    "INPUT_CHANGED": "Input changed",
    "OUTPUT_CHANGED": "Output changed",
    "HTTP_BAD_REQUEST": "Server returned 400 Bad Request",
    "HTTP_UNAUTHORIZED": "Server returned 401 Unauthorized (authorization failed)",
    "HTTP_FORBIDDEN": "Server returned 403 Forbidden (access denied)",
    "HTTP_NOT_FOUND": "Server returned 404 Not Found",
    "HTTP_OTHER_4XX": "Server returned 4XX Client Error, but not one of 40{0,1,3,4}",
    "HTTP_SERVER_ERROR": "Server returned 5XX Server Error reply",
    "STASHED_CALLBACK": STASHED_ERROR_MESSAGE,
}
