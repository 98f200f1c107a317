"""
Native declarations for the custom I/O bridge.

Justification: Holds the ctypes Structure and CFUNCTYPE definitions that
must match the engine's C ABI bit for bit. Callback types require manual
CFUNCTYPE definition; everything here is data, no behavior.
"""

import ctypes

# =============================================================================
# Seek / I/O Constants
# =============================================================================

SEEK_SET = 0
SEEK_CUR = 1
SEEK_END = 2

# Ad hoc whence: the engine asks for the total stream size.
AVSEEK_SIZE = 0x10000
# Ad hoc flag: seek even if it would be expensive. Stripped before dispatch.
AVSEEK_FORCE = 0x20000

IO_SEEKABLE_NORMAL = 1

ERROR_MAX_STRING_SIZE = 64

# Native log levels (ascending verbosity).
LOG_QUIET = -8
LOG_PANIC = 0
LOG_FATAL = 8
LOG_ERROR = 16
LOG_WARNING = 24
LOG_INFO = 32
LOG_VERBOSE = 40
LOG_DEBUG = 48
LOG_TRACE = 56

# =============================================================================
# Callback Types
# =============================================================================

# int read_packet(void *opaque, uint8_t *buf, int buf_size)
ReadPacketFunc = ctypes.CFUNCTYPE(
    ctypes.c_int,
    ctypes.c_void_p,  # opaque
    ctypes.POINTER(ctypes.c_uint8),  # buf
    ctypes.c_int,  # buf_size
)

# int write_packet(void *opaque, const uint8_t *buf, int buf_size)
WritePacketFunc = ctypes.CFUNCTYPE(
    ctypes.c_int,
    ctypes.c_void_p,
    ctypes.POINTER(ctypes.c_uint8),
    ctypes.c_int,
)

# int64_t seek(void *opaque, int64_t offset, int whence)
SeekFunc = ctypes.CFUNCTYPE(
    ctypes.c_int64,
    ctypes.c_void_p,  # opaque
    ctypes.c_int64,  # offset
    ctypes.c_int,  # whence
)

# void log_callback(int level, const char *category, const char *message)
LogCallbackFunc = ctypes.CFUNCTYPE(
    None,
    ctypes.c_int,
    ctypes.c_char_p,
    ctypes.c_char_p,
)

# =============================================================================
# Structures
# =============================================================================


class IOContext(ctypes.Structure):
    """Engine-owned buffered I/O context.

    Once allocated by ``io_context_alloc`` the context owns ``buffer`` and
    may replace it; callers must free ``buffer`` through the context, never
    through the pointer they originally handed over.
    """

    _fields_ = [
        ("buffer", ctypes.POINTER(ctypes.c_uint8)),
        ("buffer_size", ctypes.c_int),
        ("buf_ptr", ctypes.c_int),  # bytes pending in buffer (write mode)
        ("write_flag", ctypes.c_int),
        ("opaque", ctypes.c_void_p),
        ("read_packet", ReadPacketFunc),
        ("write_packet", WritePacketFunc),
        ("seek", SeekFunc),
        ("pos", ctypes.c_int64),
        ("eof_reached", ctypes.c_int),
        ("error", ctypes.c_int),
        ("seekable", ctypes.c_int),
        ("max_packet_size", ctypes.c_int),
    ]


IOContextPtr = ctypes.POINTER(IOContext)
