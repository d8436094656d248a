# Memory Layer
# MemoryBank lives in .bank; it depends on the project store, which
# depends on the materializer below.
from .content import encode_content, decode_content, render_content
from .materializer import derive_memories
from .views import MemoryFilter, toggle_tag

__all__ = [
    "encode_content",
    "decode_content",
    "render_content",
    "derive_memories",
    "MemoryFilter",
    "toggle_tag",
]
