"""
Follow-Through Tracer

Step-by-step tracing of the stage workflow when FOLLOW_THROUGH=true:
completion calls, specification extraction, stage transitions and
deployment status changes.
"""
import logging
from typing import Any
from datetime import datetime

from .config import settings

tracer = logging.getLogger("nofuss.followthrough")


def _preview(data: Any, max_len: int = 60) -> str:
    if data is None:
        return "<None>"
    text = str(data).replace("\n", " ")
    return f"{text[:max_len]}..." if len(text) > max_len else text


def _emit(icon: str, label: str, module: str, detail: str = "") -> None:
    if not settings.follow_through:
        return
    clock = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    line = f"[{clock}] {icon} [{module}] {label}"
    tracer.info(f"{line}: {detail}" if detail else line)


def trace_input(module: str, input_name: str, value: Any):
    """Value entering a workflow step."""
    _emit("→", f"INPUT {input_name}", module, _preview(value))


def trace_output(module: str, output_name: str, value: Any):
    """Value produced by a workflow step."""
    _emit("←", f"OUTPUT {output_name}", module, _preview(value))


def trace_step(module: str, description: str):
    _emit("•", "STEP", module, description)


def trace_call(module: str, function: str, args_preview: str = ""):
    """Outgoing call to a collaborator (completion service, build environment)."""
    detail = f"{function}()"
    if args_preview:
        detail += f" <- {args_preview}"
    _emit("▶", "CALL", module, detail)


def trace_result(module: str, function: str, success: bool, result_preview: Any = None):
    detail = f"{function}() {'ok' if success else 'FAILED'}"
    if result_preview is not None:
        detail += f" => {_preview(result_preview)}"
    _emit("◀", "RESULT", module, detail)


def trace_transition(module: str, from_state: str, to_state: str):
    """Stage or deployment status change."""
    if from_state == to_state:
        _emit("=", "UNCHANGED", module, to_state)
    else:
        _emit("⇒", "TRANSITION", module, f"{from_state} -> {to_state}")


def trace_section(title: str):
    """Divider before a workflow operation."""
    if not settings.follow_through:
        return
    tracer.info(f"── {title.upper()} " + "─" * max(4, 36 - len(title)))


def setup_follow_through_logging():
    """Send the tracer to stderr on its own, bypassing the root logger."""
    if not settings.follow_through:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    tracer.addHandler(handler)
    tracer.setLevel(logging.INFO)
    tracer.propagate = False

    tracer.info("NoFuss follow-through tracing enabled")
