"""
Specification Extractor

Turns a free-form idea conversation into a structured IdeaSpecification
with a single completion request.
"""
import json
import logging

from pydantic import ValidationError

from ..errors import MalformedSpecification, UpstreamUnavailable
from ..llm import LLMProvider, LLMError, get_model_for_task, strip_code_fence
from ..prompts.idea import SPECIFICATION_REQUEST
from ..schemas.idea import ConversationMessage, IdeaSpecification
from ..tracer import trace_section, trace_input, trace_call, trace_result, trace_output
from .conversation import ConversationLog

logger = logging.getLogger(__name__)


class SpecExtractor:
    """
    One-shot extraction of an IdeaSpecification.

    All-or-nothing: the result is either a fully validated specification
    or an exception. There is no retry and no accumulation between runs.
    """

    def __init__(self, llm: LLMProvider):
        self.llm = llm

    @staticmethod
    def parse(raw_text: str) -> IdeaSpecification:
        """Parse a completion response into a specification."""
        cleaned = strip_code_fence(raw_text)
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as e:
            raise MalformedSpecification(f"Specification is not valid JSON: {e}")

        if not isinstance(data, dict):
            raise MalformedSpecification("Specification must be a JSON object")

        try:
            return IdeaSpecification.model_validate(data)
        except ValidationError as e:
            raise MalformedSpecification(
                f"Specification is incomplete: {e.error_count()} problem(s)"
            )

    async def extract(self, log: ConversationLog) -> IdeaSpecification:
        """
        Ask the completion service for the specification of a conversation.

        The caller's log is left untouched; the request message is appended
        to a copy.
        """
        trace_section("Specification Extraction")
        trace_input("engine.spec_extractor", "messages", len(log))

        request_log = log.copy()
        request_log.append(ConversationMessage(role="user", content=SPECIFICATION_REQUEST))

        trace_call("engine.spec_extractor", "llm.complete", "extraction model")
        try:
            raw = await self.llm.complete(
                request_log.as_payload(),
                model=get_model_for_task("spec_extraction"),
                temperature=0.3,
            )
        except LLMError as e:
            trace_result("engine.spec_extractor", "llm.complete", False, str(e))
            logger.error(f"Specification extraction failed upstream: {e}")
            raise UpstreamUnavailable(str(e))
        trace_result("engine.spec_extractor", "llm.complete", True, raw)

        try:
            spec = self.parse(raw)
        except MalformedSpecification as e:
            logger.warning(f"Malformed specification response: {e.message}")
            raise

        trace_output("engine.spec_extractor", "purpose", spec.purpose)
        return spec
